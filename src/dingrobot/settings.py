from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RobotSettings(BaseSettings):
    """로봇 웹훅 관련 설정."""

    access_token: str = Field(default="", alias="DINGTALK_ACCESS_TOKEN")
    secret: str = Field(default="", alias="DINGTALK_SECRET")
    robot_type: str = Field(
        default="dingtalk",
        alias="DINGTALK_TYPE",
        description="dingtalk 또는 wechat/wechatwork/wecom (호환 모드)",
    )
    webhook_url: str = Field(default="", alias="DINGTALK_WEBHOOK_URL")
    direct_url: str = Field(default="", alias="DINGTALK_DIRECT_URL")
    token_file: str = Field(
        default="",
        alias="DINGTALK_TOKEN_FILE",
        description="지정하면 다른 값 대신 이 JSON 파일에서 설정을 읽는다",
    )
    timeout: float = Field(default=10.0, alias="DINGTALK_TIMEOUT")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class Settings(BaseSettings):
    """애플리케이션 전역 설정."""

    robot: RobotSettings = Field(default_factory=RobotSettings)

    model_config = SettingsConfigDict(env_file=".env", env_nested_delimiter="__", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """설정을 캐싱해 로드한다."""
    return Settings()
