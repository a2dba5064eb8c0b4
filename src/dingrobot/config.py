"""로봇 계정 설정.

두 종류의 계정을 지원한다.
- DINGTALK: 표준 모드. access_token + (선택) 서명 secret.
- WECHAT_WORK: 호환 모드. 텍스트 메시지만 허용하고 서명은 무시한다.

설정 파일 형식::

    {
        "type": "dingtalk",              // 선택, wechat/wechatwork/wecom 이면 호환 모드
        "access_token": "<access token>",
        "sec_token": "<secret>",         // 선택, "secret" 키도 허용
        "default_webhook_url": "",       // 선택
        "direct_url": ""                 // 선택, 지정 시 계산된 URL 대신 그대로 사용
    }
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dingrobot.errors import ConfigurationError
from dingrobot.settings import RobotSettings

DEFAULT_DINGTALK_ROBOT_URL = "https://oapi.dingtalk.com/robot/send"
DEFAULT_WECHAT_WORK_ROBOT_URL = "https://qyapi.weixin.qq.com/cgi-bin/webhook/send"

_WECHAT_WORK_TYPE_NAMES = frozenset({"wechat", "wechatwork", "wecom"})


class RobotKind(str, Enum):
    DINGTALK = "dingtalk"
    WECHAT_WORK = "wechat_work"

    @property
    def default_webhook_url(self) -> str:
        if self is RobotKind.WECHAT_WORK:
            return DEFAULT_WECHAT_WORK_ROBOT_URL
        return DEFAULT_DINGTALK_ROBOT_URL

    @property
    def token_param(self) -> str:
        """토큰을 싣는 쿼리 파라미터 이름."""
        if self is RobotKind.WECHAT_WORK:
            return "key"
        return "access_token"

    @classmethod
    def from_type_name(cls, type_name: str | None) -> RobotKind:
        if type_name and type_name.strip().lower() in _WECHAT_WORK_TYPE_NAMES:
            return cls.WECHAT_WORK
        return cls.DINGTALK


class RobotConfig(BaseModel):
    """인스턴스 생성 후 변경되지 않는 로봇 설정."""

    kind: RobotKind = RobotKind.DINGTALK
    access_token: str = Field(default="", repr=False)
    secret: str | None = Field(default=None, repr=False)
    webhook_url: str | None = None
    direct_url: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_compatibility_mode(self) -> bool:
        return self.kind is RobotKind.WECHAT_WORK

    @property
    def signing_enabled(self) -> bool:
        # 호환 모드에서는 secret 이 있어도 서명하지 않는다
        return self.kind is RobotKind.DINGTALK and bool(self.secret)

    @property
    def base_url(self) -> str:
        return self.webhook_url or self.kind.default_webhook_url

    @classmethod
    def dingtalk(cls, access_token: str, secret: str | None = None) -> RobotConfig:
        return cls(kind=RobotKind.DINGTALK, access_token=access_token, secret=secret or None)

    @classmethod
    def wechat_work(cls, key: str) -> RobotConfig:
        return cls(kind=RobotKind.WECHAT_WORK, access_token=key)

    @classmethod
    def from_url(cls, direct_url: str) -> RobotConfig:
        """outgoing 로봇처럼 완성된 웹훅 URL 을 이미 가진 경우."""
        if not direct_url:
            raise ConfigurationError("direct_url is empty")
        return cls(direct_url=direct_url)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> RobotConfig:
        """파싱된 JSON 오브젝트로부터 설정을 만든다."""
        type_name = data.get("type")
        if type_name is not None and not isinstance(type_name, str):
            raise ConfigurationError("'type' must be a string")
        kind = RobotKind.from_type_name(type_name)

        secret = data.get("sec_token") or data.get("secret") or None
        direct_url = data.get("direct_url") or None
        access_token = data.get("access_token") or ""
        if not access_token and not direct_url:
            raise ConfigurationError("'access_token' is required")

        try:
            return cls(
                kind=kind,
                access_token=access_token,
                secret=secret,
                webhook_url=data.get("default_webhook_url") or None,
                direct_url=direct_url,
            )
        except ValidationError as exc:
            raise ConfigurationError(f"invalid robot config: {exc}") from exc

    @classmethod
    def from_json(cls, text: str) -> RobotConfig:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"robot config is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError("robot config must be a JSON object")
        return cls.from_mapping(data)

    @classmethod
    def from_file(cls, path: str | Path) -> RobotConfig:
        """JSON 설정 파일을 동기적으로 읽는다. `~` 는 홈 디렉터리로 확장한다."""
        file_path = Path(path).expanduser()
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"cannot read robot config file {file_path}: {exc}") from exc
        return cls.from_json(text)

    @classmethod
    def from_token(cls, token: str) -> RobotConfig:
        """접두어 토큰 문자열로부터 설정을 만든다.

        - ``dingtalk:<access_token>`` 또는 ``dingtalk:<access_token>?<secret>``
        - ``wechatwork:<key>`` / ``wecom:<key>``
        """
        if token.startswith("dingtalk:"):
            access_token, _, secret = token[len("dingtalk:"):].partition("?")
            return cls.dingtalk(access_token, secret or None)
        for prefix in ("wechatwork:", "wecom:"):
            if token.startswith(prefix):
                return cls.wechat_work(token[len(prefix):])
        raise ConfigurationError(
            "unknown token format, expected 'dingtalk:', 'wechatwork:' or 'wecom:' prefix"
        )

    @classmethod
    def from_settings(cls, settings: RobotSettings) -> RobotConfig:
        if settings.token_file:
            return cls.from_file(settings.token_file)
        return cls.from_mapping(
            {
                "type": settings.robot_type,
                "access_token": settings.access_token,
                "secret": settings.secret,
                "default_webhook_url": settings.webhook_url,
                "direct_url": settings.direct_url,
            }
        )
