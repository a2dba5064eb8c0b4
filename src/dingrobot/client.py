"""DingTalk 웹훅 로봇 클라이언트 (WeChat Work 호환 모드 포함)."""

from __future__ import annotations

import json
import time
from collections.abc import Iterable
from pathlib import Path
from types import TracebackType
from typing import Any
from urllib.parse import quote, urlsplit

from dingrobot import signer
from dingrobot.config import RobotConfig
from dingrobot.errors import ConfigurationError, RemoteError, TransportError
from dingrobot.logging import get_logger
from dingrobot.messages import (
    ActionCardButton,
    ActionCardLayout,
    ActionCardMessage,
    FeedCardLink,
    FeedCardMessage,
    LinkMessage,
    MarkdownMessage,
    Message,
    TextMessage,
)
from dingrobot.protocols import RobotTransport
from dingrobot.settings import RobotSettings, get_settings
from dingrobot.transport import HttpxTransport


class DingTalkRobot:
    """웹훅 로봇 클라이언트.

    send_* 호출마다 정확히 한 번 POST 하며 재시도/캐시는 없다.
    설정은 생성 후 읽기 전용이므로 같은 인스턴스로 동시에 여러 send 를 실행해도 된다.

    사용 예::

        async with DingTalkRobot.from_file("~/.dingtalk-token.json") as robot:
            await robot.send_text("Hello world!")
            await robot.send_message(TextMessage(content="Hello!").at_all())
    """

    def __init__(
        self,
        config: RobotConfig,
        transport: RobotTransport | None = None,
        *,
        timeout: float = 10.0,
    ) -> None:
        self.config = config
        self._owns_transport = transport is None
        self._transport: RobotTransport = transport or HttpxTransport(timeout=timeout)
        self._logger = get_logger("dingrobot.client")

    @classmethod
    def from_credentials(
        cls,
        access_token: str,
        secret: str | None = None,
        **kwargs: Any,
    ) -> DingTalkRobot:
        return cls(RobotConfig.dingtalk(access_token, secret), **kwargs)

    @classmethod
    def from_json(cls, text: str, **kwargs: Any) -> DingTalkRobot:
        return cls(RobotConfig.from_json(text), **kwargs)

    @classmethod
    def from_file(cls, path: str | Path, **kwargs: Any) -> DingTalkRobot:
        return cls(RobotConfig.from_file(path), **kwargs)

    @classmethod
    def from_token(cls, token: str, **kwargs: Any) -> DingTalkRobot:
        return cls(RobotConfig.from_token(token), **kwargs)

    @classmethod
    def from_url(cls, direct_url: str, **kwargs: Any) -> DingTalkRobot:
        return cls(RobotConfig.from_url(direct_url), **kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: RobotSettings | None = None,
        **kwargs: Any,
    ) -> DingTalkRobot:
        settings = settings or get_settings().robot
        kwargs.setdefault("timeout", settings.timeout)
        return cls(RobotConfig.from_settings(settings), **kwargs)

    async def aclose(self) -> None:
        # 외부에서 주입한 transport 는 호출자가 닫는다
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            await self._transport.aclose()

    async def __aenter__(self) -> DingTalkRobot:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def build_url(self, timestamp: int | None = None) -> str:
        """전송 대상 URL 을 만든다.

        direct_url 이 있으면 그대로 쓴다. 없으면 기본 웹훅 URL 에 토큰을 붙이고,
        서명이 활성화돼 있으면 timestamp/sign 파라미터를 덧붙인다.

        Args:
            timestamp: epoch 밀리초. None 이면 현재 시각
        """
        if self.config.direct_url:
            return self.config.direct_url

        base_url = self.config.base_url
        if base_url.endswith(("?", "&")):
            separator = ""
        elif "?" in base_url:
            separator = "&"
        else:
            separator = "?"

        token_param = self.config.kind.token_param
        url = f"{base_url}{separator}{token_param}={quote(self.config.access_token, safe='')}"

        if self.config.signing_enabled:
            if timestamp is None:
                timestamp = signer.current_timestamp_ms()
            timestamp, signature = signer.sign(self.config.secret or "", timestamp)
            url += f"&timestamp={timestamp}&sign={signature}"
        return url

    async def send_message(self, message: Message) -> None:
        """메시지 하나를 전송한다.

        Raises:
            ConfigurationError: 호환 모드에서 텍스트 이외의 메시지를 보낸 경우
            InvalidMessageError: 빈 피드 카드/액션 카드
            TransportError: 네트워크/HTTP/응답 파싱 실패
            RemoteError: 응답 errcode 가 0 이 아닌 경우
        """
        if self.config.is_compatibility_mode and not isinstance(message, TextMessage):
            raise ConfigurationError(
                f"'{message.msgtype.value}' message is not supported in WeChat Work mode"
            )
        message.ensure_sendable()
        await self._post(message.to_payload(), msgtype=message.msgtype.value)

    async def send_raw(self, payload: dict[str, Any]) -> None:
        """이미 완성된 JSON 오브젝트를 그대로 전송한다."""
        await self._post(payload, msgtype=str(payload.get("msgtype", "raw")))

    async def send_text(
        self,
        content: str,
        *,
        at_mobiles: str | Iterable[str] | None = None,
        at_all: bool = False,
    ) -> None:
        message = TextMessage(content=content)
        if at_mobiles:
            message.at_mobiles(at_mobiles)
        if at_all:
            message.at_all()
        await self.send_message(message)

    async def send_markdown(
        self,
        title: str,
        content: str,
        *,
        at_mobiles: str | Iterable[str] | None = None,
        at_all: bool = False,
    ) -> None:
        message = MarkdownMessage(title=title, content=content)
        if at_mobiles:
            message.at_mobiles(at_mobiles)
        if at_all:
            message.at_all()
        await self.send_message(message)

    async def send_link(self, title: str, text: str, pic_url: str, message_url: str) -> None:
        await self.send_message(
            LinkMessage(title=title, text=text, pic_url=pic_url, message_url=message_url)
        )

    async def send_feed_card(self, links: Iterable[FeedCardLink]) -> None:
        await self.send_message(FeedCardMessage(links=list(links)))

    async def send_action_card(
        self,
        title: str,
        text: str,
        buttons: Iterable[ActionCardButton],
        *,
        layout: ActionCardLayout | None = None,
    ) -> None:
        await self.send_message(
            ActionCardMessage(title=title, text=text, buttons=list(buttons), layout=layout)
        )

    async def _post(self, payload: dict[str, Any], *, msgtype: str) -> None:
        url = self.build_url()
        body = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

        self._logger.log_send(
            msgtype,
            host=urlsplit(url).hostname or "",
            signed=self.config.signing_enabled and not self.config.direct_url,
        )
        started = time.perf_counter()
        raw = await self._transport.execute(url, body)
        self._check_response(raw)
        self._logger.log_delivered(msgtype, elapsed_ms=(time.perf_counter() - started) * 1000)

    @staticmethod
    def _check_response(raw: bytes) -> None:
        """응답 바디의 errcode 를 확인한다. 0 이면 성공."""
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise TransportError(f"Robot webhook returned malformed JSON: {raw[:200]!r}") from e
        if not isinstance(data, dict):
            raise TransportError(f"Robot webhook returned non-object JSON: {data!r}")

        errcode = data.get("errcode", 0)
        try:
            code = int(errcode)
        except (TypeError, ValueError) as e:
            raise TransportError(f"Robot webhook returned invalid errcode: {errcode!r}") from e
        if code != 0:
            raise RemoteError(code, str(data.get("errmsg", "")))
