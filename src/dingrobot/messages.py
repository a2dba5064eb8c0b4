"""로봇 메시지 모델과 와이어 JSON 직렬화.

메시지 종류는 닫힌 집합이다 (text, markdown, link, feedCard, actionCard).
각 변형은 필수 필드를 생성자로 받고, 선택 항목은 체이닝 가능한 메서드로 채운다.

    TextMessage(content="배포 완료").at_mobiles(["13800000000"]).at_all()

`to_payload()` 는 I/O 가 없는 순수 함수이며 실패하지 않는다.
전송 가능 여부 검사는 `ensure_sendable()` 이 따로 담당한다.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any, ClassVar, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from dingrobot.errors import InvalidMessageError


class MessageType(str, Enum):
    """msgtype 판별자 값."""

    TEXT = "text"
    MARKDOWN = "markdown"
    LINK = "link"
    FEED_CARD = "feedCard"
    ACTION_CARD = "actionCard"


class ActionCardLayout(str, Enum):
    """액션 카드 버튼 배치."""

    SINGLE = "single"
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class FeedCardLink(BaseModel):
    """피드 카드 항목."""

    title: str
    message_url: str = Field(alias="messageURL")
    pic_url: str = Field(alias="picURL")

    model_config = ConfigDict(populate_by_name=True)


class ActionCardButton(BaseModel):
    """액션 카드 버튼."""

    title: str
    action_url: str = Field(alias="actionURL")

    model_config = ConfigDict(populate_by_name=True)


class _RobotMessage(BaseModel):
    msgtype: ClassVar[MessageType]

    def to_payload(self) -> dict[str, Any]:
        raise NotImplementedError

    def ensure_sendable(self) -> None:
        """전송 직전 검사. 기본적으로 항상 통과."""


_M = TypeVar("_M", bound="_MentionableMessage")


class _MentionableMessage(_RobotMessage):
    """@멘션(at 오브젝트)을 지원하는 메시지 공통부."""

    mobiles: list[str] = Field(default_factory=list)
    is_at_all: bool = False

    def at_all(self: _M) -> _M:
        self.is_at_all = True
        return self

    def at_mobiles(self: _M, mobiles: str | Iterable[str]) -> _M:
        # 문자열 하나는 번호 하나로 취급. 순서 유지, 중복 제거하지 않음
        if isinstance(mobiles, str):
            mobiles = [mobiles]
        self.mobiles.extend(mobiles)
        return self

    def _attach_at(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self.is_at_all or self.mobiles:
            payload["at"] = {"atMobiles": list(self.mobiles), "isAtAll": self.is_at_all}
        return payload


class TextMessage(_MentionableMessage):
    """텍스트 메시지. 호환 모드(WeChat Work)에서 허용되는 유일한 종류."""

    msgtype: ClassVar[MessageType] = MessageType.TEXT

    content: str

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "msgtype": self.msgtype.value,
            "text": {"content": self.content},
        }
        return self._attach_at(payload)


class MarkdownMessage(_MentionableMessage):
    """마크다운 메시지."""

    msgtype: ClassVar[MessageType] = MessageType.MARKDOWN

    title: str
    content: str

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "msgtype": self.msgtype.value,
            "markdown": {"title": self.title, "text": self.content},
        }
        return self._attach_at(payload)


class LinkMessage(_RobotMessage):
    """링크 메시지."""

    msgtype: ClassVar[MessageType] = MessageType.LINK

    title: str
    text: str
    pic_url: str
    message_url: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "msgtype": self.msgtype.value,
            "link": {
                "title": self.title,
                "text": self.text,
                "picUrl": self.pic_url,
                "messageUrl": self.message_url,
            },
        }


class FeedCardMessage(_RobotMessage):
    """피드 카드 메시지. 항목이 하나 이상이어야 전송할 수 있다."""

    msgtype: ClassVar[MessageType] = MessageType.FEED_CARD

    links: list[FeedCardLink] = Field(default_factory=list)

    def add_link(self, link: FeedCardLink) -> FeedCardMessage:
        self.links.append(link)
        return self

    def add_link_detail(self, title: str, message_url: str, pic_url: str) -> FeedCardMessage:
        return self.add_link(FeedCardLink(title=title, message_url=message_url, pic_url=pic_url))

    def ensure_sendable(self) -> None:
        if not self.links:
            raise InvalidMessageError("feed card message has no links")

    def to_payload(self) -> dict[str, Any]:
        return {
            "msgtype": self.msgtype.value,
            "feedCard": {"links": [link.model_dump(by_alias=True) for link in self.links]},
        }


class ActionCardMessage(_RobotMessage):
    """액션 카드 메시지.

    버튼 배치 규칙:
    - layout 을 명시하지 않으면 버튼 1개는 단일 버튼(singleTitle/singleURL),
      2개 이상은 가로 배치 btns 배열로 렌더링한다.
    - `set_single_button()` 은 버튼 목록을 그 버튼 하나로 바꾸고 SINGLE 로 고정한다.
    - `add_button()` 은 버튼을 덧붙이고, SINGLE 로 고정돼 있었다면 자동 배치로 되돌린다.

    `set_single_button()` 과 `add_button()` 을 한 메시지에 섞어 쓰는 것은 호출자 계약 위반이며,
    나중에 호출한 쪽의 배치가 이긴다 (last-write-wins). 거부하지 않는다.
    """

    msgtype: ClassVar[MessageType] = MessageType.ACTION_CARD

    title: str
    text: str
    buttons: list[ActionCardButton] = Field(default_factory=list)
    layout: ActionCardLayout | None = None
    avatar_hidden: bool = False

    def set_single_button(self, button: ActionCardButton) -> ActionCardMessage:
        self.buttons = [button]
        self.layout = ActionCardLayout.SINGLE
        return self

    def add_button(self, button: ActionCardButton) -> ActionCardMessage:
        self.buttons.append(button)
        if self.layout is ActionCardLayout.SINGLE:
            self.layout = None
        return self

    def btn_vertical(self) -> ActionCardMessage:
        self.layout = ActionCardLayout.VERTICAL
        return self

    def btn_horizontal(self) -> ActionCardMessage:
        self.layout = ActionCardLayout.HORIZONTAL
        return self

    def show_avatar(self) -> ActionCardMessage:
        self.avatar_hidden = False
        return self

    def hide_avatar(self) -> ActionCardMessage:
        self.avatar_hidden = True
        return self

    def resolved_layout(self) -> ActionCardLayout:
        """실제 렌더링에 쓰일 배치."""
        if self.layout is not None:
            return self.layout
        if len(self.buttons) == 1:
            return ActionCardLayout.SINGLE
        return ActionCardLayout.HORIZONTAL

    def ensure_sendable(self) -> None:
        if not self.buttons:
            raise InvalidMessageError("action card message has no buttons")
        if self.resolved_layout() is ActionCardLayout.SINGLE and len(self.buttons) > 1:
            raise InvalidMessageError(
                f"single-button action card holds {len(self.buttons)} buttons"
            )

    def to_payload(self) -> dict[str, Any]:
        card: dict[str, Any] = {
            "title": self.title,
            "text": self.text,
            "hideAvatar": "1" if self.avatar_hidden else "0",
        }
        layout = self.resolved_layout()
        if layout is ActionCardLayout.SINGLE and self.buttons:
            button = self.buttons[0]
            card["singleTitle"] = button.title
            card["singleURL"] = button.action_url
        else:
            card["btnOrientation"] = "0" if layout is ActionCardLayout.VERTICAL else "1"
            card["btns"] = [button.model_dump(by_alias=True) for button in self.buttons]
        return {"msgtype": self.msgtype.value, "actionCard": card}


Message = Union[TextMessage, MarkdownMessage, LinkMessage, FeedCardMessage, ActionCardMessage]
