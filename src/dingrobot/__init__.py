"""DingTalk 웹훅 로봇 클라이언트."""

from dingrobot.client import DingTalkRobot
from dingrobot.config import RobotConfig, RobotKind
from dingrobot.errors import (
    ConfigurationError,
    DingRobotError,
    InvalidMessageError,
    RemoteError,
    TransportError,
)
from dingrobot.messages import (
    ActionCardButton,
    ActionCardLayout,
    ActionCardMessage,
    FeedCardLink,
    FeedCardMessage,
    LinkMessage,
    MarkdownMessage,
    Message,
    MessageType,
    TextMessage,
)
from dingrobot.protocols import RobotTransport
from dingrobot.signer import sign
from dingrobot.transport import HttpxTransport

__all__ = [
    "ActionCardButton",
    "ActionCardLayout",
    "ActionCardMessage",
    "ConfigurationError",
    "DingRobotError",
    "DingTalkRobot",
    "FeedCardLink",
    "FeedCardMessage",
    "HttpxTransport",
    "InvalidMessageError",
    "LinkMessage",
    "MarkdownMessage",
    "Message",
    "MessageType",
    "RemoteError",
    "RobotConfig",
    "RobotKind",
    "RobotTransport",
    "TextMessage",
    "TransportError",
    "sign",
]
