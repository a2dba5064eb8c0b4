import asyncio
import json

import httpx
import pytest
import respx
from httpx import Response

from dingrobot import signer
from dingrobot.client import DingTalkRobot
from dingrobot.config import RobotConfig
from dingrobot.errors import ConfigurationError, InvalidMessageError, RemoteError, TransportError
from dingrobot.messages import ActionCardButton, FeedCardLink, TextMessage

FIXED_TS = 1600000000000
FIXED_SIGN = "KhlYhXBeV7Gc0nBse833L%2FtDHeIRaVWREywg24jRaUQ%3D"
OK_BODY = b'{"errcode":0,"errmsg":"ok"}'


class FakeTransport:
    """호출을 기록하고 준비된 응답(또는 예외)을 돌려주는 transport."""

    def __init__(self, response: bytes = OK_BODY, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, bytes]] = []

    async def execute(self, url: str, body: bytes) -> bytes:
        self.calls.append((url, body))
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def last_payload(self) -> dict:
        return json.loads(self.calls[-1][1])


@pytest.fixture
def fixed_time(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(signer, "current_timestamp_ms", lambda: FIXED_TS)


@pytest.mark.asyncio
async def test_signed_url_at_fixed_timestamp(fixed_time: None) -> None:
    transport = FakeTransport()
    robot = DingTalkRobot(RobotConfig.from_json('{"access_token":"T","sec_token":"S"}'), transport)

    await robot.send_text("hi")

    url, _ = transport.calls[0]
    assert url == (
        "https://oapi.dingtalk.com/robot/send"
        f"?access_token=T&timestamp={FIXED_TS}&sign={FIXED_SIGN}"
    )


def test_build_url_without_secret_has_no_signature() -> None:
    robot = DingTalkRobot(RobotConfig.dingtalk("T"), FakeTransport())

    assert robot.build_url() == "https://oapi.dingtalk.com/robot/send?access_token=T"


def test_build_url_appends_to_existing_query() -> None:
    config = RobotConfig(access_token="T", webhook_url="https://proxy.local/send?tenant=a")
    robot = DingTalkRobot(config, FakeTransport())

    assert robot.build_url() == "https://proxy.local/send?tenant=a&access_token=T"


def test_build_url_quotes_token() -> None:
    robot = DingTalkRobot(RobotConfig.dingtalk("a b&c"), FakeTransport())

    assert robot.build_url().endswith("access_token=a%20b%26c")


def test_build_url_explicit_timestamp() -> None:
    robot = DingTalkRobot(RobotConfig.dingtalk("T", "S"), FakeTransport())

    assert robot.build_url(FIXED_TS).endswith(f"&timestamp={FIXED_TS}&sign={FIXED_SIGN}")


@pytest.mark.asyncio
async def test_direct_url_replaces_endpoint() -> None:
    transport = FakeTransport()
    robot = DingTalkRobot.from_url(
        "https://oapi.dingtalk.com/robot/sendBySession?session=abc", transport=transport
    )

    await robot.send_markdown("t", "body")

    assert transport.calls[0][0] == "https://oapi.dingtalk.com/robot/sendBySession?session=abc"


@pytest.mark.asyncio
async def test_text_body_with_at_all() -> None:
    transport = FakeTransport()
    robot = DingTalkRobot.from_credentials("T", transport=transport)

    await robot.send_text("hi", at_all=True)

    assert transport.last_payload == {
        "msgtype": "text",
        "text": {"content": "hi"},
        "at": {"atMobiles": [], "isAtAll": True},
    }


@pytest.mark.asyncio
async def test_body_is_utf8_json_without_escaping() -> None:
    transport = FakeTransport()
    robot = DingTalkRobot.from_credentials("T", transport=transport)

    await robot.send_text("배포 완료 部署完成")

    assert "배포 완료 部署完成".encode("utf-8") in transport.calls[0][1]


@pytest.mark.asyncio
async def test_compatibility_mode_rejects_markdown_without_network() -> None:
    transport = FakeTransport()
    robot = DingTalkRobot(RobotConfig.wechat_work("K"), transport)

    with pytest.raises(ConfigurationError):
        await robot.send_markdown("t", "body")

    assert transport.calls == []


@pytest.mark.asyncio
async def test_compatibility_mode_sends_text_with_key_and_no_signature(fixed_time: None) -> None:
    transport = FakeTransport()
    robot = DingTalkRobot.from_json(
        '{"type":"wechat","access_token":"K","sec_token":"S"}', transport=transport
    )

    await robot.send_text("hi")

    assert transport.calls[0][0] == "https://qyapi.weixin.qq.com/cgi-bin/webhook/send?key=K"


@pytest.mark.asyncio
async def test_empty_feed_card_is_rejected_before_network() -> None:
    transport = FakeTransport()
    robot = DingTalkRobot.from_credentials("T", transport=transport)

    with pytest.raises(InvalidMessageError):
        await robot.send_feed_card([])

    assert transport.calls == []


@pytest.mark.asyncio
async def test_send_feed_card() -> None:
    transport = FakeTransport()
    robot = DingTalkRobot.from_credentials("T", transport=transport)

    await robot.send_feed_card(
        [FeedCardLink(title="a", message_url="https://m/a", pic_url="https://p/a")]
    )

    assert transport.last_payload["feedCard"]["links"][0]["messageURL"] == "https://m/a"


@pytest.mark.asyncio
async def test_send_action_card_single_button() -> None:
    transport = FakeTransport()
    robot = DingTalkRobot.from_credentials("T", transport=transport)

    await robot.send_action_card(
        "t", "x", [ActionCardButton(title="go", action_url="https://a")]
    )

    card = transport.last_payload["actionCard"]
    assert card["singleTitle"] == "go"
    assert "btns" not in card


@pytest.mark.asyncio
async def test_send_link_and_raw() -> None:
    transport = FakeTransport()
    robot = DingTalkRobot.from_credentials("T", transport=transport)

    await robot.send_link("t", "x", "https://p", "https://m")
    await robot.send_raw({"msgtype": "text", "text": {"content": "raw"}})

    assert json.loads(transport.calls[0][1])["link"]["messageUrl"] == "https://m"
    assert transport.last_payload == {"msgtype": "text", "text": {"content": "raw"}}


@pytest.mark.asyncio
async def test_remote_error_code_and_message() -> None:
    transport = FakeTransport(response=b'{"errcode":-1,"errmsg":"system busy"}')
    robot = DingTalkRobot.from_credentials("T", transport=transport)

    with pytest.raises(RemoteError) as exc_info:
        await robot.send_text("hi")

    assert exc_info.value.code == -1
    assert exc_info.value.message == "system busy"


@pytest.mark.asyncio
async def test_transport_error_propagates_unchanged() -> None:
    error = TransportError("connection refused")
    robot = DingTalkRobot.from_credentials("T", transport=FakeTransport(error=error))

    with pytest.raises(TransportError) as exc_info:
        await robot.send_message(TextMessage(content="hi"))

    assert exc_info.value is error


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [b"<html>bad gateway</html>", b"[]", b'{"errcode":"x"}'])
async def test_malformed_response_is_transport_error(response: bytes) -> None:
    robot = DingTalkRobot.from_credentials("T", transport=FakeTransport(response=response))

    with pytest.raises(TransportError):
        await robot.send_text("hi")


@pytest.mark.asyncio
async def test_concurrent_sends_are_independent() -> None:
    transport = FakeTransport()
    robot = DingTalkRobot.from_credentials("T", transport=transport)

    await asyncio.gather(*(robot.send_text(f"msg {i}") for i in range(5)))

    contents = sorted(json.loads(body)["text"]["content"] for _, body in transport.calls)
    assert contents == [f"msg {i}" for i in range(5)]


@pytest.mark.asyncio
@respx.mock
async def test_httpx_transport_end_to_end(fixed_time: None) -> None:
    route = respx.post("https://oapi.dingtalk.com/robot/send").mock(
        return_value=Response(200, json={"errcode": 0, "errmsg": "ok"})
    )

    async with DingTalkRobot.from_credentials("T", "S") as robot:
        await robot.send_text("hi")

    assert route.called
    request = route.calls.last.request
    assert request.headers["Content-Type"] == "application/json; charset=utf-8"
    assert request.url.params["access_token"] == "T"
    assert request.url.params["timestamp"] == str(FIXED_TS)
    assert request.url.params["sign"] == "KhlYhXBeV7Gc0nBse833L/tDHeIRaVWREywg24jRaUQ="
    assert json.loads(request.content) == {"msgtype": "text", "text": {"content": "hi"}}


@pytest.mark.asyncio
@respx.mock
async def test_httpx_transport_remote_error() -> None:
    respx.post("https://oapi.dingtalk.com/robot/send").mock(
        return_value=Response(200, json={"errcode": 310000, "errmsg": "sign not match"})
    )

    async with DingTalkRobot.from_credentials("T", "S") as robot:
        with pytest.raises(RemoteError) as exc_info:
            await robot.send_text("hi")

    assert exc_info.value.code == 310000


@pytest.mark.asyncio
@respx.mock
async def test_httpx_transport_connect_failure() -> None:
    respx.post("https://oapi.dingtalk.com/robot/send").mock(
        side_effect=httpx.ConnectError("connection refused")
    )

    async with DingTalkRobot.from_credentials("T") as robot:
        with pytest.raises(TransportError) as exc_info:
            await robot.send_text("hi")

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_send_text_with_single_mobile_string() -> None:
    transport = FakeTransport()
    robot = DingTalkRobot.from_credentials("T", transport=transport)

    await robot.send_text("hi", at_mobiles="13800000000")

    assert transport.last_payload["at"] == {"atMobiles": ["13800000000"], "isAtAll": False}
