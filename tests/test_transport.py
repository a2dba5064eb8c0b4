import httpx
import pytest
import respx
from httpx import Response

from dingrobot.errors import TransportError
from dingrobot.protocols import RobotTransport
from dingrobot.transport import HttpxTransport

URL = "https://oapi.dingtalk.com/robot/send?access_token=T"


def test_httpx_transport_satisfies_protocol() -> None:
    assert isinstance(HttpxTransport(), RobotTransport)


@pytest.mark.asyncio
@respx.mock
async def test_execute_returns_raw_body() -> None:
    route = respx.post("https://oapi.dingtalk.com/robot/send").mock(
        return_value=Response(200, content=b'{"errcode":0}')
    )

    transport = HttpxTransport()
    body = await transport.execute(URL, b'{"msgtype":"text"}')
    await transport.aclose()

    assert route.called
    assert body == b'{"errcode":0}'
    assert route.calls.last.request.content == b'{"msgtype":"text"}'


@pytest.mark.asyncio
@respx.mock
async def test_http_status_error_becomes_transport_error() -> None:
    respx.post("https://oapi.dingtalk.com/robot/send").mock(
        return_value=Response(502, text="bad gateway")
    )

    transport = HttpxTransport()
    with pytest.raises(TransportError) as exc_info:
        await transport.execute(URL, b"{}")
    await transport.aclose()

    assert "502" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)


@pytest.mark.asyncio
@respx.mock
async def test_timeout_becomes_transport_error() -> None:
    respx.post("https://oapi.dingtalk.com/robot/send").mock(
        side_effect=httpx.ReadTimeout("timed out")
    )

    transport = HttpxTransport(timeout=0.1)
    with pytest.raises(TransportError):
        await transport.execute(URL, b"{}")
    await transport.aclose()


@pytest.mark.asyncio
async def test_injected_client_is_not_closed() -> None:
    client = httpx.AsyncClient()
    transport = HttpxTransport(client=client)

    await transport.aclose()

    assert not client.is_closed
    await client.aclose()
