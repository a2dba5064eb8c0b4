"""httpx 기반 기본 전송 계층."""

from __future__ import annotations

import httpx

from dingrobot.errors import TransportError
from dingrobot.protocols import RobotTransport

CONTENT_TYPE_JSON_UTF8 = "application/json; charset=utf-8"


class HttpxTransport(RobotTransport):
    """`httpx.AsyncClient` 로 웹훅에 POST 한다.

    client 를 넘기지 않으면 직접 만들고, `aclose()` 에서 닫는다.
    연결 풀과 타임아웃 정책은 이 계층의 몫이다.
    """

    def __init__(self, *, timeout: float = 10.0, client: httpx.AsyncClient | None = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def execute(self, url: str, body: bytes) -> bytes:
        try:
            response = await self._client.post(
                url,
                content=body,
                headers={"Content-Type": CONTENT_TYPE_JSON_UTF8},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Robot webhook HTTP error: {e.response.status_code} | body={e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Robot webhook request failed: {e!r}") from e
        return response.content
