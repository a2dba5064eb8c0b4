from typing import Protocol, runtime_checkable


@runtime_checkable
class RobotTransport(Protocol):
    """JSON 바디를 POST 하고 응답 바디를 돌려주는 전송 계층 프로토콜.

    연결/타임아웃/HTTP 상태 실패는 `TransportError` 로 올려야 한다.
    """

    async def execute(self, url: str, body: bytes) -> bytes:
        ...
