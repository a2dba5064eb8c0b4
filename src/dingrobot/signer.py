"""타임스탬프 기반 HMAC-SHA256 요청 서명."""

import base64
import hashlib
import hmac
import time
from urllib.parse import quote


def current_timestamp_ms() -> int:
    """현재 시각 (epoch 밀리초)."""
    return int(time.time() * 1000)


def sign(secret: str, timestamp: int) -> tuple[int, str]:
    """`"{timestamp}\\n{secret}"` 에 대한 서명을 계산한다.

    secret 을 키로 HMAC-SHA256 을 구하고, 원시 digest 를 base64 로 인코딩한 뒤
    URL 퍼센트 인코딩한다. 같은 입력이면 항상 같은 결과를 돌려준다.
    빈 secret 도 (의미는 없지만) 정상적으로 서명된다. 서명 여부는 호출자가 정한다.

    Args:
        secret: 로봇 보안 설정의 서명 비밀값
        timestamp: epoch 밀리초

    Returns:
        (timestamp, 쿼리스트링에 그대로 붙일 수 있는 서명)
    """
    key = secret.encode("utf-8")
    string_to_sign = f"{timestamp}\n{secret}".encode("utf-8")
    digest = hmac.new(key, string_to_sign, hashlib.sha256).digest()
    signature = base64.b64encode(digest).decode("ascii")
    return timestamp, quote(signature, safe="")
