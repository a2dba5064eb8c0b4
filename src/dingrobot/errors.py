"""dingrobot 예외 계층."""


class DingRobotError(Exception):
    """dingrobot 모든 예외의 기반 클래스."""


class ConfigurationError(DingRobotError):
    """자격 증명 소스 오류 또는 계정 모드가 지원하지 않는 메시지 종류."""


class InvalidMessageError(DingRobotError, ValueError):
    """전송할 수 없는 메시지 (빈 피드 카드, 버튼 없는 액션 카드 등)."""


class TransportError(DingRobotError):
    """네트워크/타임아웃/HTTP 상태/응답 파싱 실패."""


class RemoteError(DingRobotError):
    """수신 서비스가 메시지를 거부한 경우 (errcode != 0).

    서명 불일치, 전송 빈도 제한, 잘못된 페이로드 등이 여기에 해당한다.
    """

    def __init__(self, code: int, message: str) -> None:
        """오류 초기화.

        Args:
            code: 응답의 errcode
            message: 응답의 errmsg
        """
        self.code = code
        self.message = message
        super().__init__(f"Robot API error: errcode={code} errmsg={message}")
