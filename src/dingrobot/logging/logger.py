"""간단한 콘솔 로거."""

import logging as std_logging
import sys
from typing import Any


class SimpleLogger:
    """간단한 콘솔 로거."""

    def __init__(
        self,
        name: str = "dingrobot",
        console_output: bool = False,
        log_level: int = std_logging.INFO,
    ) -> None:
        """로거 초기화.

        Args:
            name: 로거 이름
            console_output: 콘솔 핸들러 부착 여부 (라이브러리 사용 시 기본 False)
            log_level: 로그 레벨
        """
        self.name = name
        self.console_output = console_output
        self.logger = std_logging.getLogger(name)

        if console_output:
            self.logger.setLevel(log_level)
            if not self.logger.handlers:
                handler = std_logging.StreamHandler(sys.stdout)
                handler.setLevel(log_level)
                formatter = std_logging.Formatter(
                    "[%(asctime)s] %(levelname)s | %(name)s | %(message)s",
                    datefmt="%Y-%m-%dT%H:%M:%S",
                )
                handler.setFormatter(formatter)
                self.logger.addHandler(handler)

    def info(self, message: str, **extra: Any) -> None:
        """INFO 레벨 로그."""
        self._log(std_logging.INFO, message, extra)

    def error(self, message: str, exc_info: bool = False, **extra: Any) -> None:
        """ERROR 레벨 로그."""
        self._log(std_logging.ERROR, message, extra, exc_info=exc_info)

    def debug(self, message: str, **extra: Any) -> None:
        """DEBUG 레벨 로그."""
        self._log(std_logging.DEBUG, message, extra)

    def _log(
        self,
        level: int,
        message: str,
        extra: dict[str, Any],
        exc_info: bool = False,
    ) -> None:
        if extra:
            extra_str = " | ".join(f"{k}={v}" for k, v in extra.items())
            message = f"{message} | {extra_str}"
        self.logger.log(level, message, exc_info=exc_info)

    # 로봇 전송 이벤트. 토큰/서명 값은 절대 남기지 않는다.

    def log_send(self, msgtype: str, host: str, signed: bool, **extra: Any) -> None:
        """전송 시작 로그 (DEBUG)."""
        self.debug("SEND", msgtype=msgtype, host=host, signed=signed, **extra)

    def log_delivered(self, msgtype: str, elapsed_ms: float, **extra: Any) -> None:
        """전송 성공 로그."""
        self.info("DELIVERED", msgtype=msgtype, elapsed_ms=f"{elapsed_ms:.1f}", **extra)


def get_logger(name: str = "dingrobot", **kwargs: Any) -> SimpleLogger:
    """로거 인스턴스 반환.

    Args:
        name: 로거 이름
        **kwargs: SimpleLogger 추가 인자
    """
    return SimpleLogger(name=name, **kwargs)
