# src/user_provisioning/utils/log.py
import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# configure_logging이 등록한 핸들러. 다시 호출되어도 중복 등록하지 않습니다.
_handler: Optional[logging.Handler] = None


def configure_logging(level: str = "INFO") -> None:
    """user_provisioning 로거 계층에 스트림 핸들러를 한 번만 등록합니다."""
    global _handler
    root = logging.getLogger("user_provisioning")
    root.setLevel(level)
    if _handler is None or _handler not in root.handlers:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_handler)
