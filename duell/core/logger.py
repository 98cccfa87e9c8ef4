# duell/core/logger.py
"""
Loguru sinks: colored console, a daily application log and a separate
security log. Records bound with ``channel="security"`` (login failures,
lockouts, admin logins) go to both files; use ``security_logger`` for them.
"""

import sys
from loguru import logger

from duell.core.constants import (
    LOG_STORAGE, LOG_LEVEL, LOG_FILE_LEVEL, LOG_RETENTION_DAYS, SECURITY_LOG_RETENTION_DAYS
)

LOG_STORAGE.mkdir(parents=True, exist_ok=True)

logger.remove()
logger.configure(extra={"channel": "app"})


def _is_security(record) -> bool:
    return record["extra"].get("channel") == "security"


logger.add(
    sys.stderr,
    level=LOG_LEVEL,
    colorize=True,
    format=(
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <7}</level> | "
        "<cyan>{extra[channel]}</cyan> | "
        "<level>{message}</level>"
    )
)

logger.add(
    LOG_STORAGE / "duell_{time:YYYY-MM-DD}.log",
    level=LOG_FILE_LEVEL,
    format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[channel]} | {name}:{function}:{line} - {message}",
    encoding="utf-8",
    rotation="00:00",
    retention=f"{LOG_RETENTION_DAYS} days",
    compression="zip",
    enqueue=True
)

logger.add(
    LOG_STORAGE / "security_{time:YYYY-MM}.log",
    level="INFO",
    filter=_is_security,
    format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}",
    encoding="utf-8",
    rotation="1 month",
    retention=f"{SECURITY_LOG_RETENTION_DAYS} days",
    enqueue=True
)

security_logger = logger.bind(channel="security")

__all__ = ["logger", "security_logger"]
