from __future__ import annotations

import logging

from ..errors import SkipReason


def log_skip(
    logger: logging.Logger,
    reason: SkipReason,
    message: str,
    *,
    level: int = logging.WARNING,
) -> None:
    """Log a standardized skip message.

    Args:
        logger: Logger instance to emit the record.
        reason: Skip reason code.
        message: Human-readable detail message.
        level: Logging level (defaults to WARNING).
    """
    logger.log(level, "[%s] %s", reason.value, message)
