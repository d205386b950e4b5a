"""
Logger factory and utility functions.

Provides:
- get_logger(): Get a configured logger instance
- should_sample(): Determine if an event should be logged based on sampling rate
"""

from __future__ import annotations

import random

import structlog
from structlog.stdlib import BoundLogger

from shared.logging_config import (
    SAMPLING_RATES,
    configure_structlog,
    setup_logging,
)


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured structlog BoundLogger instance

    Example:
        >>> from shared.logging import get_logger
        >>> log = get_logger(__name__)
        >>> log.info("token_issued", owner_id="u1", token_id="tok_abc")
    """
    return structlog.get_logger(name)


def should_sample(event_type: str) -> bool:
    """
    Determine if an event should be logged based on sampling rate.

    Successful authentications happen on every request, so they are sampled;
    failures are always logged.

    Args:
        event_type: Type of event (e.g., "token_authenticated")

    Returns:
        True if the event should be logged, False otherwise
    """
    sample_rate = SAMPLING_RATES.get(event_type, 1.0)

    if sample_rate >= 1.0:
        return True

    if sample_rate <= 0.0:
        return False

    return random.random() < sample_rate


__all__ = [
    "get_logger",
    "should_sample",
    "SAMPLING_RATES",
    "configure_structlog",
    "setup_logging",
]
