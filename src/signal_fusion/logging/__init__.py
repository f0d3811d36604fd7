"""Structured logging."""

from signal_fusion.logging.setup import get_logger, setup_logging
from signal_fusion.logging.throttle import LogThrottle

__all__ = ["LogThrottle", "get_logger", "setup_logging"]
