"""Logging helpers."""
from optistats.logging.logger import get_root_logger, setup_logging, shutdown_logging

__all__ = ["get_root_logger", "setup_logging", "shutdown_logging"]
