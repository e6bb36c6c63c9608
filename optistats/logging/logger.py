"""
Logging setup for processes embedding optistats.

Every module logs through ``logging.getLogger(__name__)``, so all records end up under the
``optistats`` logger. ``setup_logging`` attaches handlers to that logger from ``Settings``:
a console stream, a rotating file when ``LOG_DIR`` is set, and an OpenTelemetry log
exporter when ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set and the SDK is not disabled.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource

from optistats.config import Settings, settings

PACKAGE_LOGGER = "optistats"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

_installed_handlers: list[logging.Handler] = []
_logger_provider: LoggerProvider | None = None


def get_root_logger() -> logging.Logger:
    return logging.getLogger(PACKAGE_LOGGER)


def _otlp_handler(config: Settings, level: int) -> tuple[LoggingHandler, LoggerProvider]:
    provider = LoggerProvider(resource=Resource.create({"service.name": config.OTEL_SERVICE_NAME}))
    provider.add_log_record_processor(
        BatchLogRecordProcessor(OTLPLogExporter(endpoint=config.OTEL_EXPORTER_OTLP_ENDPOINT))
    )
    return LoggingHandler(level=level, logger_provider=provider), provider


def setup_logging(config: Settings = settings, *, with_console: bool = True) -> logging.Logger:
    """
    Attach handlers to the ``optistats`` logger.

    Repeated calls only update the level; call ``shutdown_logging`` first to rebuild
    the handlers from a different configuration.
    """
    global _logger_provider

    logger = get_root_logger()
    logger.setLevel(config.LOG_LEVEL.upper())
    if _installed_handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = []
    if with_console:
        handlers.append(logging.StreamHandler())
    if config.LOG_DIR:
        log_dir = Path(config.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_dir / config.LOG_FILE,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)

    if config.OTEL_EXPORTER_OTLP_ENDPOINT and not config.OTEL_SDK_DISABLED:
        otlp_handler, _logger_provider = _otlp_handler(config, logger.level)
        handlers.append(otlp_handler)

    for handler in handlers:
        logger.addHandler(handler)
    _installed_handlers.extend(handlers)
    return logger


def shutdown_logging() -> None:
    """Detach the handlers ``setup_logging`` installed and flush pending OTLP records."""
    global _logger_provider

    logger = get_root_logger()
    for handler in _installed_handlers:
        logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()
    if _logger_provider is not None:
        _logger_provider.shutdown()
        _logger_provider = None
