"""structlog output for the sanitizer service, rendered through stdlib handlers.

Two thresholds are kept apart: ``log_level`` governs the service as a whole,
while the diagnostics logger follows ``debug.level`` so debug and trace
decisions still reach stdout when the service itself logs at info.
"""

import logging
import sys
import types

import structlog

DIAGNOSTICS_LOGGER = "mongo_sanitize.diagnostics"

# stdlib logging has no trace level
_DIAGNOSTIC_LEVELS: types.MappingProxyType = types.MappingProxyType({
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
})


def _logger_as_module(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    name = event_dict.pop("logger", None)
    if name is not None:
        event_dict["module"] = name
    return event_dict


def _renderer(json_format: bool) -> structlog.types.Processor:
    if json_format:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_level: str = "info", json_format: bool = False, diagnostics_level: str | None = None) -> None:
    """Route structlog events to stdout.

    *diagnostics_level* is a ``debug.level`` value (silent..trace). When given,
    the diagnostics logger gets its own threshold; otherwise it inherits
    *log_level*.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _logger_as_module,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, _renderer(json_format)],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    logging.getLogger(DIAGNOSTICS_LOGGER).setLevel(_DIAGNOSTIC_LEVELS.get(diagnostics_level, logging.NOTSET))
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
