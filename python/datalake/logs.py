import logging
import os
from typing import Any

import structlog

# Comma-separated event names dropped from the output, e.g. "page_fetched,request_failed"
SUPPRESSED_EVENTS: set[str] = set()

_HANDLER_NAME = "datalake"


def _drop_suppressed(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Structlog processor: (logger, method_name, event_dict) -> event_dict"""
    if event_dict.get("event") in SUPPRESSED_EVENTS:
        raise structlog.DropEvent
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """Configures `structlog` on top of the stdlib root logger.

    Explicit arguments win over the DATALAKE_LOG_LEVEL and DATALAKE_LOG_FORMAT
    environment variables. A format of "dev" renders colored console lines,
    anything else renders one JSON object per line.

    Calling this more than once replaces the previously installed handler.
    """
    global SUPPRESSED_EVENTS
    log_level = (log_level or os.getenv("DATALAKE_LOG_LEVEL", "INFO")).upper()
    dev_logs = (log_format or os.getenv("DATALAKE_LOG_FORMAT", "")) == "dev"

    suppressed = os.getenv("DATALAKE_SUPPRESS_EVENTS", "")
    SUPPRESSED_EVENTS = {e.strip() for e in suppressed.split(",") if e.strip()}

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _drop_suppressed,
        structlog.dev.set_exc_info if dev_logs else structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer = structlog.dev.ConsoleRenderer() if dev_logs else structlog.processors.JSONRenderer()
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)
