from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import Any

import structlog

from app.config import Settings, get_settings
from app.observability.enrichment import EnricherConfig, ExecutionContextEnricher, StaticPropertiesAdder


_CONFIGURED = False

_LEVEL_CODES = {
    "notset": "VRB",
    "debug": "DBG",
    "info": "INF",
    "warning": "WRN",
    "warn": "WRN",
    "error": "ERR",
    "exception": "ERR",
    "critical": "FTL",
    "fatal": "FTL",
}


def _local_time(timestamp: Any) -> str:
    """Render an ISO-8601 event timestamp as local HH:MM:SS."""

    try:
        stamp = datetime.fromisoformat(str(timestamp).replace("Z", "+00:00"))
    except ValueError:
        stamp = datetime.now()
    return stamp.astimezone().strftime("%H:%M:%S")


class ExecutionContextConsoleRenderer:
    """Render ``[HH:MM:SS LVL] message [Class.method @ file:line]`` lines.

    A rendered exception, if any, follows on the next line.
    """

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
        level = str(event_dict.get("level", method_name)).lower()
        code = _LEVEL_CODES.get(level, level[:3].upper())

        line = (
            f"[{_local_time(event_dict.get('timestamp'))} {code}] "
            f"{event_dict.get('event', '')} "
            f"[{event_dict.get('class_name', 'Unknown')}.{event_dict.get('method_name', 'Unknown')} "
            f"@ {event_dict.get('source_file', 'Unknown')}:{event_dict.get('line_number', 0)}]"
        )

        exception = event_dict.get("exception")
        if exception:
            line = f"{line}\n{exception}"
        return line


def build_pre_chain(settings: Settings) -> list[Any]:
    """Processors shared by structlog-native and stdlib-originated events."""

    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        StaticPropertiesAdder(application=settings.app_name, environment=settings.environment),
        structlog.processors.CallsiteParameterAdder(
            [
                structlog.processors.CallsiteParameter.PROCESS,
                structlog.processors.CallsiteParameter.THREAD,
            ]
        ),
        ExecutionContextEnricher(config=EnricherConfig.from_settings(settings)),
        structlog.processors.StackInfoRenderer(),
        # JSON keeps exceptions as structured frames; the console template wants text.
        structlog.processors.dict_tracebacks if settings.log_format == "json" else structlog.processors.format_exc_info,
    ]


def configure_logging(settings: Settings | None = None, *, force: bool = False) -> None:
    """Configure structlog + stdlib logging with execution-context enrichment.

    Safe to call multiple times (no-op after first call unless ``force``).
    """

    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level)
    pre_chain = build_pre_chain(settings)

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: Any
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = ExecutionContextConsoleRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=pre_chain,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    # Keep uvicorn's own loggers consistent with our handler.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers = [handler]
        logger.propagate = False
        logger.setLevel(level)

    _CONFIGURED = True


def get_logger(name: str = "app") -> Any:
    return structlog.get_logger(name)


def get_api_logger() -> Any:
    """FastAPI dependency handing the request handlers their logger."""

    return get_logger("app.api")
