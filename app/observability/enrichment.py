from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from app.config import Settings
from app.observability.caller import resolve_caller, resolve_full_trace


# Frames from these modules sit between the application's log call and the
# processor chain; attribution skips past them.
DEFAULT_IGNORED_MODULES: tuple[str, ...] = (
    "structlog",
    "logging",
    "app.observability.caller",
    "app.observability.enrichment",
    "app.observability.performance",
)


@dataclass(frozen=True)
class EnricherConfig:
    include_full_context: bool = True
    caller_skip_frames: int = 0
    ignore_modules: tuple[str, ...] = DEFAULT_IGNORED_MODULES

    @classmethod
    def from_settings(cls, settings: Settings) -> EnricherConfig:
        return cls(
            include_full_context=settings.log_include_full_context,
            caller_skip_frames=settings.log_caller_skip_frames,
        )


class ExecutionContextEnricher:
    """structlog processor adding caller attribution to every event.

    Adds ``class_name``, ``method_name``, ``source_file``, ``line_number`` and
    ``execution_timestamp`` (plus ``call_stack_context`` when configured).
    Keys already present on the event are left untouched, so explicit values
    from the log call win over the resolved ones.
    """

    def __init__(
        self,
        include_full_context: bool = True,
        caller_skip_frames: int = 0,
        ignore_modules: Sequence[str] = DEFAULT_IGNORED_MODULES,
        *,
        config: EnricherConfig | None = None,
    ) -> None:
        self.config = config or EnricherConfig(
            include_full_context=include_full_context,
            caller_skip_frames=caller_skip_frames,
            ignore_modules=tuple(ignore_modules),
        )

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        cfg = self.config
        context = resolve_caller(cfg.caller_skip_frames, cfg.ignore_modules)

        event_dict.setdefault("class_name", context.class_name)
        event_dict.setdefault("method_name", context.method_name)
        event_dict.setdefault("source_file", context.file_path)
        event_dict.setdefault("line_number", context.line_number)
        event_dict.setdefault("execution_timestamp", datetime.now(timezone.utc).isoformat())

        if cfg.include_full_context and "call_stack_context" not in event_dict:
            event_dict["call_stack_context"] = resolve_full_trace(cfg.caller_skip_frames, cfg.ignore_modules)

        return event_dict


class StaticPropertiesAdder:
    """Adds fixed properties (application, environment, ...) to every event."""

    def __init__(self, **properties: Any) -> None:
        self._properties = dict(properties)

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        for key, value in self._properties.items():
            event_dict.setdefault(key, value)
        return event_dict
