from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import get_settings
from app.main import app


class RecordingLogger:
    """Stand-in for a structlog logger that keeps every call in memory."""

    def __init__(self, on_event: Callable[[dict[str, Any]], None] | None = None) -> None:
        self.events: list[dict[str, Any]] = []
        self._on_event = on_event
        self._context: dict[str, Any] = {}

    def bind(self, **new_values: Any) -> RecordingLogger:
        bound = RecordingLogger(self._on_event)
        bound.events = self.events
        bound._context = {**self._context, **new_values}
        return bound

    def _record(self, level: str, event: str, **kw: Any) -> None:
        entry = {"level": level, "event": event, **self._context, **kw}
        self.events.append(entry)
        if self._on_event is not None:
            self._on_event(entry)

    def debug(self, event: str, **kw: Any) -> None:
        self._record("debug", event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._record("info", event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._record("error", event, **kw)

    def at(self, level: str) -> list[dict[str, Any]]:
        return [e for e in self.events if e["level"] == level]


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_NAME", "TestApi")
    monkeypatch.setenv("APP_ENV", "Development")
    monkeypatch.setenv("LOG_FORMAT", "console")
    monkeypatch.delenv("FORECAST_DAYS", raising=False)
    monkeypatch.delenv("LOG_CALLER_SKIP_FRAMES", raising=False)
    get_settings.cache_clear()

    yield

    app.dependency_overrides.clear()
    get_settings.cache_clear()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def make_recording_logger() -> Callable[..., RecordingLogger]:
    return RecordingLogger


@pytest.fixture
async def api_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
