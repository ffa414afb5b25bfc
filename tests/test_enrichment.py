import sys
from datetime import datetime, timedelta

import structlog
from structlog.testing import CapturingLogger

from app.config import get_settings
from app.observability.enrichment import EnricherConfig, ExecutionContextEnricher, StaticPropertiesAdder
from app.observability.performance import track_performance


BASE_KEYS = {"class_name", "method_name", "source_file", "line_number", "execution_timestamp"}


def _passthrough(_logger, _method_name, event_dict):
    return event_dict


def test_enricher_adds_base_properties() -> None:
    enricher = ExecutionContextEnricher(include_full_context=False)

    expected_line = sys._getframe().f_lineno + 1
    event = enricher(None, "info", {"event": "hello"})

    assert BASE_KEYS <= event.keys()
    assert "call_stack_context" not in event
    assert event["method_name"] == "test_enricher_adds_base_properties"
    assert event["line_number"] == expected_line
    assert event["source_file"].endswith("test_enrichment.py")
    assert event["class_name"] == __name__.rsplit(".", 1)[-1]


def test_execution_timestamp_is_fresh_utc() -> None:
    event = ExecutionContextEnricher(include_full_context=False)(None, "info", {"event": "hello"})

    stamp = datetime.fromisoformat(event["execution_timestamp"])
    assert stamp.utcoffset() == timedelta(0)
    assert abs((datetime.now(stamp.tzinfo) - stamp).total_seconds()) < 5


def test_enricher_attaches_call_stack_when_configured() -> None:
    event = ExecutionContextEnricher(include_full_context=True)(None, "info", {"event": "hello"})

    first_line = event["call_stack_context"].splitlines()[0]
    assert f"{__name__}.test_enricher_attaches_call_stack_when_configured" in first_line


def test_enricher_never_overwrites_existing_properties() -> None:
    preset = {
        "event": "hello",
        "class_name": "Preset",
        "method_name": "custom",
        "source_file": "elsewhere.py",
        "line_number": 7,
        "execution_timestamp": "2020-01-01T00:00:00+00:00",
        "call_stack_context": "preset",
    }
    event = ExecutionContextEnricher(include_full_context=True)(None, "info", dict(preset))

    assert event == preset


def test_enricher_fills_only_missing_keys() -> None:
    event = ExecutionContextEnricher(include_full_context=False)(None, "info", {"event": "x", "line_number": 99})

    assert event["line_number"] == 99
    assert event["method_name"] == "test_enricher_fills_only_missing_keys"


def test_enricher_attributes_events_through_structlog_pipeline() -> None:
    cap = CapturingLogger()
    log = structlog.wrap_logger(
        cap,
        processors=[ExecutionContextEnricher(include_full_context=False), _passthrough],
    )

    expected_line = sys._getframe().f_lineno + 1
    log.info("through the pipeline")

    call = cap.calls[0]
    assert call.kwargs["method_name"] == "test_enricher_attributes_events_through_structlog_pipeline"
    assert call.kwargs["line_number"] == expected_line


def test_tracker_call_site_wins_over_resolved_context() -> None:
    cap = CapturingLogger()
    log = structlog.wrap_logger(
        cap,
        processors=[ExecutionContextEnricher(include_full_context=False), _passthrough],
    )

    with track_performance(log, method_name="explicit_method", source_file="explicit.py", line_number=1):
        pass

    assert [c.method_name for c in cap.calls] == ["debug", "info"]
    for call in cap.calls:
        assert call.kwargs["method_name"] == "explicit_method"
        assert call.kwargs["source_file"] == "explicit.py"
        # class attribution still comes from the application frame
        assert call.kwargs["class_name"] == __name__.rsplit(".", 1)[-1]


def test_caller_skip_frames_steps_over_wrapper_layers() -> None:
    cap = CapturingLogger()
    log = structlog.wrap_logger(
        cap,
        processors=[ExecutionContextEnricher(include_full_context=False, caller_skip_frames=1), _passthrough],
    )

    def audit(message: str) -> None:
        log.info(message)

    audit("wrapped")
    assert cap.calls[0].kwargs["method_name"] == "test_caller_skip_frames_steps_over_wrapper_layers"


def test_enricher_config_from_settings(monkeypatch) -> None:
    monkeypatch.setenv("LOG_INCLUDE_FULL_CONTEXT", "false")
    monkeypatch.setenv("LOG_CALLER_SKIP_FRAMES", "2")
    get_settings.cache_clear()

    config = EnricherConfig.from_settings(get_settings())
    assert config.include_full_context is False
    assert config.caller_skip_frames == 2
    assert "structlog" in config.ignore_modules


def test_static_properties_are_added_without_overwriting() -> None:
    adder = StaticPropertiesAdder(application="TestApi", environment="Development")

    event = adder(None, "info", {"event": "x", "environment": "Staging"})
    assert event["application"] == "TestApi"
    assert event["environment"] == "Staging"
