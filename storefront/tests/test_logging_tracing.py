import logging

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider

from storefront.common import ServiceSettings, build_app, configure_logging
from storefront.common.logging import TraceContextFilter
from storefront.common.tracing import _INSTRUMENTED_APPS, configure_tracing


@pytest.mark.usefixtures("caplog")
class TestTracingInstrumentation:
    def test_tracing_sets_provider_once(self, caplog: pytest.LogCaptureFixture) -> None:
        settings = ServiceSettings(
            enable_tracing=True,
            enable_metrics=False,
            app_name="Storefront Tracing Test",
        )
        configure_logging(settings)
        caplog.set_level(logging.WARNING)
        before = len(_INSTRUMENTED_APPS)
        app = build_app(settings)
        after_first = len(_INSTRUMENTED_APPS)
        assert after_first == before + 1
        configure_tracing(app, settings)
        assert len(_INSTRUMENTED_APPS) == after_first
        assert isinstance(trace.get_tracer_provider(), TracerProvider)

    def test_logging_injects_trace_identifiers(self, caplog: pytest.LogCaptureFixture) -> None:
        settings = ServiceSettings(
            enable_tracing=True,
            enable_metrics=False,
            app_name="Storefront Logging Test",
        )
        configure_logging(settings)
        build_app(settings)
        caplog.clear()
        tracer = trace.get_tracer(__name__)
        logger = logging.getLogger("storefront.trace-test")
        with caplog.at_level(logging.INFO):
            logger.info("outside span")
            outside_record = next(record for record in caplog.records if record.message == "outside span")
            assert getattr(outside_record, "trace_id", "-") == "-"
            with tracer.start_as_current_span("checkout"):
                logger.info("inside span")
        inside_record = next(record for record in caplog.records if record.message == "inside span")
        assert len(getattr(inside_record, "trace_id", "-")) == 32
        assert len(getattr(inside_record, "span_id", "-")) == 16
        assert getattr(inside_record, "service", None) == "Storefront Logging Test"


def test_configure_logging_is_idempotent() -> None:
    settings = ServiceSettings(enable_metrics=False, log_level="DEBUG")
    configure_logging(settings)
    configure_logging(settings)

    root_logger = logging.getLogger()
    filters = [f for f in root_logger.filters if isinstance(f, TraceContextFilter)]
    assert len(filters) == 1
    assert root_logger.level == logging.DEBUG
    assert logging.getLogger("aiosqlite").level == logging.INFO
