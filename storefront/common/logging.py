"""Root logging setup with OpenTelemetry trace correlation."""

import logging

from opentelemetry import trace

from .config import ServiceSettings

_NO_TRACE = "-"
_LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(service)s | %(name)s | "
    "trace_id=%(trace_id)s span_id=%(span_id)s | %(message)s"
)
_QUIET_LOGGERS = ("aiosqlite", "passlib")


class TraceContextFilter(logging.Filter):
    """Stamp records with the service name and the active span's identifiers."""

    def __init__(self, service: str) -> None:
        super().__init__()
        self.service = service

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.trace_id = format(span_context.trace_id, "032x")
            record.span_id = format(span_context.span_id, "016x")
        else:
            record.trace_id = _NO_TRACE
            record.span_id = _NO_TRACE
        return True


def configure_logging(settings: ServiceSettings) -> None:
    """Install the storefront format on the root logger; repeated calls only retune it."""

    logging.basicConfig(format=_LOG_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    context_filter = next((f for f in root_logger.filters if isinstance(f, TraceContextFilter)), None)
    if context_filter is None:
        context_filter = TraceContextFilter(settings.app_name)
        root_logger.addFilter(context_filter)
    else:
        context_filter.service = settings.app_name
    for handler in root_logger.handlers:
        if not any(isinstance(f, TraceContextFilter) for f in handler.filters):
            handler.addFilter(context_filter)

    # Driver chatter drowns request logs at DEBUG.
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.INFO, root_logger.level))
