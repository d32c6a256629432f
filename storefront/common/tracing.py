"""OpenTelemetry wiring for the storefront app."""

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # type: ignore[attr-defined]
    OTLPSpanExporter as OTLPGrpcExporter,
)
from opentelemetry.exporter.otlp.proto.http.trace_exporter import (  # type: ignore[attr-defined]
    OTLPSpanExporter as OTLPHttpExporter,
)
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_NAMESPACE, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

from .config import ServiceSettings

_LOGGER = logging.getLogger(__name__)
_INSTRUMENTED_APPS: set[int] = set()
_UNTRACED_PATHS = "health,metrics"
SERVICE_RELEASE = "0.1.0"


def _span_exporter(settings: ServiceSettings) -> SpanExporter | None:
    endpoint = settings.tracing_endpoint
    if not endpoint:
        return None
    if settings.tracing_protocol == "grpc":
        return OTLPGrpcExporter(endpoint=endpoint, insecure=settings.tracing_insecure)
    return OTLPHttpExporter(endpoint=endpoint)


def _tracer_provider(settings: ServiceSettings) -> TracerProvider:
    """Return the process-wide SDK provider, installing one on first use."""

    installed = trace.get_tracer_provider()
    if isinstance(installed, TracerProvider):
        return installed

    provider = TracerProvider(
        resource=Resource.create(
            {
                SERVICE_NAME: settings.app_name,
                SERVICE_NAMESPACE: "storefront",
                SERVICE_VERSION: SERVICE_RELEASE,
                "deployment.environment": settings.environment,
            }
        ),
        sampler=ParentBased(root=TraceIdRatioBased(settings.tracing_sample_rate)),
    )
    exporter = _span_exporter(settings)
    if exporter is None:
        _LOGGER.warning("No OTLP endpoint configured for %s; spans stay in-process", settings.app_name)
    else:
        provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    return provider


def configure_tracing(app: FastAPI, settings: ServiceSettings) -> None:
    """Instrument ``app`` once when tracing is enabled."""

    if not settings.enable_tracing or id(app) in _INSTRUMENTED_APPS:
        return
    provider = _tracer_provider(settings)
    FastAPIInstrumentor().instrument_app(app, tracer_provider=provider, excluded_urls=_UNTRACED_PATHS)
    _INSTRUMENTED_APPS.add(id(app))


def flush_tracing(timeout_millis: int = 5000) -> None:
    """Push buffered spans to the exporter; a no-op without an SDK provider."""

    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider) and not provider.force_flush(timeout_millis):
        _LOGGER.warning("Timed out flushing spans after %d ms", timeout_millis)
