"""
Observability instrumentation for Fair Directory.

This module configures observability for the FastAPI application:

1. **Structured Logging**
   - JSON log lines with trace context correlation (trace_id, span_id)
   - Plain text in test mode or when LOG_JSON is false

2. **Prometheus Metrics**
   - HTTP request counters, duration histograms and in-flight gauge
   - Duplicate scan and merge outcome metrics
   - Exposed at /metrics for Prometheus scraping

3. **OpenTelemetry Distributed Tracing**
   - Automatic request spans via FastAPI instrumentation
   - OTLP gRPC export when OTEL_ENABLED is set
   - Module-level `tracer` for custom spans around scans and merges

Environment Variables:
    LOG_JSON, LOG_LEVEL: Log output format and level
    OTEL_ENABLED: Export traces over OTLP (default: false)
    OTEL_SERVICE_NAME: Service name for traces and logs
    OTEL_EXPORTER_OTLP_ENDPOINT: OTLP collector endpoint
    TESTING: Set to "true" for plain text logs during pytest

Usage:
    from fair_directory.observability import setup_observability

    app = FastAPI()
    setup_observability(app)
"""

import logging
import os
import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request, Response
from opentelemetry import trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from pythonjsonlogger import jsonlogger

from fair_directory.core.config import settings

# Endpoints excluded from request tracing
EXCLUDED_TRACE_ENDPOINTS = frozenset({
    f"{settings.API_V1_PREFIX}/health",
    f"{settings.API_V1_PREFIX}/ready",
    "/metrics",
})


# =============================================================================
# Logging Configuration
# =============================================================================

# Standard LogRecord attributes plus our own trace fields; everything else
# on a record came from extra={...}
RESERVED_LOG_ATTRS = frozenset({
    "args", "asctime", "created", "exc_info", "exc_text", "filename",
    "funcName", "levelname", "levelno", "lineno", "module", "msecs",
    "message", "msg", "name", "pathname", "process", "processName",
    "relativeCreated", "stack_info", "thread", "threadName", "taskName",
    "trace_id", "span_id", "service",
})


class StructuredJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that includes OpenTelemetry trace context and extra fields.

    Output includes timestamp, level, logger name and message, the service
    name, trace_id/span_id when a span is recording, and all fields passed
    via logger.info("msg", extra={...}).
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(
            *args,
            **kwargs,
            timestamp=True,
        )
        self.service_name = settings.OTEL_SERVICE_NAME

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            level=record.levelname,
            logger=record.name,
            service=self.service_name,
            **_trace_context(),
        )
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in RESERVED_LOG_ATTRS and not key.startswith("_")
        }
        for key, value in extras.items():
            log_record.setdefault(key, value)


def _trace_context() -> dict[str, str]:
    """trace_id/span_id of the current span, if one is recording."""
    span = trace.get_current_span()
    if not span.is_recording():
        return {}
    context = span.get_span_context()
    return {
        "trace_id": trace.format_trace_id(context.trace_id),
        "span_id": trace.format_span_id(context.span_id),
    }


def _configure_logging() -> None:
    """
    Configure root logging once at import.

    JSON lines in production; a simplified text format when TESTING=true
    or LOG_JSON is false.

    Example JSON output:
        {"timestamp": "2025-01-15T10:30:00Z", "level": "INFO",
         "logger": "fair_directory.services.duplicates.merge_service",
         "message": "Merge completed", "service": "fair-directory",
         "entity_type": "vendors", "primary_id": "...", "deleted_id": "..."}
    """
    is_testing = os.getenv("TESTING", "false").lower() == "true"
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if is_testing or not settings.LOG_JSON:
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            force=True,
        )
    else:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(StructuredJsonFormatter())

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()
        root_logger.addHandler(handler)


_configure_logging()


# =============================================================================
# OpenTelemetry Tracing Setup
# =============================================================================

def _create_trace_provider() -> TracerProvider:
    """
    Create the OpenTelemetry TracerProvider.

    Spans are exported over OTLP gRPC only when OTEL_ENABLED is set.
    Without an exporter, spans are still created so log records carry
    trace ids, but nothing leaves the process.
    """
    resource = Resource(attributes={
        SERVICE_NAME: settings.OTEL_SERVICE_NAME
    })
    provider = TracerProvider(resource=resource)

    if settings.OTEL_ENABLED:
        # insecure=True: plain gRPC inside the cluster network
        trace_exporter = OTLPSpanExporter(
            endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
            insecure=True,
        )
        provider.add_span_processor(BatchSpanProcessor(trace_exporter))

    return provider


_trace_provider = _create_trace_provider()
trace.set_tracer_provider(_trace_provider)

set_global_textmap(CompositePropagator([
    TraceContextTextMapPropagator(),
    W3CBaggagePropagator(),
]))


# =============================================================================
# Prometheus Metrics Definitions
# =============================================================================

http_requests_total = Counter(
    "http_requests_total", "HTTP requests handled", ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds", "Time spent handling a request", ["method", "endpoint"]
)

active_requests = Gauge("active_requests", "Requests currently in flight")

duplicate_scans_total = Counter(
    name="duplicate_scans_total",
    documentation="Duplicate detection scans run, by entity type",
    labelnames=["entity_type"]
)

duplicate_pairs_found = Histogram(
    name="duplicate_pairs_found",
    documentation="Candidate pairs returned per duplicate scan",
    labelnames=["entity_type"],
    buckets=(0, 1, 5, 10, 25, 50, 100, 250, 500, 1000),
)

entity_merges_total = Counter(
    name="entity_merges_total",
    documentation="Entity merges attempted, by entity type and outcome",
    labelnames=["entity_type", "outcome"]
)


# =============================================================================
# Tracer for Custom Instrumentation
# =============================================================================

# from fair_directory.observability import tracer
#
# with tracer.start_as_current_span("duplicates.merge") as span:
#     span.set_attribute("duplicates.entity_type", "vendors")

tracer = trace.get_tracer(__name__)


def _endpoint_label(request: Request) -> str:
    """Matched route template, or the raw path when no route matched."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


# =============================================================================
# Setup Function
# =============================================================================

def setup_observability(app: FastAPI) -> FastAPI:
    """
    Instrument the app: request spans, Prometheus request metrics and the
    /metrics scrape endpoint. Returns the same app.
    """
    logger = logging.getLogger(__name__)

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=",".join(EXCLUDED_TRACE_ENDPOINTS)
    )

    @app.middleware("http")
    async def metrics_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        status_code = 500
        with active_requests.track_inprogress():
            try:
                response = await call_next(request)
                status_code = response.status_code
                return response
            finally:
                endpoint = _endpoint_label(request)
                http_request_duration_seconds.labels(request.method, endpoint).observe(
                    time.perf_counter() - start
                )
                http_requests_total.labels(request.method, endpoint, status_code).inc()

    @app.get("/metrics", include_in_schema=False)
    async def get_metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    logger.info(
        f"Observability configured for service '{settings.OTEL_SERVICE_NAME}' "
        f"(trace export: {'on' if settings.OTEL_ENABLED else 'off'})"
    )

    return app
