"""OpenTelemetry and structlog configuration for Thought Sort.

Each signal (traces, metrics) is exported to the console, to an OTLP
collector, or not at all, chosen by OTEL_<SIGNAL>_EXPORTER. Logging is
structlog over the stdlib logging module, with trace ids on every event.
"""

import logging
import os

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

logger = structlog.get_logger(__name__)

# Service identification
SERVICE_NAME_VALUE = os.getenv("OTEL_SERVICE_NAME", "thoughtsort-api")
SERVICE_VERSION_VALUE = os.getenv("OTEL_SERVICE_VERSION", "0.1.0")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

EXPORTERS = ("console", "otlp")


def get_resource() -> Resource:
    """Create OpenTelemetry resource with service attributes."""
    return Resource.create(
        {
            SERVICE_NAME: SERVICE_NAME_VALUE,
            SERVICE_VERSION: SERVICE_VERSION_VALUE,
            "deployment.environment": ENVIRONMENT,
        }
    )


def select_exporter(signal: str) -> str | None:
    """
    Decide how a signal is exported.

    Args:
        signal: "traces" or "metrics"

    Returns:
        "console", "otlp", or None when the signal is not exported
    """
    if os.getenv(f"OTEL_ENABLE_{signal.upper()}", "true").lower() != "true":
        logger.info("otel_signal_disabled", signal=signal)
        return None

    exporter = os.getenv(f"OTEL_{signal.upper()}_EXPORTER", "console").lower()
    if exporter not in EXPORTERS:
        logger.info("otel_export_disabled", signal=signal, exporter=exporter)
        return None
    if exporter == "otlp" and not os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"):
        logger.warning("otel_otlp_endpoint_missing", signal=signal)
        return None

    logger.info("otel_exporter_selected", signal=signal, exporter=exporter)
    return exporter


def configure_tracing() -> TracerProvider:
    """Configure OpenTelemetry tracing."""
    provider = TracerProvider(resource=get_resource())

    exporter = select_exporter("traces")
    if exporter == "otlp":
        span_exporter = OTLPSpanExporter(endpoint=os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"])
        provider.add_span_processor(BatchSpanProcessor(span_exporter))
    elif exporter == "console":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    return provider


def configure_metrics() -> MeterProvider:
    """Configure OpenTelemetry metrics."""
    readers = []

    exporter = select_exporter("metrics")
    if exporter is not None:
        if exporter == "otlp":
            metric_exporter = OTLPMetricExporter(endpoint=os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"])
        else:
            metric_exporter = ConsoleMetricExporter()
        interval = int(os.getenv("OTEL_METRIC_EXPORT_INTERVAL", "60000"))
        readers.append(PeriodicExportingMetricReader(metric_exporter, export_interval_millis=interval))

    provider = MeterProvider(resource=get_resource(), metric_readers=readers)
    metrics.set_meter_provider(provider)
    return provider


def add_otel_context(logger, method_name, event_dict):
    """Add the current trace and span ids (zeros outside a span) to log events."""
    ctx = trace.get_current_span().get_span_context()
    event_dict["trace_id"] = format(ctx.trace_id, "032x")
    event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def configure_logging():
    """Configure structlog with OpenTelemetry integration."""
    log_level = os.getenv("OTEL_LOG_LEVEL", "INFO").upper()
    log_format = os.getenv("LOG_FORMAT", "json").lower()  # json or console

    logging.basicConfig(format="%(message)s", level=getattr(logging, log_level))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_otel_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [
            structlog.processors.ExceptionRenderer(),
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def initialize_observability():
    """Initialize logging, tracing and metrics."""
    configure_logging()

    tracer_provider = configure_tracing()
    meter_provider = configure_metrics()

    logger.info(
        "observability_initialized",
        service_name=SERVICE_NAME_VALUE,
        service_version=SERVICE_VERSION_VALUE,
        environment=ENVIRONMENT,
        log_format=os.getenv("LOG_FORMAT", "json").lower(),
    )

    return tracer_provider, meter_provider


def get_tracer(name: str = __name__) -> trace.Tracer:
    """Get a tracer instance for creating spans."""
    return trace.get_tracer(name, SERVICE_VERSION_VALUE)


def get_meter(name: str = __name__) -> metrics.Meter:
    """Get a meter instance for creating metrics."""
    return metrics.get_meter(name, SERVICE_VERSION_VALUE)


class AppMetrics:
    """Counters and histograms recorded by the API."""

    def __init__(self):
        meter = get_meter("thoughtsort.metrics")

        def counter(name: str, description: str):
            return meter.create_counter(name=name, description=description, unit="1")

        self.user_registrations = counter("user.registrations", "Users registered")
        self.user_logins = counter("user.logins", "Successful logins")
        self.auth_failures = counter("auth.failures", "Rejected registrations, logins and tokens")
        self.notes_created = counter("notes.created", "Notes created")
        self.chat_messages = counter("chat.messages", "Chat messages answered by the assistant")
        self.generation_failures = counter(
            "assistant.generation.failures", "Language model calls that failed or timed out"
        )

        self.generation_duration = meter.create_histogram(
            name="assistant.generation.duration",
            description="Language model call duration in milliseconds",
            unit="ms",
        )


_app_metrics: AppMetrics | None = None


def get_app_metrics() -> AppMetrics:
    """Get the process-wide metrics instance, creating it on first use."""
    global _app_metrics
    if _app_metrics is None:
        _app_metrics = AppMetrics()
    return _app_metrics
