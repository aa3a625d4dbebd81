# techfolio/shared/observability.py
import structlog
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from techfolio import __version__
from techfolio.shared.config import settings

logger = structlog.get_logger()

def setup_observability(app: FastAPI):
    """
    Configures OpenTelemetry for the application.

    1. Sets the Global Tracer Provider.
    2. Configures an Exporter (OTLP when an endpoint is configured, Console in DEBUG).
    3. Auto-instruments the FastAPI application to trace all HTTP requests.
    """

    # 1. Define Resource (Service Name identity)
    resource = Resource.create(attributes={
        "service.name": settings.OTEL_SERVICE_NAME,
        "deployment.environment": settings.APP_ENV.value,
        "service.version": __version__,
    })

    # 2. Initialize the Tracer Provider
    provider = TracerProvider(resource=resource)

    # 3. Configure the Exporters
    if settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        exporter = OTLPSpanExporter(endpoint=f"{settings.OTEL_EXPORTER_OTLP_ENDPOINT}/v1/traces")
        provider.add_span_processor(BatchSpanProcessor(exporter))
        logger.info("telemetry_enabled", endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT)

    if settings.DEBUG:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    # 4. Instrument FastAPI
    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)

def get_tracer(name: str):
    """
    Utility to get a tracer for manual instrumentation in Use Cases.
    Usage:
        tracer = get_tracer(__name__)
        with tracer.start_as_current_span("use_case.category_tree.move"):
            ...
    """
    return trace.get_tracer(name)
