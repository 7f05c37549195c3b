"""
Logging and tracing for the order service

Log records go to stdout, either as JSON lines tagged with the service name
or as plain text for local runs. Spans are exported over OTLP when tracing
is enabled.
"""
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger import jsonlogger
from typing import Optional
import logging
import sys

logger = logging.getLogger(__name__)

JSON_FIELDS = "%(asctime)s %(name)s %(levelname)s %(message)s"
TEXT_FORMAT = "%(asctime)s - {service} - %(name)s - %(levelname)s - %(message)s"


def _formatter(service_name: str, log_format: str) -> logging.Formatter:
    if log_format.lower() != "json":
        return logging.Formatter(TEXT_FORMAT.format(service=service_name), datefmt="%Y-%m-%d %H:%M:%S")

    formatter = jsonlogger.JsonFormatter(
        JSON_FIELDS,
        rename_fields={"asctime": "timestamp", "name": "logger", "levelname": "level"},
        static_fields={"service": service_name}
    )
    formatter.default_time_format = "%Y-%m-%dT%H:%M:%S"
    formatter.default_msec_format = "%s.%03dZ"
    return formatter


def setup_logging(service_name: str, log_level: str = "INFO", log_format: str = "json") -> logging.Logger:
    """Send every record to stdout in the configured format (json or text)"""
    root = logging.getLogger()
    root.setLevel(log_level.upper())
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_formatter(service_name, log_format))
    root.addHandler(handler)

    logger.info(f"Logging initialized for {service_name} at level {log_level}")
    return root


def setup_tracing(service_name: str, otlp_endpoint: str, enabled: bool = True) -> Optional[TracerProvider]:
    """Install the global tracer provider; returns None when tracing is off"""
    if not enabled:
        logger.info("Tracing disabled")
        return None

    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)))
    trace.set_tracer_provider(provider)

    logger.info(f"Exporting {service_name} traces to {otlp_endpoint}")
    return provider


def instrument(app=None, engine=None) -> None:
    """Trace incoming requests and database statements"""
    if app is not None:
        FastAPIInstrumentor.instrument_app(app)
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine)
