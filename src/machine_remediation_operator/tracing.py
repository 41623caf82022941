"""OpenTelemetry tracing support for the Machine Remediation Operator."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

TRACER_NAME = "machine-remediation-operator"


def initialize_tracing(service_name: str = TRACER_NAME) -> bool:
    """Initialize OpenTelemetry tracing.

    Args:
        service_name: Name of the service for tracing

    Returns:
        True if a tracer provider was installed

    Environment Variables:
        OTEL_EXPORTER_OTLP_ENDPOINT: OTLP endpoint URL (default: http://localhost:4317)
        OTEL_SERVICE_NAME: Service name (default: machine-remediation-operator)
        OTEL_TRACES_ENABLED: Enable/disable tracing (default: false)
    """
    if os.getenv("OTEL_TRACES_ENABLED", "false").lower() != "true":
        return False

    service_name = os.getenv("OTEL_SERVICE_NAME", service_name)
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")

    try:
        resource = Resource.create({
            "service.name": service_name,
            "service.version": os.getenv("OPERATOR_VERSION", "unknown"),
        })
        provider = TracerProvider(resource=resource)
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        trace.set_tracer_provider(provider)
    except Exception as e:
        # Tracing initialization failures should not break the operator
        logger.warning(f"Failed to initialize tracing: {e}")
        return False
    return True


@contextmanager
def trace_span(
    name: str,
    kind: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[trace.Span]:
    """Context manager for creating a trace span.

    Without an installed tracer provider the span is a non-recording no-op.

    Args:
        name: Name of the span
        kind: Resource kind (e.g., "MachineRemediationOperator")
        attributes: Additional span attributes

    Yields:
        Span object
    """
    attrs = dict(attributes or {})
    if kind:
        attrs["resource.kind"] = kind

    tracer = trace.get_tracer(TRACER_NAME)
    with tracer.start_as_current_span(name, attributes=attrs) as span:
        try:
            yield span
        except Exception as e:
            if span.is_recording():
                span.record_exception(e)
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            raise


def add_span_attribute(key: str, value: Any) -> None:
    """Add an attribute to the current span."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attribute(key, value)
