# src/podtrigger/core/telemetry.py
"""
Traces and counters for activity evaluations.

`tracer` and `evaluation_counter` are usable at import time: they are
no-ops until `initialize_telemetry()` installs OTLP exporters.
"""

import logging
import os
from typing import Optional

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .. import __version__

logger = logging.getLogger(__name__)

DEFAULT_OTLP_ENDPOINT = "http://localhost:4318"


def initialize_telemetry(endpoint: Optional[str] = None):
    """Installs OTLP/HTTP span and metric exporters for this process."""
    endpoint = (endpoint or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or DEFAULT_OTLP_ENDPOINT).rstrip("/")
    resource = Resource(attributes={SERVICE_NAME: "podtrigger", SERVICE_VERSION: __version__})

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{endpoint}/v1/traces")))
    trace.set_tracer_provider(tracer_provider)

    reader = PeriodicExportingMetricReader(OTLPMetricExporter(endpoint=f"{endpoint}/v1/metrics"))
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))
    logger.info("Exporting evaluation traces and metrics to %s", endpoint)


tracer = trace.get_tracer("podtrigger")

evaluation_counter = metrics.get_meter("podtrigger").create_counter(
    "podtrigger.evaluations",
    unit="1",
    description="Number of activity evaluations, by resource and outcome.",
)
