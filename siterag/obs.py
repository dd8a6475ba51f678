"""OpenTelemetry span helper.

span() wraps a block in an OpenTelemetry span. A console-exporting tracer provider is
installed once when settings.OTEL_ENABLED is set; otherwise spans go to whatever provider
the host process configured (the API default is a no-op provider).
"""
from contextlib import contextmanager
from typing import Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from siterag.config import settings

_otel_inited: bool = False


def init_tracing() -> None:
    """Initialize a basic OpenTelemetry tracer provider with console export.

    Sets a global tracer provider once, and only when tracing is enabled.
    """
    global _otel_inited
    if _otel_inited or not settings.OTEL_ENABLED:
        return
    tp = TracerProvider()
    tp.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(tp)
    _otel_inited = True


@contextmanager
def span(name: str, attributes: Optional[Dict[str, Any]] = None):
    """Run the enclosed block inside an OpenTelemetry span.

    Exceptions raised in the block are recorded on the span and re-raised.
    """
    tracer = trace.get_tracer("siterag")
    with tracer.start_as_current_span(name, attributes=attributes or {}) as s:
        yield s
