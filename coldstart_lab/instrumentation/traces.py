"""
Tracing for generation calls.

Every external call can be wrapped in an OpenTelemetry span carrying the
case attributes and token counts, and recorded as a Langfuse generation.
Both backends are optional: when a package is missing or Langfuse
credentials are not set, that backend is skipped and the benchmark runs
untraced.
"""

import os
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional

try:
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
    from opentelemetry.trace import Status, StatusCode
    OTEL_AVAILABLE = True
except ImportError:
    OTEL_AVAILABLE = False
    trace = None

try:
    from langfuse import Langfuse
    LANGFUSE_AVAILABLE = True
except ImportError:
    LANGFUSE_AVAILABLE = False
    Langfuse = None


@dataclass
class TracingConfig:
    """Which tracing backends to enable; Langfuse credentials come from LANGFUSE_*."""

    service_name: str = "coldstart-lab"
    console_spans: bool = False
    enable_langfuse: bool = False
    langfuse_public_key: Optional[str] = field(default_factory=lambda: os.getenv("LANGFUSE_PUBLIC_KEY"))
    langfuse_secret_key: Optional[str] = field(default_factory=lambda: os.getenv("LANGFUSE_SECRET_KEY"))
    langfuse_host: str = field(
        default_factory=lambda: os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com")
    )

    @property
    def has_langfuse_credentials(self) -> bool:
        return bool(self.langfuse_public_key and self.langfuse_secret_key)


class Tracer:
    """Spans via OpenTelemetry, generation records via Langfuse."""

    def __init__(self, config: Optional[TracingConfig] = None):
        self.config = config or TracingConfig()
        self._provider = None
        self._spans = None
        self._langfuse = None
        self._ready = False

    @property
    def langfuse_enabled(self) -> bool:
        return self._langfuse is not None

    def initialize(self) -> "Tracer":
        if self._ready:
            return self

        if OTEL_AVAILABLE:
            self._provider = TracerProvider(
                resource=Resource.create({"service.name": self.config.service_name})
            )
            if self.config.console_spans:
                self._provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
            self._spans = self._provider.get_tracer(self.config.service_name)

        if self.config.enable_langfuse:
            if not LANGFUSE_AVAILABLE:
                print("[Langfuse] Package not installed; generations will not be recorded")
            elif not self.config.has_langfuse_credentials:
                print("[Langfuse] Missing LANGFUSE_PUBLIC_KEY/LANGFUSE_SECRET_KEY; generations will not be recorded")
            else:
                self._langfuse = Langfuse(
                    public_key=self.config.langfuse_public_key,
                    secret_key=self.config.langfuse_secret_key,
                    host=self.config.langfuse_host,
                )
                print(f"[Langfuse] Recording generations for {self.config.service_name}")

        self._ready = True
        return self

    def shutdown(self) -> None:
        """Flush pending spans and generation records."""
        if self._provider is not None:
            self._provider.shutdown()
        if self._langfuse is not None:
            self._langfuse.flush()

    @asynccontextmanager
    async def async_span(self, name: str, attributes: Optional[dict] = None) -> AsyncIterator[Any]:
        """Span around one awaited call; yields None when OpenTelemetry is off.

        An exception escaping the block marks the span as failed and is re-raised.
        """
        if not self._ready:
            self.initialize()
        if self._spans is None:
            yield None
            return

        span = self._spans.start_span(name, attributes=attributes or {})
        try:
            yield span
        except BaseException as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
        finally:
            span.end()

    def record_generation(
        self,
        name: str,
        model: str,
        input_data: Any,
        output_data: Any = None,
        usage: Optional[dict] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        """Record one completed generation in Langfuse, if configured."""
        if self._langfuse is None:
            return

        try:
            with self._langfuse.start_as_current_observation(
                name=name,
                as_type="generation",
                model=model,
            ) as generation:
                generation.update(
                    input=input_data,
                    output=output_data,
                    usage_details=usage,
                    metadata=metadata,
                )
        except Exception as e:
            # Tracing must not turn a successful trial into a failed one.
            print(f"[Langfuse] Could not record generation {name}: {e}")


_tracer: Optional[Tracer] = None


def get_tracer(config: Optional[TracingConfig] = None) -> Tracer:
    """Process-wide tracer, created on first use."""
    global _tracer
    if _tracer is None:
        _tracer = Tracer(config)
    return _tracer


def init_tracing(config: Optional[TracingConfig] = None) -> Tracer:
    return get_tracer(config).initialize()


def shutdown_tracing() -> None:
    global _tracer
    if _tracer is not None:
        _tracer.shutdown()
        _tracer = None
