"""
Instrumentation module for structured-output latency benchmarking.

Provides timing utilities, generation clients and tracing integrations.
"""

from .timing import (
    Timer,
    mean,
    percentile,
    relative_change,
)

from .generators import (
    DEFAULT_PROMPT,
    PROVIDERS,
    Generation,
    GenerationError,
    Generator,
    Usage,
    OpenAIGenerator,
    AnthropicGenerator,
    get_generator,
)

from .traces import (
    Tracer,
    TracingConfig,
    get_tracer,
    init_tracing,
    shutdown_tracing,
    OTEL_AVAILABLE,
    LANGFUSE_AVAILABLE,
)

__all__ = [
    # Timing
    "Timer",
    "mean",
    "percentile",
    "relative_change",
    # Generators
    "DEFAULT_PROMPT",
    "PROVIDERS",
    "Generation",
    "GenerationError",
    "Generator",
    "Usage",
    "OpenAIGenerator",
    "AnthropicGenerator",
    "get_generator",
    # Tracing
    "Tracer",
    "TracingConfig",
    "get_tracer",
    "init_tracing",
    "shutdown_tracing",
    "OTEL_AVAILABLE",
    "LANGFUSE_AVAILABLE",
]
