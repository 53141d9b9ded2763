"""
Benchmark case generation.

A case is one combination of model, target schema, invocation mode and
structured-output flag. Cases are generated as the cross-product of the
configured options minus every combination an exclusion rule rejects.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, NamedTuple, Optional, Sequence

from ..instrumentation.generators import Usage
from ..schemas.definitions import ALL_SCHEMAS, DescribedSchema, get_schema


class InvocationMode(Enum):
    """How the structured object is requested from the service."""

    JSON = "json"
    TOOL = "tool"


MODES = (InvocationMode.JSON, InvocationMode.TOOL)
STRUCTURED_OUTPUT_OPTIONS = (False, True)


@dataclass(frozen=True)
class Pricing:
    """Unit prices in USD per one million tokens."""

    input_per_1m: float
    output_per_1m: float

    def cost(self, usage: Usage) -> float:
        return (
            usage.completion_tokens * (self.output_per_1m / 1_000_000)
            + usage.prompt_tokens * (self.input_per_1m / 1_000_000)
        )


@dataclass(frozen=True)
class ModelConfig:
    """A model identifier with its token prices."""

    name: str
    input_cost: float
    output_cost: float
    provider: str = "openai"

    @property
    def pricing(self) -> Pricing:
        return Pricing(input_per_1m=self.input_cost, output_per_1m=self.output_cost)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "input_cost": self.input_cost,
            "output_cost": self.output_cost,
            "provider": self.provider,
        }


class CaseKey(NamedTuple):
    """Identifies a case; used as the key for every grouping."""

    model: str
    schema_name: str
    mode: str
    structured_output: bool

    @property
    def label(self) -> str:
        strictness = "strict" if self.structured_output else "non-strict"
        return f"{self.model}-{strictness}-{self.mode} ({self.schema_name})"

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class BenchmarkCase:
    """One benchmark configuration; immutable once generated."""

    model_config: ModelConfig
    schema: DescribedSchema
    mode: InvocationMode
    structured_output: bool

    @property
    def key(self) -> CaseKey:
        return CaseKey(
            model=self.model_config.name,
            schema_name=self.schema.name,
            mode=self.mode.value,
            structured_output=self.structured_output,
        )

    def cost(self, usage: Usage) -> float:
        """Monetary cost of one call with the given usage."""
        return self.model_config.pricing.cost(usage)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "key": self.key.label,
            "model": self.model_config.to_dict(),
            "schema": self.schema.to_dict(),
            "mode": self.mode.value,
            "structured_output": self.structured_output,
        }


# ============================================================================
# Exclusion rules
# ============================================================================

ExclusionRule = Callable[[BenchmarkCase], bool]

PROVIDERS_WITH_STRUCTURED_OUTPUTS = frozenset({"openai"})


def tool_with_structured_outputs(case: BenchmarkCase) -> bool:
    """Strict tool calling is not benchmarked."""
    return case.mode is InvocationMode.TOOL and case.structured_output


def provider_without_structured_outputs(case: BenchmarkCase) -> bool:
    """Skip structured-output cases for providers that cannot enforce a schema."""
    return case.structured_output and case.model_config.provider not in PROVIDERS_WITH_STRUCTURED_OUTPUTS


DEFAULT_EXCLUSIONS: tuple[ExclusionRule, ...] = (
    tool_with_structured_outputs,
    provider_without_structured_outputs,
)


def generate_cases(
    models: Iterable[ModelConfig],
    schemas: Iterable[DescribedSchema],
    modes: Iterable[InvocationMode] = MODES,
    structured_outputs: Iterable[bool] = STRUCTURED_OUTPUT_OPTIONS,
    exclusions: Sequence[ExclusionRule] = DEFAULT_EXCLUSIONS,
) -> list[BenchmarkCase]:
    """Build the ordered cross-product of cases, minus excluded combinations.

    Order is model, then schema, then mode, then structured-output flag.
    """
    schemas = list(schemas)
    modes = [InvocationMode(m) for m in modes]
    structured_outputs = list(structured_outputs)

    cases = []
    for model_config in models:
        for schema in schemas:
            for mode in modes:
                for structured_output in structured_outputs:
                    case = BenchmarkCase(
                        model_config=model_config,
                        schema=schema,
                        mode=mode,
                        structured_output=structured_output,
                    )
                    if any(rule(case) for rule in exclusions):
                        continue
                    cases.append(case)
    return cases


# ============================================================================
# Model presets
# ============================================================================

OPENAI_MODELS = [
    ModelConfig(name="gpt-4o-2024-08-06", input_cost=2.5, output_cost=10),
    ModelConfig(name="gpt-4o-mini", input_cost=0.15, output_cost=0.6),
]

ANTHROPIC_MODELS = [
    ModelConfig(name="claude-sonnet-4-20250514", input_cost=3, output_cost=15, provider="anthropic"),
    ModelConfig(name="claude-3-5-haiku-20241022", input_cost=0.8, output_cost=4, provider="anthropic"),
]

MODEL_PRESETS: dict[str, list[ModelConfig]] = {
    "openai": OPENAI_MODELS,
    "anthropic": ANTHROPIC_MODELS,
}

DEFAULT_MODELS = OPENAI_MODELS


def select_models(
    names: Optional[Sequence[str]] = None,
    provider: str = "openai",
) -> list[ModelConfig]:
    """Pick preset models for a provider, optionally filtered by name."""
    if provider not in MODEL_PRESETS:
        raise ValueError(f"Unknown provider: {provider}")
    presets = MODEL_PRESETS[provider]
    if not names:
        return list(presets)

    by_name = {m.name: m for m in presets}
    unknown = [n for n in names if n not in by_name]
    if unknown:
        raise ValueError(
            f"Unknown {provider} model(s): {', '.join(unknown)} "
            f"(choose from {', '.join(by_name)})"
        )
    return [by_name[n] for n in names]


def select_schemas(names: Optional[Sequence[str]] = None) -> list[DescribedSchema]:
    """Pick target schemas by key or label; all of them when no names are given."""
    if not names:
        return list(ALL_SCHEMAS)
    return [get_schema(n) for n in names]
