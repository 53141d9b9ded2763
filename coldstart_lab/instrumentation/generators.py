"""
Generation clients for hosted LLM APIs.

Each client requests one object conforming to a target schema and reports
token usage. Two invocation modes are supported:

- json: direct JSON generation. With structured outputs enabled the schema
  is enforced server-side (OpenAI strict json_schema); otherwise the schema
  is only described in the system prompt and validated client-side.
- tool: the schema is sent as the parameters of a single forced tool call.

Generated objects are validated with the schema's pydantic model; any
response that does not conform raises GenerationError.

Usage:
    generator = get_generator("openai")
    generation = await generator.generate(
        model="gpt-4o-mini",
        schema=WIDE_SCHEMA,
        mode="json",
        structured_output=True,
        prompt=DEFAULT_PROMPT,
    )
    print(generation.usage.completion_tokens)
"""

import json
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import anthropic
import httpx
import openai
from pydantic import BaseModel, ValidationError

from ..schemas.definitions import DescribedSchema

DEFAULT_PROMPT = "Generate a simple JSON object adhering to the provided schema"

TOOL_NAME = "json"
TOOL_DESCRIPTION = "Respond with a JSON object."

JSON_SYSTEM_PROMPT = """You must respond with a single JSON object and nothing else.
The object must conform to this JSON schema:
{schema}"""

PROVIDERS = ("openai", "anthropic")

# No SDK retries: a rate-limited or failed call is one failed trial.
MAX_RETRIES = 0


class GenerationError(Exception):
    """Raised when a response is missing, malformed or does not match the schema."""


@dataclass
class Usage:
    """Token usage reported by the service."""
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class Generation:
    """A validated object and the usage it cost."""
    object: BaseModel
    usage: Usage


class Generator(Protocol):
    """Anything that can produce one schema-conforming object per call."""

    async def generate(
        self,
        model: str,
        schema: DescribedSchema,
        mode: str,
        structured_output: bool,
        prompt: str,
    ) -> Generation:
        ...


def _validate(schema: DescribedSchema, payload: Any) -> BaseModel:
    """Validate raw JSON text or a decoded dict against the schema."""
    if payload is None or payload == "":
        raise GenerationError("Empty response")
    try:
        if isinstance(payload, str):
            return schema.model.model_validate_json(payload)
        return schema.model.model_validate(payload)
    except ValidationError as e:
        raise GenerationError(
            f"Response does not match {schema.name}: {e.error_count()} validation error(s)"
        ) from e


def _extract_json(text: str) -> str:
    """Strip prose or code fences around the outermost JSON object."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise GenerationError("No JSON object in response")
    return text[start:end + 1]


def _system_prompt(schema: DescribedSchema) -> str:
    return JSON_SYSTEM_PROMPT.format(schema=json.dumps(schema.json_schema()))


class OpenAIGenerator:
    """Generator backed by the OpenAI chat completions API."""

    provider = "openai"

    def __init__(
        self,
        client: Optional[openai.AsyncOpenAI] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.client = client or openai.AsyncOpenAI(max_retries=MAX_RETRIES, http_client=http_client)

    @staticmethod
    def _usage(usage: Any) -> Usage:
        return Usage(
            prompt_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
            completion_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
        )

    async def generate(
        self,
        model: str,
        schema: DescribedSchema,
        mode: str,
        structured_output: bool,
        prompt: str,
    ) -> Generation:
        if mode == "tool":
            return await self._generate_tool(model, schema, structured_output, prompt)
        if structured_output:
            return await self._generate_structured(model, schema, prompt)
        return await self._generate_json(model, schema, prompt)

    async def _generate_structured(
        self,
        model: str,
        schema: DescribedSchema,
        prompt: str,
    ) -> Generation:
        completion = await self.client.chat.completions.parse(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            response_format=schema.model,
        )
        message = completion.choices[0].message
        if message.refusal:
            raise GenerationError(f"Model refused: {message.refusal}")
        if message.parsed is None:
            raise GenerationError("No parsed object in response")
        return Generation(object=message.parsed, usage=self._usage(completion.usage))

    async def _generate_json(
        self,
        model: str,
        schema: DescribedSchema,
        prompt: str,
    ) -> Generation:
        completion = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": _system_prompt(schema)},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
        )
        content = completion.choices[0].message.content
        return Generation(object=_validate(schema, content), usage=self._usage(completion.usage))

    async def _generate_tool(
        self,
        model: str,
        schema: DescribedSchema,
        structured_output: bool,
        prompt: str,
    ) -> Generation:
        function = {
            "name": TOOL_NAME,
            "description": TOOL_DESCRIPTION,
            "parameters": schema.json_schema(),
        }
        if structured_output:
            # Strict tools are excluded from the default matrix but still work
            # when callers build their own cases.
            function = openai.pydantic_function_tool(
                schema.model, name=TOOL_NAME, description=TOOL_DESCRIPTION
            )["function"]

        completion = await self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            tools=[{"type": "function", "function": function}],
            tool_choice={"type": "function", "function": {"name": TOOL_NAME}},
        )
        tool_calls = completion.choices[0].message.tool_calls
        if not tool_calls:
            raise GenerationError("Response contained no tool call")
        arguments = tool_calls[0].function.arguments
        return Generation(object=_validate(schema, arguments), usage=self._usage(completion.usage))


class AnthropicGenerator:
    """Generator backed by the Anthropic messages API.

    Anthropic has no strict schema-enforcement switch, so structured-output
    cases are rejected; the default case matrix never produces them.
    """

    provider = "anthropic"

    def __init__(
        self,
        client: Optional[anthropic.AsyncAnthropic] = None,
        max_tokens: int = 4096,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.client = client or anthropic.AsyncAnthropic(max_retries=MAX_RETRIES, http_client=http_client)
        self.max_tokens = max_tokens

    async def generate(
        self,
        model: str,
        schema: DescribedSchema,
        mode: str,
        structured_output: bool,
        prompt: str,
    ) -> Generation:
        if structured_output:
            raise GenerationError("Structured outputs are not supported for Anthropic models")

        if mode == "tool":
            response = await self.client.messages.create(
                model=model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
                tools=[
                    {
                        "name": TOOL_NAME,
                        "description": TOOL_DESCRIPTION,
                        "input_schema": schema.json_schema(),
                    }
                ],
                tool_choice={"type": "tool", "name": TOOL_NAME},
            )
            block = next((b for b in response.content if b.type == "tool_use"), None)
            if block is None:
                raise GenerationError("Response contained no tool call")
            obj = _validate(schema, block.input)
        else:
            response = await self.client.messages.create(
                model=model,
                max_tokens=self.max_tokens,
                system=_system_prompt(schema),
                messages=[{"role": "user", "content": prompt}],
            )
            text = "".join(b.text for b in response.content if b.type == "text")
            obj = _validate(schema, _extract_json(text))

        return Generation(
            object=obj,
            usage=Usage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
            ),
        )


def get_generator(provider: str = "openai") -> Generator:
    """
    Factory function to get a generation client.

    Args:
        provider: "openai" or "anthropic"

    Returns:
        Generator instance reading credentials from the environment
    """
    if provider == "openai":
        return OpenAIGenerator()
    if provider == "anthropic":
        return AnthropicGenerator()
    raise ValueError(f"Unknown provider: {provider} (choose from {', '.join(PROVIDERS)})")
