import json
from types import SimpleNamespace

import anthropic
import httpx
import openai
import pytest

from coldstart_lab.harness.runner import BenchmarkConfig, BenchmarkRunner
from coldstart_lab.instrumentation.generators import (
    TOOL_NAME,
    AnthropicGenerator,
    GenerationError,
    OpenAIGenerator,
    Usage,
    get_generator,
)

from conftest import POINT_SCHEMA, Point, make_case

POINT_JSON = json.dumps({"x": 3, "labelText": "origin"})


class FakeEndpoint:
    """Records keyword arguments and returns a canned response."""

    def __init__(self, response):
        self.response = response
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        return self.response

    async def parse(self, **kwargs):
        self.requests.append(kwargs)
        return self.response


def openai_response(content=None, tool_arguments=None, parsed=None, refusal=None):
    tool_calls = None
    if tool_arguments is not None:
        tool_calls = [SimpleNamespace(function=SimpleNamespace(name=TOOL_NAME, arguments=tool_arguments))]
    message = SimpleNamespace(content=content, tool_calls=tool_calls, parsed=parsed, refusal=refusal)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message)],
        usage=SimpleNamespace(prompt_tokens=120, completion_tokens=30),
    )


def openai_generator(response):
    endpoint = FakeEndpoint(response)
    client = SimpleNamespace(chat=SimpleNamespace(completions=endpoint))
    return OpenAIGenerator(client=client), endpoint


def anthropic_generator(*blocks):
    endpoint = FakeEndpoint(SimpleNamespace(
        content=list(blocks),
        usage=SimpleNamespace(input_tokens=200, output_tokens=40),
    ))
    return AnthropicGenerator(client=SimpleNamespace(messages=endpoint)), endpoint


async def generate(generator, mode="json", structured_output=False):
    return await generator.generate(
        model="test-model",
        schema=POINT_SCHEMA,
        mode=mode,
        structured_output=structured_output,
        prompt="Generate a point",
    )


class TestOpenAIGenerator:

    @pytest.mark.asyncio
    async def test_json_mode_describes_schema_in_prompt(self):
        generator, endpoint = openai_generator(openai_response(content=POINT_JSON))

        generation = await generate(generator)

        assert generation.object == Point(x=3, label_text="origin")
        assert generation.usage == Usage(prompt_tokens=120, completion_tokens=30)
        request = endpoint.requests[0]
        assert request["response_format"] == {"type": "json_object"}
        assert "labelText" in request["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_structured_output_uses_parse(self):
        point = Point(x=1, label_text="a")
        generator, endpoint = openai_generator(openai_response(parsed=point))

        generation = await generate(generator, structured_output=True)

        assert generation.object is point
        assert endpoint.requests[0]["response_format"] is Point

    @pytest.mark.asyncio
    async def test_refusal_is_a_generation_error(self):
        generator, _ = openai_generator(openai_response(refusal="no"))

        with pytest.raises(GenerationError, match="refused"):
            await generate(generator, structured_output=True)

    @pytest.mark.asyncio
    async def test_tool_mode_forces_single_tool(self):
        generator, endpoint = openai_generator(openai_response(tool_arguments=POINT_JSON))

        generation = await generate(generator, mode="tool")

        assert generation.object.x == 3
        request = endpoint.requests[0]
        assert request["tool_choice"] == {"type": "function", "function": {"name": TOOL_NAME}}
        assert request["tools"][0]["function"]["parameters"] == POINT_SCHEMA.json_schema()

    @pytest.mark.asyncio
    async def test_strict_tool_is_marked_strict(self):
        generator, endpoint = openai_generator(openai_response(tool_arguments=POINT_JSON))

        await generate(generator, mode="tool", structured_output=True)

        assert endpoint.requests[0]["tools"][0]["function"]["strict"] is True

    @pytest.mark.asyncio
    async def test_missing_tool_call(self):
        generator, _ = openai_generator(openai_response(content="hi"))

        with pytest.raises(GenerationError, match="no tool call"):
            await generate(generator, mode="tool")

    @pytest.mark.asyncio
    async def test_non_conforming_object(self):
        generator, _ = openai_generator(openai_response(content='{"x": "three"}'))

        with pytest.raises(GenerationError, match="does not match Point Schema"):
            await generate(generator)

    @pytest.mark.asyncio
    async def test_empty_content(self):
        generator, _ = openai_generator(openai_response(content=None))

        with pytest.raises(GenerationError, match="Empty response"):
            await generate(generator)


class TestAnthropicGenerator:

    @pytest.mark.asyncio
    async def test_tool_mode(self):
        block = SimpleNamespace(type="tool_use", input={"x": 5, "labelText": "b"})
        generator, endpoint = anthropic_generator(block)

        generation = await generate(generator, mode="tool")

        assert generation.object == Point(x=5, label_text="b")
        assert generation.usage.total_tokens == 240
        assert endpoint.requests[0]["tool_choice"] == {"type": "tool", "name": TOOL_NAME}

    @pytest.mark.asyncio
    async def test_json_mode_extracts_object_from_text(self):
        block = SimpleNamespace(type="text", text=f"Here you go:\n```json\n{POINT_JSON}\n```")
        generator, endpoint = anthropic_generator(block)

        generation = await generate(generator)

        assert generation.object.label_text == "origin"
        assert "labelText" in endpoint.requests[0]["system"]

    @pytest.mark.asyncio
    async def test_text_without_object(self):
        generator, _ = anthropic_generator(SimpleNamespace(type="text", text="Sorry."))

        with pytest.raises(GenerationError, match="No JSON object"):
            await generate(generator)

    @pytest.mark.asyncio
    async def test_structured_output_not_supported(self):
        generator, endpoint = anthropic_generator()

        with pytest.raises(GenerationError, match="not supported"):
            await generate(generator, structured_output=True)
        assert endpoint.requests == []


def test_unknown_provider():
    with pytest.raises(ValueError, match="Unknown provider"):
        get_generator("cohere")


OPENAI_COMPLETION = {
    "id": "chatcmpl-1",
    "object": "chat.completion",
    "created": 0,
    "model": "test-model",
    "choices": [{
        "index": 0,
        "finish_reason": "stop",
        "message": {"role": "assistant", "content": POINT_JSON},
    }],
    "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
}

ANTHROPIC_MESSAGE = {
    "id": "msg_1",
    "type": "message",
    "role": "assistant",
    "model": "test-model",
    "content": [{"type": "text", "text": POINT_JSON}],
    "stop_reason": "end_turn",
    "stop_sequence": None,
    "usage": {"input_tokens": 10, "output_tokens": 5},
}


def rate_limited_transport(success_body):
    """First request gets a 429, later ones succeed; every request is recorded."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if len(requests) == 1:
            return httpx.Response(
                429,
                json={"error": {"type": "rate_limit_error", "message": "slow down"}},
            )
        return httpx.Response(200, json=success_body)

    return httpx.MockTransport(handler), requests


@pytest.fixture
def api_keys(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    monkeypatch.delenv("ANTHROPIC_BASE_URL", raising=False)


class TestNoRetries:

    def test_default_clients_do_not_retry(self, api_keys):
        assert get_generator("openai").client.max_retries == 0
        assert get_generator("anthropic").client.max_retries == 0

    @pytest.mark.asyncio
    async def test_rate_limited_openai_call_is_one_failed_trial(self, api_keys):
        transport, requests = rate_limited_transport(OPENAI_COMPLETION)
        async with httpx.AsyncClient(transport=transport) as http_client:
            runner = BenchmarkRunner(
                OpenAIGenerator(http_client=http_client),
                BenchmarkConfig(num_runs=1, verbose=False),
            )

            result = await runner.run_case(make_case(model="test-model"))

        assert len(requests) == 1
        assert result.stats.success_rate == 0.0
        assert result.errors[0].startswith("RateLimitError: ")

    @pytest.mark.asyncio
    async def test_rate_limited_anthropic_call_raises_once(self, api_keys):
        transport, requests = rate_limited_transport(ANTHROPIC_MESSAGE)
        async with httpx.AsyncClient(transport=transport) as http_client:
            generator = AnthropicGenerator(http_client=http_client)

            with pytest.raises(anthropic.RateLimitError):
                await generate(generator)
            generation = await generate(generator)

        assert len(requests) == 2
        assert generation.object.x == 3

    @pytest.mark.asyncio
    async def test_openai_call_after_rate_limit_succeeds(self, api_keys):
        transport, requests = rate_limited_transport(OPENAI_COMPLETION)
        async with httpx.AsyncClient(transport=transport) as http_client:
            generator = OpenAIGenerator(http_client=http_client)

            with pytest.raises(openai.RateLimitError):
                await generate(generator)
            generation = await generate(generator)

        assert len(requests) == 2
        assert generation.usage == Usage(prompt_tokens=10, completion_tokens=5)
