"""
Unit tests for the Gemini and Ollama transports
"""
import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from sourcetutor.errors import TransportError
from sourcetutor.services.transport import (
    CloudTransport,
    GenAIClientAdapter,
    GenerativeModelAdapter,
    LocalTransport,
    ModelTier,
    read_ndjson_stream,
)

OLLAMA_URL = "http://127.0.0.1:11434/api/generate"


def _ndjson(*objects) -> bytes:
    return "".join(json.dumps(o, ensure_ascii=False) + "\n" for o in objects).encode("utf-8")


def _split(data: bytes, size: int):
    return [data[i:i + size] for i in range(0, len(data), size)]


def _streaming_transport(chunks, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code,
            headers={"content-type": "application/x-ndjson"},
            content=iter(chunks),
        )

    client = httpx.Client(transport=httpx.MockTransport(handler))
    return LocalTransport(OLLAMA_URL, "qwen2.5:7b-instruct-q4_0", client=client)


STREAM = _ndjson(
    {"model": "m", "response": "Hel", "done": False},
    {"model": "m", "response": "lo, ", "done": False},
    {"model": "m", "response": "wörld ✓", "done": False},
    {"model": "m", "done": True},
)


class TestNdjsonStream:
    def test_fragments_are_joined(self):
        lines = ['{"response": "Hel"}', '{"response": "lo"}', '{"done": true}']
        assert read_ndjson_stream(lines) == "Hello"

    def test_invalid_lines_are_skipped(self):
        lines = ['{"response": "a"}', "not json", "[1, 2]", "", '{"response": "b"}']
        assert read_ndjson_stream(lines) == "ab"

    def test_result_is_trimmed(self):
        lines = ['{"response": "  \\n answer"}', '{"response": " \\n"}']
        assert read_ndjson_stream(lines) == "answer"

    def test_empty_stream(self):
        assert read_ndjson_stream([]) == ""


class TestStreamedBody:
    def test_single_chunk(self):
        assert _streaming_transport([STREAM]).complete("hi") == "Hello, wörld ✓"

    @pytest.mark.parametrize("size", [1, 2, 3, 5, 7, 16, 33])
    def test_arbitrary_chunk_boundaries(self, size):
        """Test lines and multi-byte characters split across chunks are not corrupted"""
        assert _streaming_transport(_split(STREAM, size)).complete("hi") == "Hello, wörld ✓"

    def test_last_line_without_newline(self):
        chunks = [b'{"response": "x"}\n{"resp', b'onse": "y"}']
        assert _streaming_transport(chunks).complete("hi") == "xy"

    def test_garbage_line_between_chunks(self):
        chunks = [b'{"response": "a"}\nnot js', b'on\n{"response": "b"}\n']
        assert _streaming_transport(chunks).complete("hi") == "ab"


class TestLocalTransport:
    def _transport(self, handler):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return LocalTransport(OLLAMA_URL, "qwen2.5:7b-instruct-q4_0", client=client)

    def test_posts_model_and_prompt(self):
        """Test the request body and streamed reply"""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=iter(_split(STREAM, 4)))

        transport = self._transport(handler)
        assert transport.complete("hello?", ModelTier.DEEP) == "Hello, wörld ✓"
        assert seen["url"] == OLLAMA_URL
        assert seen["body"] == {"model": "qwen2.5:7b-instruct-q4_0", "prompt": "hello?"}

    def test_non_2xx_carries_status_and_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text='{"error":"model not found"}')

        transport = self._transport(handler)
        with pytest.raises(TransportError) as exc_info:
            transport.complete("hi")

        err = exc_info.value
        assert err.status_code == 404
        assert err.body == '{"error":"model not found"}'
        assert "404" in str(err)
        assert '{"error":"model not found"}' in str(err)

    def test_network_error_becomes_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = self._transport(handler)
        with pytest.raises(TransportError) as exc_info:
            transport.complete("hi")
        assert exc_info.value.status_code is None

    @patch("sourcetutor.services.transport.logger")
    def test_failure_is_left_to_callers_to_log(self, mock_logger):
        """Test the transport raises without logging the failure itself"""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        with pytest.raises(TransportError):
            self._transport(handler).complete("hi")
        mock_logger.error.assert_not_called()


class TestCloudTransport:
    def test_fast_tier_uses_flash(self):
        client = MagicMock()
        client.generate_content.return_value = SimpleNamespace(text="pong")

        transport = CloudTransport(client)
        assert transport.complete("ping", ModelTier.FAST) == "pong"
        client.generate_content.assert_called_once_with("gemini-2.5-flash", "ping")

    def test_deep_tier_uses_pro(self):
        client = MagicMock()
        client.generate_content.return_value = {"response": {"text": lambda: "deep"}}

        transport = CloudTransport(client)
        assert transport.complete("why", ModelTier.DEEP) == "deep"
        client.generate_content.assert_called_once_with("gemini-2.5-pro", "why")

    def test_sdk_error_becomes_transport_error(self):
        client = MagicMock()
        client.generate_content.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(TransportError, match="quota exceeded"):
            CloudTransport(client).complete("x")

    @patch("sourcetutor.services.transport.logger")
    def test_sdk_error_is_not_logged_here(self, mock_logger):
        client = MagicMock()
        client.generate_content.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(TransportError):
            CloudTransport(client).complete("x")
        mock_logger.error.assert_not_called()

    def test_unreadable_response_is_empty(self):
        client = MagicMock()
        client.generate_content.return_value = SimpleNamespace(candidates=[])
        assert CloudTransport(client).complete("x") == ""


class TestSdkAdapters:
    def test_genai_client_adapter(self):
        sdk_client = MagicMock()
        adapter = GenAIClientAdapter(sdk_client)

        adapter.generate_content("gemini-2.5-flash", "prompt")
        sdk_client.models.generate_content.assert_called_once_with(model="gemini-2.5-flash", contents="prompt")

    def test_generative_model_adapter(self):
        sdk = MagicMock()
        adapter = GenerativeModelAdapter(sdk)

        adapter.generate_content("gemini-2.5-pro", "prompt")
        sdk.GenerativeModel.assert_called_once_with("gemini-2.5-pro")
        sdk.GenerativeModel.return_value.generate_content.assert_called_once_with("prompt")
