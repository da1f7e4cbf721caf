"""
Unit tests for backend/ictcheck/llm_client.py

Covers:
  - get_client() provider resolution
  - request shape per provider (mocked HTTP)
  - complete() error handling (timeout, HTTP errors)
  - stream() SSE decoding and deadline
"""

import itertools
import pytest
import requests
from unittest.mock import patch, MagicMock


def _import_client():
    import llm_client
    return llm_client


def _ok_response(payload):
    resp = MagicMock()
    resp.ok = True
    resp.status_code = 200
    resp.json.return_value = payload
    return resp


def _stream_response(lines, ok=True, status_code=200, text=""):
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status_code
    resp.text = text
    resp.iter_lines.return_value = iter(lines)
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


# ═══════════════════════════════════════════
#  get_client
# ═══════════════════════════════════════════
class TestGetClient:
    @pytest.mark.parametrize("provider,cls_name", [
        ("anthropic", "AnthropicClient"),
        ("gemini", "GeminiClient"),
        ("openai", "OpenAIClient"),
    ])
    def test_known_providers(self, provider, cls_name):
        lc = _import_client()
        client = lc.get_client(provider)
        assert type(client).__name__ == cls_name
        assert client.timeout == 120

    def test_custom_timeout(self):
        lc = _import_client()
        assert lc.get_client("openai", timeout=5).timeout == 5

    def test_unknown_provider(self):
        lc = _import_client()
        from errors import UnknownProviderError
        with pytest.raises(UnknownProviderError) as exc:
            lc.get_client("mistral")
        assert exc.value.code == "UNKNOWN_PROVIDER"


# ═══════════════════════════════════════════
#  complete()
# ═══════════════════════════════════════════
class TestComplete:
    @patch("llm_client.requests.post")
    def test_anthropic_request_and_text(self, mock_post):
        lc = _import_client()
        mock_post.return_value = _ok_response({"content": [{"type": "text", "text": '{"score": 80}'}]})

        out = lc.AnthropicClient().complete("SYS", "USER", "sk-ant")

        assert out == '{"score": 80}'
        args, kwargs = mock_post.call_args
        assert args[0].endswith("/v1/messages")
        assert kwargs["headers"]["x-api-key"] == "sk-ant"
        assert kwargs["headers"]["anthropic-version"] == "2023-06-01"
        payload = kwargs["json"]
        assert payload["system"] == "SYS"
        assert payload["messages"] == [{"role": "user", "content": "USER"}]
        assert payload["temperature"] == 0.0
        assert payload["max_tokens"] == 16000
        assert payload["model"] == lc.AnthropicClient.default_model
        assert kwargs["timeout"] == 120

    @patch("llm_client.requests.post")
    def test_gemini_request_and_text(self, mock_post):
        lc = _import_client()
        mock_post.return_value = _ok_response(
            {"candidates": [{"content": {"parts": [{"text": "bonjour"}]}}]}
        )

        out = lc.GeminiClient().complete("SYS", "USER", "g-key", model="gemini-2.0-flash")

        assert out == "bonjour"
        args, kwargs = mock_post.call_args
        assert args[0].endswith("/models/gemini-2.0-flash:generateContent")
        assert kwargs["headers"]["x-goog-api-key"] == "g-key"
        assert kwargs["json"]["generationConfig"]["temperature"] == 0.0
        assert kwargs["json"]["systemInstruction"]["parts"][0]["text"] == "SYS"

    @patch("llm_client.requests.post")
    def test_openai_request_and_text(self, mock_post):
        lc = _import_client()
        mock_post.return_value = _ok_response({"choices": [{"message": {"content": "hello"}}]})

        out = lc.OpenAIClient().complete("SYS", "USER", "sk-oa")

        assert out == "hello"
        args, kwargs = mock_post.call_args
        assert args[0].endswith("/v1/chat/completions")
        assert kwargs["headers"]["Authorization"] == "Bearer sk-oa"
        assert kwargs["json"]["messages"][0] == {"role": "system", "content": "SYS"}

    @patch("llm_client.requests.post")
    def test_empty_candidates_gives_empty_string(self, mock_post):
        lc = _import_client()
        mock_post.return_value = _ok_response({"candidates": []})
        assert lc.GeminiClient().complete("s", "u", "k") == ""

    @patch("llm_client.requests.post")
    def test_http_error_raises_provider_error(self, mock_post):
        lc = _import_client()
        from errors import ProviderError
        resp = MagicMock()
        resp.ok = False
        resp.status_code = 401
        resp.text = '{"error": "invalid api key"}'
        mock_post.return_value = resp

        with pytest.raises(ProviderError) as exc:
            lc.OpenAIClient().complete("s", "u", "bad")
        assert exc.value.status_code == 401
        assert "invalid api key" in exc.value.body
        assert exc.value.transient is False

    @patch("llm_client.requests.post")
    def test_timeout_raises_timeout_error(self, mock_post):
        lc = _import_client()
        from errors import CompletionTimeoutError
        mock_post.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(CompletionTimeoutError) as exc:
            lc.AnthropicClient(timeout=3).complete("s", "u", "k")
        assert exc.value.timeout == 3
        assert exc.value.code == "TIMEOUT"

    @patch("llm_client.requests.post")
    def test_connection_error_is_transient_provider_error(self, mock_post):
        lc = _import_client()
        from errors import ProviderError
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(ProviderError) as exc:
            lc.AnthropicClient().complete("s", "u", "k")
        assert exc.value.status_code is None
        assert exc.value.transient is True

    @patch("llm_client.requests.post")
    def test_non_json_body_raises_provider_error(self, mock_post):
        lc = _import_client()
        from errors import ProviderError
        resp = _ok_response(None)
        resp.text = "<html>gateway</html>"
        resp.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", resp.text, 0)
        mock_post.return_value = resp

        with pytest.raises(ProviderError) as exc:
            lc.AnthropicClient().complete("s", "u", "k")
        assert exc.value.status_code == 200
        assert "gateway" in exc.value.body

    @patch("llm_client.requests.post")
    def test_unexpected_shape_gives_empty_string(self, mock_post):
        lc = _import_client()
        mock_post.return_value = _ok_response({"choices": ["oops"]})
        assert lc.OpenAIClient().complete("s", "u", "k") == ""


# ═══════════════════════════════════════════
#  SSE decoding
# ═══════════════════════════════════════════
class TestIterSseData:
    def test_skips_done_comments_and_garbage(self):
        lc = _import_client()
        lines = [
            b": keep-alive",
            b"event: message",
            b'data: {"a": 1}',
            b"",
            b"data: {not json",
            "data: [DONE]",
            'data: {"b": 2}',
        ]
        assert list(lc.iter_sse_data(lines)) == [{"a": 1}, {"b": 2}]

    def test_skips_non_object_payloads(self):
        lc = _import_client()
        lines = [b"data: 42", b'data: "ping"', b"data: [1, 2]", b"data: null", b'data: {"ok": true}']
        assert list(lc.iter_sse_data(lines)) == [{"ok": True}]


# ═══════════════════════════════════════════
#  stream()
# ═══════════════════════════════════════════
class TestStream:
    @patch("llm_client.requests.post")
    def test_anthropic_deltas(self, mock_post):
        lc = _import_client()
        mock_post.return_value = _stream_response([
            b'data: {"type": "message_start", "message": {}}',
            b'data: {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "{\\"sc"}}',
            b'data: {"type": "ping"}',
            b'data: {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "ore\\": 1}"}}',
            b'data: {"type": "message_stop"}',
        ])

        out = "".join(lc.AnthropicClient().stream("s", "u", "k"))

        assert out == '{"score": 1}'
        assert mock_post.call_args.kwargs["stream"] is True
        assert mock_post.call_args.kwargs["json"]["stream"] is True

    @patch("llm_client.requests.post")
    def test_openai_deltas(self, mock_post):
        lc = _import_client()
        mock_post.return_value = _stream_response([
            b'data: {"choices": [{"delta": {"role": "assistant"}}]}',
            b'data: {"choices": [{"delta": {"content": "ab"}}]}',
            b'data: {"choices": [{"delta": {"content": "cd"}}]}',
            b"data: [DONE]",
        ])
        assert list(lc.OpenAIClient().stream("s", "u", "k")) == ["ab", "cd"]

    @patch("llm_client.requests.post")
    def test_odd_frames_do_not_abort(self, mock_post):
        lc = _import_client()
        mock_post.return_value = _stream_response([
            b'data: {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "ab"}}',
            b"data: 42",
            b'data: {"type": "content_block_delta", "delta": "oops"}',
            b'data: {"type": "content_block_delta", "delta": {"text": 7}}',
            b'data: {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "cd"}}',
        ])
        assert "".join(lc.AnthropicClient().stream("s", "u", "k")) == "abcd"

    @patch("llm_client.requests.post")
    def test_openai_malformed_choices_skipped(self, mock_post):
        lc = _import_client()
        mock_post.return_value = _stream_response([
            b'data: {"choices": ["x"]}',
            b'data: {"choices": [{"delta": null}]}',
            b'data: {"choices": [{"delta": {"content": "ok"}}]}',
        ])
        assert list(lc.OpenAIClient().stream("s", "u", "k")) == ["ok"]

    @patch("llm_client.requests.post")
    def test_gemini_uses_sse_endpoint(self, mock_post):
        lc = _import_client()
        mock_post.return_value = _stream_response([
            b'data: {"candidates": [{"content": {"parts": [{"text": "x"}]}}]}',
        ])
        assert list(lc.GeminiClient().stream("s", "u", "k")) == ["x"]
        assert mock_post.call_args.args[0].endswith(":streamGenerateContent?alt=sse")

    @patch("llm_client.requests.post")
    def test_stream_http_error(self, mock_post):
        lc = _import_client()
        from errors import ProviderError
        mock_post.return_value = _stream_response([], ok=False, status_code=529, text="overloaded")
        with pytest.raises(ProviderError) as exc:
            list(lc.AnthropicClient().stream("s", "u", "k"))
        assert exc.value.status_code == 529
        assert exc.value.transient is True

    @patch("llm_client.time.monotonic")
    @patch("llm_client.requests.post")
    def test_stream_deadline(self, mock_post, mock_clock):
        lc = _import_client()
        from errors import CompletionTimeoutError
        mock_post.return_value = _stream_response([
            b'data: {"choices": [{"delta": {"content": "a"}}]}',
            b'data: {"choices": [{"delta": {"content": "b"}}]}',
        ])
        # start, first fragment in time, then past the deadline
        mock_clock.side_effect = itertools.chain([0.0, 1.0], itertools.repeat(11.0))

        gen = lc.OpenAIClient(timeout=10).stream("s", "u", "k")
        assert next(gen) == "a"
        with pytest.raises(CompletionTimeoutError):
            next(gen)
