import logging
import os
import time
from typing import Iterable, Iterator

import orjson
import requests
from dotenv import load_dotenv

from errors import CompletionTimeoutError, ProviderError, UnknownProviderError

load_dotenv()

logger = logging.getLogger(__name__)

# ── LLM generation options (from .env) ──
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "120"))
LLM_MAX_OUTPUT_TOKENS = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "16000"))
TEMPERATURE = 0.0


def iter_sse_data(lines: Iterable[bytes | str]) -> Iterator[dict]:
    """
    Decode server-sent-event lines into JSON payloads.
    Only `data:` lines holding a JSON object count; `[DONE]` and malformed
    frames are skipped.
    """
    for line in lines:
        if not line:
            continue
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        if not line.startswith("data:"):
            continue
        data = line[5:].strip()
        if not data or data == "[DONE]":
            continue
        try:
            obj = orjson.loads(data)
        except orjson.JSONDecodeError:
            logger.debug("Skipping malformed SSE frame: %.200s", data)
            continue
        if not isinstance(obj, dict):
            logger.debug("Skipping non-object SSE frame: %.200s", data)
            continue
        yield obj


def _dig(obj, *path):
    """Follow dict keys and list indexes through decoded JSON; None on any shape mismatch."""
    for key in path:
        if isinstance(key, int):
            if not isinstance(obj, list) or len(obj) <= key:
                return None
            obj = obj[key]
        elif isinstance(obj, dict):
            obj = obj.get(key)
        else:
            return None
    return obj


def _text(value) -> str | None:
    return value if isinstance(value, str) else None


class LLMClient:
    """
    One completion provider. Subclasses only describe the wire format:
    how to build a request and where the text sits in the response.
    """

    name = "llm"
    default_model = ""

    def __init__(self, timeout: float | None = None, base_url: str | None = None):
        self.timeout = timeout or LLM_TIMEOUT
        self.base_url = (base_url or self.default_base_url()).rstrip("/")

    def default_base_url(self) -> str:
        raise NotImplementedError

    def _build_request(self, system: str, user: str, api_key: str, model: str,
                       stream: bool) -> tuple[str, dict, dict]:
        raise NotImplementedError

    def _extract_text(self, data: dict) -> str:
        raise NotImplementedError

    def _extract_delta(self, event: dict) -> str | None:
        raise NotImplementedError

    def complete(self, system: str, user: str, api_key: str, model: str | None = None) -> str:
        model = model or self.default_model
        url, headers, payload = self._build_request(system, user, api_key, model, stream=False)
        logger.info("%s completion request (model=%s, %d chars)", self.name, model, len(user))
        try:
            r = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            raise CompletionTimeoutError(self.name, self.timeout) from e
        except requests.RequestException as e:
            raise ProviderError(self.name, None, str(e)) from e
        if not r.ok:
            raise ProviderError(self.name, r.status_code, r.text)
        try:
            data = r.json()
        except ValueError as e:
            raise ProviderError(self.name, r.status_code, r.text) from e
        return self._extract_text(data) or ""

    def stream(self, system: str, user: str, api_key: str, model: str | None = None) -> Iterator[str]:
        """
        Yield text fragments as they arrive. The timeout also bounds the whole
        transfer; closing the generator closes the HTTP response.
        """
        model = model or self.default_model
        url, headers, payload = self._build_request(system, user, api_key, model, stream=True)
        logger.info("%s streaming request (model=%s, %d chars)", self.name, model, len(user))
        deadline = time.monotonic() + self.timeout
        try:
            with requests.post(url, headers=headers, json=payload, stream=True, timeout=self.timeout) as r:
                if not r.ok:
                    raise ProviderError(self.name, r.status_code, r.text)
                for event in iter_sse_data(r.iter_lines()):
                    if time.monotonic() > deadline:
                        raise CompletionTimeoutError(self.name, self.timeout)
                    delta = self._extract_delta(event)
                    if delta:
                        yield delta
        except requests.Timeout as e:
            raise CompletionTimeoutError(self.name, self.timeout) from e
        except requests.RequestException as e:
            raise ProviderError(self.name, None, str(e)) from e


class AnthropicClient(LLMClient):
    name = "anthropic"
    default_model = os.getenv("ANTHROPIC_MODEL", "claude-opus-4-5-20251101")
    api_version = "2023-06-01"

    def default_base_url(self) -> str:
        return os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com")

    def _build_request(self, system, user, api_key, model, stream):
        headers = {
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": self.api_version,
        }
        payload = {
            "model": model,
            "max_tokens": LLM_MAX_OUTPUT_TOKENS,
            "temperature": TEMPERATURE,
            "system": system,
            "messages": [{"role": "user", "content": user}],
        }
        if stream:
            payload["stream"] = True
        return f"{self.base_url}/v1/messages", headers, payload

    def _extract_text(self, data):
        blocks = _dig(data, "content")
        if not isinstance(blocks, list):
            return None
        return "".join(
            _text(_dig(b, "text")) or "" for b in blocks if _dig(b, "type") == "text"
        )

    def _extract_delta(self, event):
        if event.get("type") == "content_block_delta":
            return _text(_dig(event, "delta", "text"))
        return None


class GeminiClient(LLMClient):
    name = "gemini"
    default_model = os.getenv("GEMINI_MODEL", "gemini-1.5-pro")

    def default_base_url(self) -> str:
        return os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com")

    def _build_request(self, system, user, api_key, model, stream):
        headers = {"Content-Type": "application/json", "x-goog-api-key": api_key}
        payload = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": user}]}],
            "generationConfig": {
                "temperature": TEMPERATURE,
                "maxOutputTokens": LLM_MAX_OUTPUT_TOKENS,
            },
        }
        method = "streamGenerateContent?alt=sse" if stream else "generateContent"
        return f"{self.base_url}/v1beta/models/{model}:{method}", headers, payload

    @staticmethod
    def _first_part_text(data) -> str | None:
        return _text(_dig(data, "candidates", 0, "content", "parts", 0, "text"))

    def _extract_text(self, data):
        return self._first_part_text(data)

    def _extract_delta(self, event):
        return self._first_part_text(event)


class OpenAIClient(LLMClient):
    name = "openai"
    default_model = os.getenv("OPENAI_MODEL", "gpt-4o")

    def default_base_url(self) -> str:
        return os.getenv("OPENAI_BASE_URL", "https://api.openai.com")

    def _build_request(self, system, user, api_key, model, stream):
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"}
        payload = {
            "model": model,
            "temperature": TEMPERATURE,
            "max_tokens": LLM_MAX_OUTPUT_TOKENS,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        if stream:
            payload["stream"] = True
        return f"{self.base_url}/v1/chat/completions", headers, payload

    def _extract_text(self, data):
        return _text(_dig(data, "choices", 0, "message", "content"))

    def _extract_delta(self, event):
        return _text(_dig(event, "choices", 0, "delta", "content"))


CLIENTS: dict[str, type[LLMClient]] = {
    "anthropic": AnthropicClient,
    "gemini": GeminiClient,
    "openai": OpenAIClient,
}


def get_client(provider: str, timeout: float | None = None) -> LLMClient:
    try:
        cls = CLIENTS[provider]
    except KeyError:
        raise UnknownProviderError(provider) from None
    return cls(timeout=timeout)
