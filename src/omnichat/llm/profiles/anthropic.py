"""Anthropic endpoints.

Native URLs speak the Messages API, whose stream is a sequence of typed
events rather than OpenAI deltas, so they get their own body builder and
frame decoder. Anthropic URLs that already point at ``/chat/completions``
use the OpenAI-compatible layer with Anthropic authentication.
"""

from typing import Any

from ...exceptions import ProviderError
from ..base import ProviderProfile, load_frame_object
from ..models import Frame
from .openai_compatible import decode_openai_frame

ANTHROPIC_VERSION = "2023-06-01"
MESSAGES_PATH = "/messages"
DEFAULT_MAX_TOKENS = 4096  # Anthropic requires max_tokens
MAX_TEMPERATURE = 1.0


def anthropic_auth(api_key: str) -> tuple[dict[str, str], dict[str, str]]:
    if not api_key:
        return {}, {}
    return {"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION}, {}


class AnthropicProfile(ProviderProfile):
    """Native Anthropic Messages API.

    Hidden design decisions:
    - System prompt moves from the message list to a top-level field
    - Temperature is capped at 1.0, the Messages API maximum
    - Text arrives in ``content_block_delta`` events; ``message_stop`` ends
      the stream and ``error`` events become ProviderError
    """

    name = "anthropic"

    def complete_path(self, url: str) -> str:
        if url.endswith(MESSAGES_PATH):
            return url
        if url.endswith("/v1"):
            return f"{url}{MESSAGES_PATH}"
        if "/v1/" not in url:
            return f"{url}/v1{MESSAGES_PATH}"
        return f"{url}{MESSAGES_PATH}"

    def auth(self, api_key: str) -> tuple[dict[str, str], dict[str, str]]:
        return anthropic_auth(api_key)

    def build_body(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
    ) -> dict[str, Any]:
        system_parts = [m["content"] for m in messages if m["role"] == "system" and m["content"]]
        conversation = [m for m in messages if m["role"] != "system"]

        body: dict[str, Any] = {
            "model": model,
            "messages": conversation,
            "temperature": min(temperature, MAX_TEMPERATURE),
            "max_tokens": DEFAULT_MAX_TOKENS,
            "stream": True,
        }
        if system_parts:
            body["system"] = "\n\n".join(system_parts)
        return body

    def decode_frame(self, payload: str) -> Frame:
        data = load_frame_object(payload)
        event_type = data.get("type")

        if event_type == "content_block_delta":
            delta = data.get("delta")
            if isinstance(delta, dict) and delta.get("type") == "text_delta":
                text = delta.get("text")
                if isinstance(text, str) and text:
                    return Frame(text=text)
            return Frame()

        if event_type == "message_stop":
            return Frame(done=True)

        if event_type == "error":
            error = data.get("error")
            message = error.get("message") if isinstance(error, dict) else None
            raise ProviderError(f"Provider Error: {message or 'stream error'}")

        # message_start, content_block_start/stop, message_delta, ping
        return Frame()


class AnthropicCompatibleProfile(ProviderProfile):
    """Anthropic's OpenAI-compatible chat completions endpoint."""

    name = "anthropic-openai"

    def complete_path(self, url: str) -> str:
        # Only selected for URLs that already end in /chat/completions
        return url

    def auth(self, api_key: str) -> tuple[dict[str, str], dict[str, str]]:
        return anthropic_auth(api_key)

    def decode_frame(self, payload: str) -> Frame:
        return decode_openai_frame(payload)
