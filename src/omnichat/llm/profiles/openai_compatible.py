"""OpenAI-compatible chat completions endpoints.

Covers OpenAI itself and the many providers that copy its wire format
(Groq, OpenRouter, DeepSeek, Ollama, LM Studio, ...).
"""

from ..base import ProviderProfile, load_frame_object
from ..models import Frame

DONE_SENTINEL = "[DONE]"


def decode_openai_frame(payload: str) -> Frame:
    """Decode an OpenAI ``chat.completion.chunk`` payload.

    Only the first choice's ``delta.content`` is used.
    """
    if payload == DONE_SENTINEL:
        return Frame(done=True)

    data = load_frame_object(payload)
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return Frame()

    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return Frame()

    content = delta.get("content")
    if isinstance(content, str) and content:
        return Frame(text=content)
    return Frame()


class OpenAICompatibleProfile(ProviderProfile):
    """Bearer-token endpoint speaking the OpenAI chat completions format."""

    name = "openai"

    def complete_path(self, url: str) -> str:
        if url.endswith("/v1"):
            return f"{url}/chat/completions"
        if "/v1/" not in url:
            return f"{url}/v1/chat/completions"
        return url

    def auth(self, api_key: str) -> tuple[dict[str, str], dict[str, str]]:
        if not api_key:
            return {}, {}
        return {"Authorization": f"Bearer {api_key}"}, {}

    def decode_frame(self, payload: str) -> Frame:
        return decode_openai_frame(payload)
