"""Google Generative Language API through its OpenAI compatibility layer."""

import re

from ..base import ProviderProfile
from ..models import Frame
from ..urls import path_of
from .openai_compatible import decode_openai_frame

_VERSION_SEGMENT_RE = re.compile(r"/v\d+[a-z0-9]*(/|$)")
DEFAULT_API_VERSION = "v1beta"


class GoogleProfile(ProviderProfile):
    """Gemini endpoint authenticated with a ``key`` query parameter.

    The key travels in the query string and no Authorization header is
    sent; the endpoint rejects cross-origin preflights that carry one.
    """

    name = "google"

    def complete_path(self, url: str) -> str:
        path = path_of(url)
        if "/openai" in path:
            return f"{url}/chat/completions"
        if _VERSION_SEGMENT_RE.search(path):
            return f"{url}/openai/chat/completions"
        return f"{url}/{DEFAULT_API_VERSION}/openai/chat/completions"

    def auth(self, api_key: str) -> tuple[dict[str, str], dict[str, str]]:
        if not api_key:
            return {}, {}
        return {}, {"key": api_key}

    def decode_frame(self, payload: str) -> Frame:
        return decode_openai_frame(payload)
