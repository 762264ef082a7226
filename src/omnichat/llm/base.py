import json
from abc import ABC, abstractmethod
from typing import Any

from .models import Frame
from .urls import CHAT_COMPLETIONS_PATH, strip_url


class FrameParseNoise(ValueError):
    """A stream frame that could not be decoded.

    Providers interleave keep-alives and comments with real frames; these
    are skipped and never reach the caller.
    """


def load_frame_object(payload: str) -> dict[str, Any]:
    """Parse a frame payload that must be a JSON object.

    Raises:
        FrameParseNoise: If the payload is not a JSON object
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise FrameParseNoise(f"Unparseable frame: {payload[:80]!r}") from e
    if not isinstance(data, dict):
        raise FrameParseNoise(f"Frame is not an object: {payload[:80]!r}")
    return data


class ProviderProfile(ABC):
    """Wire-level description of one family of chat endpoints.

    This module hides the design decision of how a provider is spoken to.
    Each profile supplies:
    - URL canonicalization (which path the endpoint expects)
    - Authentication (header or query parameter)
    - Request body shape
    - Stream frame decoding
    """

    name: str = "base"

    def normalize_url(self, url: str) -> str:
        """Return the canonical endpoint URL for ``url``.

        Idempotent: normalizing a canonical URL returns it unchanged.
        """
        stripped = strip_url(url)
        if not stripped or stripped.endswith(CHAT_COMPLETIONS_PATH):
            return stripped
        return self.complete_path(stripped)

    @abstractmethod
    def complete_path(self, url: str) -> str:
        """Append whatever path the endpoint family needs to a base URL."""

    @abstractmethod
    def auth(self, api_key: str) -> tuple[dict[str, str], dict[str, str]]:
        """Build authentication for ``api_key``.

        Returns:
            Tuple of (headers, query params); both empty when there is no key
        """

    def build_body(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
    ) -> dict[str, Any]:
        """Build the JSON body of a streaming chat request.

        Args:
            model: Model identifier
            messages: Wire messages, system prompt first
            temperature: Sampling temperature already adjusted for the model
        """
        return {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "stream": True,
        }

    @abstractmethod
    def decode_frame(self, payload: str) -> Frame:
        """Decode one ``data:`` payload.

        Raises:
            FrameParseNoise: If the payload is not a frame of this format
            ProviderError: If the frame reports a provider-side failure
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
