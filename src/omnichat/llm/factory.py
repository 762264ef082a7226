from .base import ProviderProfile
from .profiles import (
    AnthropicCompatibleProfile,
    AnthropicProfile,
    GoogleProfile,
    OpenAICompatibleProfile,
)
from .urls import CHAT_COMPLETIONS_PATH, is_anthropic_endpoint, is_google_endpoint, strip_url


def detect_profile(url: str) -> ProviderProfile:
    """Pick the provider profile for an endpoint URL.

    This factory function hides which wire format a URL implies.

    Args:
        url: Endpoint or base URL as entered by the user

    Returns:
        Profile instance for the endpoint family

    Examples:
        >>> detect_profile("https://api.groq.com/openai/v1")
        OpenAICompatibleProfile()

        >>> detect_profile("https://api.anthropic.com/v1")
        AnthropicProfile()
    """
    if is_google_endpoint(url):
        return GoogleProfile()

    if is_anthropic_endpoint(url):
        if strip_url(url).endswith(CHAT_COMPLETIONS_PATH):
            return AnthropicCompatibleProfile()
        return AnthropicProfile()

    return OpenAICompatibleProfile()


def normalize_url(url: str) -> str:
    """Return the canonical endpoint URL for ``url``.

    Examples:
        >>> normalize_url("https://api.openai.com/v1/")
        'https://api.openai.com/v1/chat/completions'

        >>> normalize_url("http://localhost:11434")
        'http://localhost:11434/v1/chat/completions'
    """
    return detect_profile(url).normalize_url(url)
