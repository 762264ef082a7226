from .anthropic import AnthropicCompatibleProfile, AnthropicProfile
from .google import GoogleProfile
from .openai_compatible import DONE_SENTINEL, OpenAICompatibleProfile

__all__ = [
    "AnthropicCompatibleProfile",
    "AnthropicProfile",
    "DONE_SENTINEL",
    "GoogleProfile",
    "OpenAICompatibleProfile",
]
