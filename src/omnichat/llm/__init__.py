from .adapter import (
    ProviderAdapter,
    check_configuration,
    describe_http_error,
    is_reasoning_model,
    resolve_temperature,
    to_wire_messages,
)
from .base import FrameParseNoise, ProviderProfile
from .factory import detect_profile, normalize_url
from .models import ChatStream, Frame, ProviderRequest
from .profiles import (
    AnthropicCompatibleProfile,
    AnthropicProfile,
    GoogleProfile,
    OpenAICompatibleProfile,
)
from .sse import SSELineBuffer
from .urls import is_local_endpoint

__all__ = [
    "ProviderAdapter",
    "ProviderProfile",
    "ChatStream",
    "Frame",
    "FrameParseNoise",
    "ProviderRequest",
    "SSELineBuffer",
    "AnthropicCompatibleProfile",
    "AnthropicProfile",
    "GoogleProfile",
    "OpenAICompatibleProfile",
    "check_configuration",
    "describe_http_error",
    "detect_profile",
    "is_local_endpoint",
    "is_reasoning_model",
    "normalize_url",
    "resolve_temperature",
    "to_wire_messages",
]
