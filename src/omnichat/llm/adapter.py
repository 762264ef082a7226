"""Streaming chat adapter.

Turns a conversation plus settings into one HTTP request against whatever
endpoint the settings point at, and decodes the event stream into text
deltas. It never touches session storage.
"""

import json
import logging
import re
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import aclosing
from typing import Any

import httpx

from ..exceptions import ConfigurationError, NetworkError, ProtocolError, ProviderError
from ..sessions.models import Message
from ..settings.models import AppSettings
from ..settings.presets import FALLBACK_SYSTEM_PROMPT
from .base import FrameParseNoise, ProviderProfile
from .factory import detect_profile
from .models import ChatStream, Frame, ProviderRequest
from .sse import SSELineBuffer
from .urls import is_local_endpoint, strip_url

logger = logging.getLogger(__name__)

# o1, o3-mini, openai/o4-mini, deepseek-reasoner, gemini-2.0-flash-thinking-exp
_REASONING_PREFIX_RE = re.compile(r"(?:^|/)o\d", re.IGNORECASE)
_REASONING_MARKERS = ("thinking", "reasoner")
REASONING_TEMPERATURE = 1.0

_MARKUP_RE = re.compile(r"<[^>]*>?")
ERROR_PREVIEW_LENGTH = 150


def is_reasoning_model(model: str) -> bool:
    """Check if a model belongs to a family that only accepts temperature 1."""
    lowered = model.lower()
    if _REASONING_PREFIX_RE.search(lowered):
        return True
    return any(marker in lowered for marker in _REASONING_MARKERS)


def resolve_temperature(model: str, temperature: float) -> float:
    """Return the temperature to transmit for ``model``."""
    if is_reasoning_model(model):
        return REASONING_TEMPERATURE
    return temperature


def check_configuration(settings: AppSettings) -> None:
    """Validate that ``settings`` can address an endpoint.

    Raises:
        ConfigurationError: If the URL is empty, or the key is empty for a
            host that is not localhost
    """
    if not settings.api_url.strip():
        raise ConfigurationError("API URL is missing. Please check settings.")
    if not settings.api_key.strip() and not is_local_endpoint(settings.api_url):
        raise ConfigurationError("API Key is missing. Please configure it in settings.")


def describe_http_error(status_code: int, reason: str, body: str, model: str = "") -> str:
    """Build a readable message from a failed response body.

    Args:
        status_code: HTTP status
        reason: HTTP reason phrase
        body: Response body text
        model: Model that was requested, for hints

    Returns:
        Human-readable error message
    """
    message = f"API Error: {status_code} {reason}".rstrip()

    try:
        data = json.loads(body)
    except (json.JSONDecodeError, ValueError):
        # HTML from proxies and gateways
        clean = " ".join(_MARKUP_RE.sub(" ", body).split())
        message = f"Network Error ({status_code}): {clean[:ERROR_PREVIEW_LENGTH]}..."
    else:
        if isinstance(data, list) and data and isinstance(data[0], dict):
            data = data[0]
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                message = f"Provider Error: {error['message']}"
            elif isinstance(error, str) and error:
                message = f"Provider Error: {error}"
            elif data.get("message"):
                message = f"Provider Error: {data['message']}"

    if status_code == 404 and "gpt-5" in model:
        message += (
            "\n(Note: You are trying to use a future/preview model on a provider "
            "that probably doesn't support it yet.)"
        )
    return message


def to_wire_messages(messages: Sequence[Message], system_prompt: str) -> list[dict[str, str]]:
    """Reduce messages to ``{role, content}`` behind a leading system message.

    Attachments are not transmitted separately; callers inline them into
    ``content`` beforehand.
    """
    prompt = system_prompt if system_prompt.strip() else FALLBACK_SYSTEM_PROMPT
    wire = [{"role": "system", "content": prompt}]
    wire.extend({"role": m.role.value, "content": m.content} for m in messages)
    return wire


class ProviderAdapter:
    """Streams chat completions from any supported endpoint.

    Hidden design decisions:
    - URL canonicalization and provider detection
    - Authentication placement (header vs query parameter)
    - Event-stream framing across network reads
    - Mapping of HTTP and transport failures to omnichat errors

    Supports async context manager protocol for proper resource cleanup:
        async with ProviderAdapter() as adapter:
            stream = await adapter.open_stream(messages, settings)
    """

    def __init__(self, client: httpx.AsyncClient | None = None, **client_kwargs: Any):
        """Initialize the adapter.

        Args:
            client: Optional shared HTTP client (the adapter will not close it)
            **client_kwargs: Additional kwargs for the httpx.AsyncClient the
                adapter creates when no client is given
        """
        self._client = client
        self._owns_client = client is None
        self._client_kwargs = client_kwargs

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # No timeout: the transport's own behavior decides
            self._client_kwargs.setdefault("timeout", None)
            self._client_kwargs.setdefault("follow_redirects", True)
            self._client = httpx.AsyncClient(**self._client_kwargs)
        return self._client

    def build_request(self, messages: Sequence[Message], settings: AppSettings) -> ProviderRequest:
        """Resolve URL, auth, headers and body for a streaming call.

        Raises:
            ConfigurationError: If settings cannot address an endpoint
        """
        check_configuration(settings)

        api_key = settings.api_key.strip()
        profile = detect_profile(settings.api_url)
        url = profile.normalize_url(settings.api_url)
        if url != strip_url(settings.api_url):
            logger.info("Auto-corrected API URL to: %s", url)

        temperature = resolve_temperature(settings.model, settings.temperature)
        body = profile.build_body(
            settings.model,
            to_wire_messages(messages, settings.system_prompt),
            temperature,
        )

        headers = {"Content-Type": "application/json", "Accept": "text/event-stream"}
        auth_headers, params = profile.auth(api_key)
        headers.update(auth_headers)

        return ProviderRequest(profile=profile, url=url, headers=headers, body=body, params=params)

    async def open_stream(self, messages: Sequence[Message], settings: AppSettings) -> ChatStream:
        """Start a streaming chat completion.

        Configuration is validated here, before any network activity. The
        request itself is sent when iteration starts.

        Args:
            messages: Conversation so far, oldest first
            settings: Snapshot of settings for this call

        Returns:
            ChatStream yielding text deltas

        Raises:
            ConfigurationError: If settings cannot address an endpoint
        """
        request = self.build_request(messages, settings)
        return ChatStream(self._stream_generator(request), request)

    async def stream_chat(
        self,
        messages: Sequence[Message],
        settings: AppSettings,
        on_chunk: Callable[[str], None],
        on_complete: Callable[[], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Stream a chat completion into callbacks.

        Exactly one of ``on_complete`` or ``on_error`` is called. Failures are
        never raised to the caller.
        """
        try:
            stream = await self.open_stream(messages, settings)
            async with aclosing(stream):
                async for delta in stream:
                    on_chunk(delta)
        except Exception as e:
            logger.error("Chat stream failed: %s", e)
            on_error(e)
            return
        on_complete()

    async def _stream_generator(self, request: ProviderRequest) -> AsyncIterator[str]:
        """Internal generator that sends the request and yields deltas."""
        client = self._get_client()
        logger.info("Connecting to %s (%s) with model: %s", request.url, request.profile.name, request.model)

        try:
            async with client.stream(
                "POST",
                request.url,
                params=request.params,
                headers=request.headers,
                json=request.body,
            ) as response:
                if not response.is_success:
                    raw = await response.aread()
                    raise ProviderError(
                        describe_http_error(
                            response.status_code,
                            response.reason_phrase,
                            raw.decode("utf-8", errors="replace"),
                            request.model,
                        ),
                        response.status_code,
                    )
                if response.status_code == 204:
                    raise ProtocolError("Response body is empty")

                async with aclosing(self._read_payloads(response)) as payloads:
                    async for payload in payloads:
                        frame = self._decode(request.profile, payload)
                        if frame.done:
                            # Stop at the sentinel without waiting for the transport to close
                            return
                        if frame.text:
                            yield frame.text
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}") from e

    @staticmethod
    async def _read_payloads(response: httpx.Response) -> AsyncIterator[str]:
        buffer = SSELineBuffer()
        received = False
        async for text in response.aiter_text():
            if not text:
                continue
            received = True
            for payload in buffer.feed(text):
                yield payload
        if not received:
            raise ProtocolError("Response body is empty")
        for payload in buffer.flush():
            yield payload

    @staticmethod
    def _decode(profile: ProviderProfile, payload: str) -> Frame:
        try:
            return profile.decode_frame(payload)
        except FrameParseNoise as e:
            logger.debug("Skipping stream frame: %s", e)
            return Frame()

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ProviderAdapter":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
