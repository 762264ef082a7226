"""Pytest configuration and shared fixtures."""
import asyncio
import json
from collections.abc import AsyncIterator, Callable, Iterable

import httpx
import pytest

from omnichat.settings import AppSettings
from omnichat.storage import InMemoryStorage


def openai_chunk(text: str) -> str:
    """Return one OpenAI-style SSE line carrying ``text``."""
    payload = {"choices": [{"index": 0, "delta": {"content": text}}]}
    return f"data: {json.dumps(payload)}\n\n"


def sse_body(*deltas: str, done: bool = True) -> str:
    """Build a complete OpenAI-style event stream."""
    body = "".join(openai_chunk(d) for d in deltas)
    if done:
        body += "data: [DONE]\n\n"
    return body


class ChunkedStream(httpx.AsyncByteStream):
    """Response body delivered in fixed pieces.

    When ``gate`` is given, the stream waits on it after the pieces are
    sent; when ``hang`` is set it never finishes on its own.
    """

    def __init__(
        self,
        chunks: Iterable[str | bytes],
        gate: asyncio.Event | None = None,
        rest: Iterable[str | bytes] = (),
        hang: bool = False,
    ):
        self._chunks = [c.encode("utf-8") if isinstance(c, str) else c for c in chunks]
        self._rest = [c.encode("utf-8") if isinstance(c, str) else c for c in rest]
        self._gate = gate
        self._hang = hang
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk
        if self._gate is not None:
            await self._gate.wait()
        for chunk in self._rest:
            yield chunk
        if self._hang:
            await asyncio.Event().wait()

    async def aclose(self) -> None:
        self.closed = True


class RecordingHandler:
    """MockTransport handler that records requests and replays a response."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self._respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


def mock_client(respond: Callable[[httpx.Request], httpx.Response]) -> tuple[httpx.AsyncClient, RecordingHandler]:
    """Create an AsyncClient backed by ``respond`` plus its recorder."""
    handler = RecordingHandler(respond)
    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), handler


@pytest.fixture
def storage():
    """Return empty in-memory storage."""
    return InMemoryStorage()


@pytest.fixture
def settings():
    """Return settings pointing at a remote OpenAI-compatible endpoint."""
    return AppSettings(
        api_url="https://api.example.com/v1/chat/completions",
        api_key="sk-test-key",
        model="gpt-4o",
        system_prompt="Be brief.",
        temperature=0.5,
    )
