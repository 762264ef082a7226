from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .base import ProviderProfile


@dataclass(frozen=True)
class Frame:
    """One decoded stream frame.

    ``text`` is the incremental delta (None when the frame carries none);
    ``done`` marks the end-of-stream sentinel.
    """

    text: str | None = None
    done: bool = False


@dataclass(frozen=True)
class ProviderRequest:
    """A fully resolved HTTP request for one streaming chat call."""

    profile: "ProviderProfile"
    url: str
    headers: dict[str, str]
    body: dict[str, Any]
    params: dict[str, str] = field(default_factory=dict)

    @property
    def model(self) -> str:
        return str(self.body.get("model", ""))


class ChatStream:
    """Async iterator over the text deltas of one streaming response.

    Exhausting the iterator means the response completed, either on the
    end-of-stream sentinel or because the transport closed. Any failure is
    raised from ``__anext__``.

    Usage:
        stream = await adapter.open_stream(messages, settings)
        async for delta in stream:
            print(delta, end="")
    """

    def __init__(self, async_iter: AsyncIterator[str], request: ProviderRequest):
        """Initialize with an async iterator of text deltas.

        Args:
            async_iter: Async generator yielding text deltas
            request: The request that produced this stream
        """
        self._iter = async_iter
        self._request = request

    @property
    def request(self) -> ProviderRequest:
        return self._request

    def __aiter__(self) -> "ChatStream":
        """Return self as async iterator."""
        return self

    async def __anext__(self) -> str:
        """Get next delta from the underlying iterator."""
        return await self._iter.__anext__()

    async def aclose(self) -> None:
        """Stop reading and release the HTTP response."""
        aclose = getattr(self._iter, "aclose", None)
        if aclose is not None:
            await aclose()
