"""Incremental server-sent-event line framing.

Network reads do not respect line boundaries, so the last unterminated line
of every read is held back and completed by the next one.
"""

DATA_PREFIX = "data:"


class SSELineBuffer:
    """Turns arbitrary text chunks into complete ``data:`` payloads.

    Usage:
        buffer = SSELineBuffer()
        for chunk in chunks:
            for payload in buffer.feed(chunk):
                handle(payload)
        for payload in buffer.flush():
            handle(payload)
    """

    def __init__(self) -> None:
        self._pending = ""

    @property
    def pending(self) -> str:
        """Text received after the last newline."""
        return self._pending

    def feed(self, text: str) -> list[str]:
        """Add ``text`` and return the payloads of every line it completed."""
        self._pending += text
        *lines, self._pending = self._pending.split("\n")
        payloads = []
        for line in lines:
            payload = self.parse_line(line)
            if payload is not None:
                payloads.append(payload)
        return payloads

    def flush(self) -> list[str]:
        """Return the payload of a trailing line that never got its newline."""
        line, self._pending = self._pending, ""
        payload = self.parse_line(line)
        return [payload] if payload is not None else []

    @staticmethod
    def parse_line(line: str) -> str | None:
        """Extract the payload of a ``data:`` line.

        Returns None for blank lines, comments and other SSE fields.
        """
        stripped = line.strip()
        if not stripped.startswith(DATA_PREFIX):
            return None
        payload = stripped[len(DATA_PREFIX):].strip()
        return payload or None
