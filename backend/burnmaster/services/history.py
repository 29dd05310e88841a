"""Session-scoped roast history and the one-in-flight guard."""
from collections import deque
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from burnmaster.models.roast import GeneratedRoast


class RoastHistory:
    """Most-recent-first list of roasts, bounded to ``limit`` entries.

    Lives in process memory only; nothing survives a restart.
    """

    def __init__(self, limit: int = 10) -> None:
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self.limit = limit
        self._entries: deque[GeneratedRoast] = deque(maxlen=limit)

    def add(self, roast: GeneratedRoast) -> None:
        """Prepend a roast, dropping the oldest entry when full."""
        self._entries.appendleft(roast)

    def recent(self, limit: int = 0) -> list[GeneratedRoast]:
        """Return roasts newest first, capped to ``limit`` (0 = all)."""
        entries = list(self._entries)
        return entries[:limit] if limit > 0 else entries

    @property
    def latest(self) -> Optional[GeneratedRoast]:
        return self._entries[0] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class GenerationInProgressError(Exception):
    """A roast is already being generated."""


class RoastGate:
    """Allows one generation in flight; concurrent callers are refused, not queued."""

    def __init__(self) -> None:
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[None]:
        if self._busy:
            raise GenerationInProgressError("A roast is already being generated")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False
