"""
Import progress events and the channel that carries them.

The importer writes events into a bounded ProgressChannel; the HTTP layer
drains it and forwards each event as one server-sent ``data:`` line. The
channel enforces the stream rules:

- ``total`` is sent at most once, before any per-item event
- per-item events carry the announced total and a 1-based index
- exactly one terminal event (``done`` or ``error``) ends the stream; if the
  producer stops without one, an ``error`` is synthesized on close
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Union

from loguru import logger

from .exceptions import ProgressProtocolError

DEFAULT_CHANNEL_SIZE = 64

INTERRUPTED_MESSAGE = "Import ended unexpectedly."


@dataclass(frozen=True)
class InfoEvent:
    message: str

    def to_payload(self) -> Dict[str, Any]:
        return {"type": "info", "message": self.message}


@dataclass(frozen=True)
class TotalEvent:
    total: int

    def to_payload(self) -> Dict[str, Any]:
        return {"type": "total", "total": self.total}


@dataclass(frozen=True)
class SearchingEvent:
    """Emitted before a cross-service lookup for item ``current``."""

    current: int
    total: int
    track: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": "searching",
            "current": self.current,
            "total": self.total,
            "track": self.track,
        }


@dataclass(frozen=True)
class SongImportedEvent:
    """Item ``current`` was persisted as ``song``."""

    current: int
    total: int
    song: Dict[str, Any]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": "progress",
            "current": self.current,
            "total": self.total,
            "song": self.song,
        }


@dataclass(frozen=True)
class SkipEvent:
    current: int
    total: int
    reason: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": "skip",
            "current": self.current,
            "total": self.total,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ErrorEvent:
    message: str

    def to_payload(self) -> Dict[str, Any]:
        return {"type": "error", "message": self.message}


@dataclass(frozen=True)
class DoneEvent:
    songs: List[Dict[str, Any]] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {"type": "done", "songs": list(self.songs)}


ProgressEvent = Union[
    InfoEvent,
    TotalEvent,
    SearchingEvent,
    SongImportedEvent,
    SkipEvent,
    ErrorEvent,
    DoneEvent,
]

ItemEvent = (SearchingEvent, SongImportedEvent, SkipEvent)
TerminalEvent = (ErrorEvent, DoneEvent)

_CLOSED = object()


class ProgressChannel:
    """Bounded single-producer, single-consumer queue of progress events."""

    def __init__(self, maxsize: int = DEFAULT_CHANNEL_SIZE) -> None:
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._total: Optional[int] = None
        self._terminal: Optional[ProgressEvent] = None
        self._trailer: Optional[ProgressEvent] = None
        self._closed = False
        self.items_reported = 0

    @property
    def total(self) -> Optional[int]:
        return self._total

    @property
    def terminated(self) -> bool:
        return self._terminal is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def _check(self, event: ProgressEvent) -> None:
        """Validate ``event`` against the stream rules and update state."""
        if self._closed:
            raise ProgressProtocolError("Channel is closed")
        if self._terminal is not None:
            raise ProgressProtocolError(
                f"Event after terminal {type(self._terminal).__name__}"
            )

        if isinstance(event, TotalEvent):
            if self._total is not None:
                raise ProgressProtocolError("total sent twice")
            if event.total < 0:
                raise ProgressProtocolError("total must be non-negative")
            self._total = event.total
        elif isinstance(event, ItemEvent):
            if self._total is None:
                raise ProgressProtocolError("Item event before total")
            if event.total != self._total:
                raise ProgressProtocolError(
                    f"Item total {event.total} differs from announced {self._total}"
                )
            if not 1 <= event.current <= self._total:
                raise ProgressProtocolError(f"Item index {event.current} out of range")
            if not isinstance(event, SearchingEvent):
                self.items_reported += 1
        elif isinstance(event, TerminalEvent):
            self._terminal = event

    async def emit(self, event: ProgressEvent) -> None:
        """Queue an event, waiting while the channel is full.

        Raises:
            ProgressProtocolError: If the event breaks the ordering rules
        """
        self._check(event)
        await self._queue.put(event)

    def close(self) -> None:
        """Mark the stream finished. Safe to call more than once.

        Never blocks, so it can run in a cancelled producer's cleanup.
        """
        if self._closed:
            return
        if self._terminal is None:
            logger.warning("Import ended without a terminal event")
            self._terminal = ErrorEvent(INTERRUPTED_MESSAGE)
            self._trailer = self._terminal
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # The consumer notices the closed flag once the queue drains
            pass

    async def __aiter__(self) -> AsyncIterator[ProgressEvent]:
        while True:
            if self._closed and self._queue.empty():
                break
            item = await self._queue.get()
            if item is _CLOSED:
                break
            yield item
        if self._trailer is not None:
            trailer, self._trailer = self._trailer, None
            yield trailer
