"""
Event sinks.

A sink is handed to each transport session and receives that session's
events in order. There is no global dispatch: whoever starts an upload
decides where its events go.
"""
import asyncio
from typing import Protocol, Callable, Dict, List, Optional, Type, runtime_checkable

from .events import ChunkUploaded, UploadProgress, FileUploaded, UploadError, UploadEvent


@runtime_checkable
class EventSink(Protocol):
    """Receiver of upload events."""

    def on_chunk_uploaded(self, event: ChunkUploaded) -> None: ...
    def on_progress(self, event: UploadProgress) -> None: ...
    def on_done(self, event: FileUploaded) -> None: ...
    def on_error(self, event: UploadError) -> None: ...


class BaseEventSink:
    """Sink that ignores every event; subclass and override what you need."""

    def on_chunk_uploaded(self, event: ChunkUploaded) -> None:
        pass

    def on_progress(self, event: UploadProgress) -> None:
        pass

    def on_done(self, event: FileUploaded) -> None:
        pass

    def on_error(self, event: UploadError) -> None:
        pass


class CallbackEventSink(BaseEventSink):
    """
    Sink backed by plain callables.

    Example:
        >>> sink = CallbackEventSink(on_progress=lambda e: print(e.bytes_loaded))
        >>> sink.on(FileUploaded, lambda e: print("done"))  # doctest: +ELLIPSIS
        <...CallbackEventSink object at ...>
    """

    def __init__(
        self,
        on_chunk_uploaded: Optional[Callable[[ChunkUploaded], None]] = None,
        on_progress: Optional[Callable[[UploadProgress], None]] = None,
        on_done: Optional[Callable[[FileUploaded], None]] = None,
        on_error: Optional[Callable[[UploadError], None]] = None,
    ):
        self._handlers: Dict[Type, List[Callable]] = {}
        for event_type, callback in (
            (ChunkUploaded, on_chunk_uploaded),
            (UploadProgress, on_progress),
            (FileUploaded, on_done),
            (UploadError, on_error),
        ):
            if callback is not None:
                self.on(event_type, callback)

    def on(self, event_type: Type, callback: Callable) -> 'CallbackEventSink':
        """Registers a handler for an event type."""
        self._handlers.setdefault(event_type, []).append(callback)
        return self

    def off(self, event_type: Type, callback: Optional[Callable] = None) -> 'CallbackEventSink':
        """Removes one handler, or all handlers of the event type."""
        if event_type not in self._handlers:
            return self

        if callback is None:
            del self._handlers[event_type]
        else:
            self._handlers[event_type] = [cb for cb in self._handlers[event_type] if cb != callback]

        return self

    def _fire(self, event: UploadEvent) -> None:
        for callback in self._handlers.get(type(event), []):
            callback(event)

    def on_chunk_uploaded(self, event: ChunkUploaded) -> None:
        self._fire(event)

    def on_progress(self, event: UploadProgress) -> None:
        self._fire(event)

    def on_done(self, event: FileUploaded) -> None:
        self._fire(event)

    def on_error(self, event: UploadError) -> None:
        self._fire(event)


class QueueEventSink(BaseEventSink):
    """
    Sink that pushes every event onto an ``asyncio.Queue``.

    Consumers read events in emission order. A queue consumer sees
    ``ChunkUploaded`` after the session has moved on, so it cannot use the
    ``cancelled`` flag; cancel through the coordinator instead.
    """

    def __init__(self, queue: Optional[asyncio.Queue] = None):
        self.queue: asyncio.Queue = queue if queue is not None else asyncio.Queue()

    def _put(self, event: UploadEvent) -> None:
        self.queue.put_nowait(event)

    def on_chunk_uploaded(self, event: ChunkUploaded) -> None:
        self._put(event)

    def on_progress(self, event: UploadProgress) -> None:
        self._put(event)

    def on_done(self, event: FileUploaded) -> None:
        self._put(event)

    def on_error(self, event: UploadError) -> None:
        self._put(event)


def dispatch(sink: EventSink, event: UploadEvent) -> None:
    """Routes an event to the matching sink method."""
    if isinstance(event, ChunkUploaded):
        sink.on_chunk_uploaded(event)
    elif isinstance(event, UploadProgress):
        sink.on_progress(event)
    elif isinstance(event, FileUploaded):
        sink.on_done(event)
    elif isinstance(event, UploadError):
        sink.on_error(event)
    else:
        raise TypeError(f"Unknown event type: {type(event).__name__}")
