"""Upload events and sinks."""
from .events import ChunkUploaded, UploadProgress, FileUploaded, UploadError, UploadEvent
from .sink import EventSink, BaseEventSink, CallbackEventSink, QueueEventSink, dispatch

__all__ = [
    'ChunkUploaded',
    'UploadProgress',
    'FileUploaded',
    'UploadError',
    'UploadEvent',
    'EventSink',
    'BaseEventSink',
    'CallbackEventSink',
    'QueueEventSink',
    'dispatch',
]
