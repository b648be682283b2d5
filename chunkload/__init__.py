"""
chunkload - Async chunked HTTP upload engine.

Usage:
    >>> from chunkload import UploadClient
    >>>
    >>> async with UploadClient() as client:
    ...     handle = client.add_file("backup.tar")
    ...     state = await client.upload(handle, "https://example.com/upload", chunk_size=4 * 1024 * 1024)
"""
import logging
from .client import UploadClient

# Configuration
from .core.config import (
    TransportConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
)

# Engine
from .core.upload import (
    CapabilityProfile,
    UploadCoordinator,
    TransportSession,
    FileHandle,
    FileRegistry,
    ChunkPlan,
    TransferState,
    TransferStatus,
    UploadSettings,
    AiohttpTransport,
    plan,
)

# Events
from .core.events import (
    ChunkUploaded,
    UploadProgress,
    FileUploaded,
    UploadError,
    EventSink,
    BaseEventSink,
    CallbackEventSink,
    QueueEventSink,
)

from .core.exceptions import (
    ErrorKind,
    ChunkloadException,
    UploadHTTPError,
    TransportError,
    FileReadError,
    UnknownFileError,
    UploadInProgressError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for chunkload modules.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'chunkload',
        'chunkload.client',
        'chunkload.upload.capabilities',
        'chunkload.upload.coordinator',
        'chunkload.upload.session',
        'chunkload.upload.encoding',
        'chunkload.upload.transport',
        'chunkload.upload.file',
        'chunkload.upload.registry',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'UploadClient',
    'TransportConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'CapabilityProfile',
    'UploadCoordinator',
    'TransportSession',
    'FileHandle',
    'FileRegistry',
    'ChunkPlan',
    'TransferState',
    'TransferStatus',
    'UploadSettings',
    'AiohttpTransport',
    'plan',
    'ChunkUploaded',
    'UploadProgress',
    'FileUploaded',
    'UploadError',
    'EventSink',
    'BaseEventSink',
    'CallbackEventSink',
    'QueueEventSink',
    'ErrorKind',
    'ChunkloadException',
    'UploadHTTPError',
    'TransportError',
    'FileReadError',
    'UnknownFileError',
    'UploadInProgressError',
    'setup_logging',
]
