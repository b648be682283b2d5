"""
Upload module.

Chunked HTTP upload engine: plans byte ranges, encodes each chunk as a
multipart or raw body, sends chunks one at a time and reports progress.
"""
from .capabilities import CapabilityProfile
from .coordinator import UploadCoordinator
from .session import TransportSession
from .progress import ProgressReporter
from .models import (
    FileHandle,
    ChunkInfo,
    ChunkPlan,
    TransferStatus,
    TransferState,
    UploadSettings,
    EncodingStrategy,
    EncodedRequest,
)
from .protocols import FileReaderProtocol, TransportProtocol
from .services import FileRegistry, FileValidator, AsyncFileReader, AiohttpTransport, TransportResponse
from .strategies import plan, encode, RequestEncoder

__all__ = [
    # Main classes
    'UploadCoordinator',
    'TransportSession',
    'ProgressReporter',
    'CapabilityProfile',

    # Models
    'FileHandle',
    'ChunkInfo',
    'ChunkPlan',
    'TransferStatus',
    'TransferState',
    'UploadSettings',
    'EncodingStrategy',
    'EncodedRequest',

    # Protocols
    'FileReaderProtocol',
    'TransportProtocol',

    # Services
    'FileRegistry',
    'FileValidator',
    'AsyncFileReader',
    'AiohttpTransport',
    'TransportResponse',

    # Strategies
    'plan',
    'encode',
    'RequestEncoder',
]
