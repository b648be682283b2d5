"""Upload models."""
from .upload_models import (
    FileHandle,
    ChunkInfo,
    ChunkPlan,
    TransferStatus,
    TransferState,
    UploadSettings,
    EncodingStrategy,
    EncodedRequest,
)

__all__ = [
    'FileHandle',
    'ChunkInfo',
    'ChunkPlan',
    'TransferStatus',
    'TransferState',
    'UploadSettings',
    'EncodingStrategy',
    'EncodedRequest',
]
