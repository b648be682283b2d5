"""Upload services module."""
from .file_service import FileValidator, AsyncFileReader
from .registry import FileRegistry
from .transport import AiohttpTransport, TransportResponse

__all__ = [
    'FileValidator',
    'AsyncFileReader',
    'FileRegistry',
    'AiohttpTransport',
    'TransportResponse',
]
