"""Upload strategies module."""
from .chunking import plan
from .encoding import RequestEncoder, encode, new_boundary

__all__ = [
    'plan',
    'RequestEncoder',
    'encode',
    'new_boundary',
]
