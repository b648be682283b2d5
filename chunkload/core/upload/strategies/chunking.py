"""
Chunk planning.

Turns a file size and a configured chunk size into an ordered, exhaustive
list of byte ranges. The planner falls back to a single whole-file range
whenever chunking does not apply.
"""
import math
from typing import Optional

from ..capabilities import CapabilityProfile
from ..models import ChunkPlan


def plan(
    file_size: int,
    chunk_size: int,
    profile: Optional[CapabilityProfile] = None
) -> ChunkPlan:
    """
    Compute the chunk plan of a file.

    Args:
        file_size: Total file size in bytes
        chunk_size: Configured chunk size; 0 or less disables chunking
        profile: Transport capabilities; chunking needs ``can_slice_chunks``

    Returns:
        ChunkPlan whose ranges cover the file exactly once
    """
    if file_size < 0:
        raise ValueError(f"File size must be non-negative, got {file_size}")

    can_slice = profile.can_slice_chunks if profile is not None else True

    if chunk_size <= 0 or file_size <= chunk_size or not can_slice:
        return ChunkPlan(file_size=file_size, chunk_size=file_size, total_chunks=1)

    return ChunkPlan(
        file_size=file_size,
        chunk_size=chunk_size,
        total_chunks=math.ceil(file_size / chunk_size)
    )
