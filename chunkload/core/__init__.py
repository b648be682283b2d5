"""Core components of chunkload."""
