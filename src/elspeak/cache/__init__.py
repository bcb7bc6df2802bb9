"""On-disk artifact cache for elspeak."""

from .keys import derive_cache_key
from .store import ArtifactStore

__all__ = ["ArtifactStore", "derive_cache_key"]
