"""
Adapters layer - External integrations (timezone database, blob storage).
"""

from .blob_store import BlobStoreProtocol, InMemoryBlobStore, JsonFileBlobStore
from .pendulum_timezone import PendulumTimezoneAuthority

__all__ = ["BlobStoreProtocol", "InMemoryBlobStore", "JsonFileBlobStore", "PendulumTimezoneAuthority"]
