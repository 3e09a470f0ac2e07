"""
Object Storage Interface - the capability set the publisher needs.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StoredObject:
    """A durable URL plus the storage-internal identifier."""
    url: str
    public_id: str
    resource_type: str
    size: int


class ObjectStore(ABC):
    """
    Abstract interface for object storage providers.

    Implementations raise core.exceptions.UpstreamError on failure.
    """

    @abstractmethod
    def upload(
        self,
        content: bytes,
        public_id: str,
        folder: str,
        resource_type: str = "raw",
        transformation: Optional[str] = None,
        overwrite: bool = True
    ) -> StoredObject:
        """
        Store bytes under folder/public_id.

        Args:
            resource_type: 'raw' for untouched binaries, 'image' for images
            transformation: Provider transformation string applied on ingest
            overwrite: Replace existing content with the same public id
        """
        pass

    @abstractmethod
    def delete(self, public_id: str, resource_type: str = "raw") -> None:
        pass
