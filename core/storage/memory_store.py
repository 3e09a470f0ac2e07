"""In-memory object store for offline runs and tests."""
import logging
from typing import Dict, Optional, Tuple

from core.exceptions import UpstreamError
from core.storage.interfaces import ObjectStore, StoredObject

logger = logging.getLogger(__name__)


class InMemoryObjectStore(ObjectStore):
    """Keeps objects in a dict keyed by full public id. Set ``fail`` to simulate an outage."""

    def __init__(self, base_url: str = "memory://storage", fail: bool = False):
        self.base_url = base_url.rstrip("/")
        self.fail = fail
        self.objects: Dict[str, Tuple[bytes, str, Optional[str]]] = {}
        self.upload_count = 0

    def upload(
        self,
        content: bytes,
        public_id: str,
        folder: str,
        resource_type: str = "raw",
        transformation: Optional[str] = None,
        overwrite: bool = True
    ) -> StoredObject:
        if self.fail:
            raise UpstreamError("Object store unreachable")

        full_id = f"{folder}/{public_id}" if folder else public_id
        if full_id in self.objects and not overwrite:
            raise UpstreamError(f"Object {full_id} already exists")

        self.objects[full_id] = (content, resource_type, transformation)
        self.upload_count += 1
        return StoredObject(
            url=f"{self.base_url}/{resource_type}/{full_id}",
            public_id=full_id,
            resource_type=resource_type,
            size=len(content),
        )

    def delete(self, public_id: str, resource_type: str = "raw") -> None:
        if self.fail:
            raise UpstreamError("Object store unreachable")
        self.objects.pop(public_id, None)
