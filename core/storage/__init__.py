"""Object storage - interfaces, adapters and the artifact publisher."""
from core.storage.interfaces import ObjectStore, StoredObject
from core.storage.cloudinary_store import CloudinaryStore
from core.storage.memory_store import InMemoryObjectStore
from core.storage.publisher import ArtifactCategory, ArtifactPublisher, PublishedArtifact

__all__ = [
    'ObjectStore',
    'StoredObject',
    'CloudinaryStore',
    'InMemoryObjectStore',
    'ArtifactCategory',
    'ArtifactPublisher',
    'PublishedArtifact',
]
