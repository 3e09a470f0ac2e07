"""
Artifact Publisher - persist rendered output to object storage.

Documents are stored raw under a stable name derived from the candidate
id and template, so re-rendering the same candidate/template pair replaces the
previous file. Versioning lives on the CompetenceDocument record.
Images are stored with a bounded transformation set under a
content-addressed id.
"""
import hashlib
import logging
import re
import unicodedata
from enum import Enum
from pathlib import PurePath

from pydantic import BaseModel

from core.exceptions import PublishFailed, UnsupportedFormat, UpstreamError, ValidationError
from core.storage.interfaces import ObjectStore

logger = logging.getLogger(__name__)

MB = 1024 * 1024

SUPPORTED_IMAGE_TYPES = {'image/png', 'image/jpeg', 'image/jpg', 'image/svg+xml', 'image/webp'}


class ArtifactCategory(str, Enum):
    DOCUMENT = "document"
    IMAGE = "image"


class PublishedArtifact(BaseModel):
    url: str
    storage_id: str


def sanitize_name(name: str) -> str:
    """ASCII, lowercase, underscores only: 'Jöhn Doe (CV)' -> 'john_doe_cv'."""
    ascii_name = unicodedata.normalize('NFKD', name).encode('ascii', 'ignore').decode('ascii')
    cleaned = re.sub(r'[^a-zA-Z0-9]+', '_', ascii_name).strip('_').lower()
    return cleaned or 'file'


def document_filename(candidate_name: str, template: str, extension: str = 'pdf') -> str:
    """Download filename shown to the user: display name plus template."""
    return f"{sanitize_name(candidate_name)}_{sanitize_name(template)}_competence_file.{extension}"


def artifact_filename(candidate_id: str, template: str, extension: str = 'pdf') -> str:
    """Storage filename for a candidate/template pair.

    Keyed on the candidate id, not the display name, so candidates sharing a
    name or initials never overwrite each other's file.
    """
    return f"{sanitize_name(candidate_id)}_{sanitize_name(template)}_competence_file.{extension}"


class ArtifactPublisher:
    """Uploads documents and images and hands back durable references."""

    def __init__(
        self,
        store: ObjectStore,
        root_folder: str = "recruitment",
        image_max_bytes: int = 2 * MB,
        image_max_dimension: int = 200
    ):
        self.store = store
        self.root_folder = root_folder.strip("/")
        self.image_max_bytes = image_max_bytes
        self.image_max_dimension = image_max_dimension

    def _folder(self, name: str) -> str:
        return f"{self.root_folder}/{name}" if self.root_folder else name

    def validate_image(self, content: bytes, mime_type: str) -> None:
        """Type first, then size, so oversized files of the wrong type report the type set."""
        declared = (mime_type or '').split(';', 1)[0].strip().lower()
        if declared not in SUPPORTED_IMAGE_TYPES:
            raise UnsupportedFormat(mime_type, SUPPORTED_IMAGE_TYPES)
        if not content:
            raise ValidationError("Uploaded image is empty")
        if len(content) > self.image_max_bytes:
            raise ValidationError(
                f"Image size {len(content)} bytes exceeds the {self.image_max_bytes} byte limit",
                details={"size": len(content), "max_bytes": self.image_max_bytes}
            )

    def publish(self, content: bytes, filename: str, category: ArtifactCategory) -> PublishedArtifact:
        """
        Upload bytes and return the durable URL plus storage id.

        Raises:
            PublishFailed: On any upload error
        """
        category = ArtifactCategory(category)
        path = PurePath(filename or "artifact")

        if category == ArtifactCategory.DOCUMENT:
            # Raw resources keep their extension in the public id so the URL serves the right type
            public_id = f"{sanitize_name(path.stem)}{path.suffix.lower()}"
            folder = self._folder("competence-files")
            resource_type = "raw"
            transformation = None
        else:
            digest = hashlib.sha256(content).hexdigest()[:16]
            public_id = f"{digest}_{sanitize_name(path.stem)}"
            folder = self._folder("images")
            resource_type = "image"
            size = self.image_max_dimension
            transformation = f"c_limit,w_{size},h_{size}/q_auto/f_auto"

        try:
            stored = self.store.upload(
                content,
                public_id=public_id,
                folder=folder,
                resource_type=resource_type,
                transformation=transformation,
                overwrite=True,
            )
        except UpstreamError as e:
            logger.error(f"Failed to publish {filename}: {e}")
            raise PublishFailed(f"Failed to publish {filename}: {e.message}", cause=e) from e

        logger.info(f"Published {category.value} {filename} as {stored.public_id}")
        return PublishedArtifact(url=stored.url, storage_id=stored.public_id)
