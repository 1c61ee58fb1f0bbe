"""
Image host abstraction for S3-compatible buckets and in-memory testing.
"""

from __future__ import annotations

import base64
import io
import logging
import mimetypes
import threading
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image, UnidentifiedImageError

from agency.errors import UpstreamFailure

logger = logging.getLogger(__name__)

_PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}


@dataclass(frozen=True)
class UploadedImage:
    url: str
    deletion_handle: str


@dataclass(frozen=True)
class ImageTransformation:
    """Shrink an image to fit inside ``width`` x ``height``; never enlarge it."""

    width: int
    height: int

    def apply(self, data: bytes, mime_type: str) -> bytes:
        try:
            with Image.open(io.BytesIO(data)) as img:
                if img.width <= self.width and img.height <= self.height:
                    return data
                fmt = img.format or _PIL_FORMATS.get(mime_type, "PNG")
                img.thumbnail((self.width, self.height))
                out = io.BytesIO()
                img.save(out, format=fmt)
                return out.getvalue()
        except (UnidentifiedImageError, OSError) as exc:
            logger.warning("Could not transform %s image, uploading as-is: %s", mime_type, exc)
            return data


# Destination folders and size limits per entity.
APPLICATIONS_FOLDER = "applications"
MODELS_FOLDER = "models"
PORTFOLIO_FOLDER = "models/portfolio"
GALLERY_FOLDER = "gallery"
TEAM_FOLDER = "team"
COMPANIES_FOLDER = "companies"

PORTRAIT_LIMIT = ImageTransformation(width=800, height=800)
LOGO_LIMIT = ImageTransformation(width=200, height=50)


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Inline an image as a data URI, used when the image host is unreachable."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def _extension_for(mime_type: str) -> str:
    if mime_type in ("image/jpeg", "image/jpg"):
        return ".jpg"
    return mimetypes.guess_extension(mime_type) or ".img"


class ImageStore(Protocol):
    """Defines the operations the API needs from the image host."""

    def upload(
        self,
        data: bytes,
        mime_type: str,
        folder: str,
        transformation: Optional[ImageTransformation] = None,
    ) -> UploadedImage:
        ...

    def destroy(self, deletion_handle: str) -> None:
        ...


@dataclass
class InMemoryImageStore:
    """Test double for image host interactions."""

    base_url: str = "https://images.example.test"
    fail_uploads: bool = False
    fail_destroys: bool = False
    failing_payloads: set = field(default_factory=set)
    uploads: list = field(default_factory=list)
    destroyed: list = field(default_factory=list)

    def __post_init__(self):
        self._lock = threading.Lock()
        self._counter = 0

    def upload(
        self,
        data: bytes,
        mime_type: str,
        folder: str,
        transformation: Optional[ImageTransformation] = None,
    ) -> UploadedImage:
        if self.fail_uploads or data in self.failing_payloads:
            raise UpstreamFailure("Image upload failed")
        with self._lock:
            self._counter += 1
            handle = f"{folder}/{self._counter:04d}{_extension_for(mime_type)}"
            image = UploadedImage(url=f"{self.base_url}/{handle}", deletion_handle=handle)
            self.uploads.append(
                {
                    "data": data,
                    "mime_type": mime_type,
                    "folder": folder,
                    "transformation": transformation,
                    "url": image.url,
                    "deletion_handle": handle,
                }
            )
        return image

    def destroy(self, deletion_handle: str) -> None:
        with self._lock:
            self.destroyed.append(deletion_handle)
        if self.fail_destroys:
            raise UpstreamFailure("Image destroy failed")

    def reset(self) -> None:
        """Forget recorded calls and failure toggles (useful in tests)."""
        with self._lock:
            self.uploads.clear()
            self.destroyed.clear()
            self.failing_payloads.clear()
            self.fail_uploads = False
            self.fail_destroys = False


@dataclass
class S3ImageStore:
    """
    Image host backed by an S3-compatible bucket serving public objects.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    public_base_url: str = ""

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def _public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{self.bucket}/{key}"
        # Plain AWS: virtual-hosted style URL.
        region = self.region or "us-east-1"
        return f"https://{self.bucket}.s3.{region}.amazonaws.com/{key}"

    def upload(
        self,
        data: bytes,
        mime_type: str,
        folder: str,
        transformation: Optional[ImageTransformation] = None,
    ) -> UploadedImage:
        if transformation:
            data = transformation.apply(data, mime_type)
        key = f"{folder}/{uuid.uuid4().hex}{_extension_for(mime_type)}"
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=mime_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Image upload to %s/%s failed: %s", self.bucket, folder, exc)
            raise UpstreamFailure() from exc
        return UploadedImage(url=self._public_url(key), deletion_handle=key)

    def destroy(self, deletion_handle: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=deletion_handle)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Image delete of %s failed: %s", deletion_handle, exc)
            raise UpstreamFailure() from exc


def release_image(store: ImageStore, deletion_handle: Optional[str], context: str = "") -> bool:
    """
    Best-effort removal of a hosted image.

    Failures are logged and swallowed so they never block the caller's own
    update or delete. Returns True when the host confirmed the removal.
    """
    if not deletion_handle:
        return False
    try:
        store.destroy(deletion_handle)
    except Exception as exc:
        logger.warning(
            "Failed to release image %s (%s): %s", deletion_handle, context or "-", exc
        )
        return False
    return True


def release_images(
    store: ImageStore, deletion_handles: Iterable[Optional[str]], context: str = ""
) -> int:
    released = 0
    for handle in deletion_handles:
        if release_image(store, handle, context):
            released += 1
    return released
