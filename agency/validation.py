"""
Submission validation: schema checks, pagination coercion and upload checks.

Every failure surfaces as ``ValidationFailed`` naming the first offending field,
before any side effect has happened.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import ValidationError

from agency.errors import ValidationFailed
from agency.schemas import InputSchema

SchemaT = TypeVar("SchemaT", bound=InputSchema)

MIN_APPLICATION_PHOTOS = 2
MAX_APPLICATION_PHOTOS = 6
MAX_PAGE_SIZE = 100

APPLICATION_PHOTO_EXTENSIONS = {".jpg", ".jpeg", ".png"}
APPLICATION_PHOTO_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png"}


@dataclass(frozen=True)
class IncomingFile:
    """An uploaded file read into memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename or "")[1].lower()


def _field_name(loc: Sequence[Any]) -> Optional[str]:
    parts = [str(p) for p in loc if not isinstance(p, int)]
    return ".".join(parts) or None


def first_failure(schema: Type[InputSchema], exc: ValidationError) -> ValidationFailed:
    error = exc.errors()[0]
    field = _field_name(error.get("loc", ()))
    messages = schema.messages
    message = None
    if field:
        message = messages.get(f"{field}:{error.get('type')}") or messages.get(field)
        if message is None and "." in field:
            message = messages.get(field.split(".", 1)[0])
    if message is None:
        ctx_error = (error.get("ctx") or {}).get("error")
        if ctx_error is not None and not field:
            message = str(ctx_error)
        elif field:
            message = f"Invalid {field}"
        else:
            message = error.get("msg", "Invalid request")
    return ValidationFailed(field, message)


def validate(schema: Type[SchemaT], data: Mapping[str, Any]) -> SchemaT:
    """Validate ``data`` against ``schema`` or raise the first failure."""
    try:
        return schema.model_validate(dict(data))
    except ValidationError as exc:
        raise first_failure(schema, exc) from None


def parse_pagination(
    page: Any, limit: Any, *, default_limit: int = 6
) -> tuple[int, int]:
    """Coerce raw page/limit query values; page >= 1 and 1 <= limit <= 100."""
    try:
        page_num = int(page) if page not in (None, "") else 1
        limit_num = int(limit) if limit not in (None, "") else default_limit
    except (TypeError, ValueError):
        raise ValidationFailed("page", "Invalid page or limit parameters") from None
    if page_num < 1:
        raise ValidationFailed("page", "Invalid page or limit parameters")
    if limit_num < 1 or limit_num > MAX_PAGE_SIZE:
        raise ValidationFailed("limit", "Invalid page or limit parameters")
    return page_num, limit_num


def check_image_file(
    file: IncomingFile, *, max_bytes: int, field: str = "image"
) -> IncomingFile:
    if not (file.content_type or "").startswith("image/"):
        raise ValidationFailed(field, "File must be an image")
    if file.size == 0:
        raise ValidationFailed(field, "File is empty")
    if file.size > max_bytes:
        raise ValidationFailed(field, "File too large")
    return file


def check_application_photos(
    files: Sequence[IncomingFile], *, max_bytes: int
) -> Sequence[IncomingFile]:
    """Count, type (by extension and declared MIME type) and size checks."""
    if not files or not (MIN_APPLICATION_PHOTOS <= len(files) <= MAX_APPLICATION_PHOTOS):
        raise ValidationFailed("photos", "Please upload between 2 and 6 photos.")
    for file in files:
        if (
            file.extension not in APPLICATION_PHOTO_EXTENSIONS
            or (file.content_type or "").lower() not in APPLICATION_PHOTO_MIME_TYPES
        ):
            raise ValidationFailed("photos", "Only JPG and PNG files are allowed")
        check_image_file(file, max_bytes=max_bytes, field="photos")
    return files
