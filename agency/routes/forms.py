"""
Multipart helpers shared by the upload routes.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request
from starlette.datastructures import UploadFile

from agency.validation import IncomingFile


async def read_upload(upload: UploadFile, max_bytes: int) -> Optional[IncomingFile]:
    """Read one file part; at most ``max_bytes + 1`` bytes are kept so size checks still fire."""
    if not upload.filename:
        return None
    data = await upload.read(max_bytes + 1)
    return IncomingFile(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )


class MultipartForm:
    """Text fields and file parts of one parsed multipart request."""

    def __init__(self, fields: dict[str, str], uploads: dict[str, list[UploadFile]]):
        self.fields = fields
        self.uploads = uploads

    async def files(self, name: str, max_bytes: int) -> list[IncomingFile]:
        files = [await read_upload(u, max_bytes) for u in self.uploads.get(name, [])]
        return [f for f in files if f is not None]

    async def file(self, name: str, max_bytes: int) -> Optional[IncomingFile]:
        files = await self.files(name, max_bytes)
        return files[0] if files else None


async def read_multipart(request: Request) -> MultipartForm:
    form = await request.form()
    fields: dict[str, str] = {}
    uploads: dict[str, list[UploadFile]] = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            uploads.setdefault(key, []).append(value)
        else:
            # Repeated text keys keep the first value.
            fields.setdefault(key, value)
    return MultipartForm(fields, uploads)
