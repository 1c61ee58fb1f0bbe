"""
Intake pipeline for public submissions (model applications and bookings) and
the strict single-image upload used by admin entity creation.

Application intake runs its stages strictly in order, each one a possible
termination point:

1. structural validation               -> 400, no side effects
2. photo count / type / size checks    -> 400, no uploads
3. duplicate window on normalized email -> 429
4. per-file upload (lenient: a failed file is inlined as a data URI)
5. persistence                          -> 500 with a generic message
6. response shaping (no deletion handles)

The duplicate check is a best-effort read: two submissions for the same email
that interleave before either is persisted can both pass.
"""

from __future__ import annotations

import enum
import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional, Sequence

from agency.config import Settings
from agency.db import APPLICATIONS, BOOKINGS, MODELS, DocumentStore, Filter
from agency.errors import InternalError, NotFound, RateLimited, UpstreamFailure
from agency.notifications import Notifier, notify_quietly
from agency.schemas import (
    ApplicationForm,
    ApplicationReceipt,
    ApplicationSummary,
    BookingForm,
    BookingReceipt,
)
from agency.storage import (
    APPLICATIONS_FOLDER,
    ImageStore,
    ImageTransformation,
    release_images,
    to_data_uri,
)
from agency.validation import IncomingFile, check_application_photos, check_image_file, validate

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


class UploadPolicy(enum.Enum):
    # Abort the whole operation when any file fails to upload.
    STRICT = "strict"
    # Inline a failed file as a data URI and carry on.
    LENIENT = "lenient"


@dataclass(frozen=True)
class StoredPhoto:
    url: str
    deletion_handle: Optional[str] = None


class IntakePipeline:
    def __init__(
        self,
        store: DocumentStore,
        images: ImageStore,
        *,
        max_upload_bytes: int = 5 * 1024 * 1024,
        duplicate_window_hours: int = 24,
        dedupe_bookings: bool = False,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], float] = time.time,
        max_workers: int = 4,
    ):
        self.store = store
        self.images = images
        self.max_upload_bytes = max_upload_bytes
        self.duplicate_window_hours = duplicate_window_hours
        self.dedupe_bookings = dedupe_bookings
        self.notifier = notifier
        self.clock = clock
        self.max_workers = max_workers

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: DocumentStore,
        images: ImageStore,
        notifier: Optional[Notifier] = None,
    ) -> "IntakePipeline":
        return cls(
            store,
            images,
            max_upload_bytes=settings.max_upload_bytes,
            duplicate_window_hours=settings.duplicate_window_hours,
            dedupe_bookings=settings.dedupe_bookings,
            notifier=notifier,
        )

    # -- stages -------------------------------------------------------------

    def check_duplicate(self, collection: str, email: str, noun: str) -> None:
        """Reject a second submission from ``email`` inside the rolling window."""
        now = self.clock()
        window_seconds = self.duplicate_window_hours * SECONDS_PER_HOUR
        existing = self.store.find_one(
            collection,
            [Filter("email", email)],
            created_since=now - window_seconds,
        )
        if not existing:
            return
        created_at = datetime.fromisoformat(existing["createdAt"]).timestamp()
        hours_ago = math.floor((now - created_at) / SECONDS_PER_HOUR)
        hours_left = max(1, min(self.duplicate_window_hours, self.duplicate_window_hours - hours_ago))
        logger.info("Duplicate %s submission for %s rejected", collection, email)
        raise RateLimited(
            f"You have already submitted {noun}. "
            f"Please wait {hours_left} hour(s) before submitting again."
        )

    def upload_all(
        self,
        files: Sequence[IncomingFile],
        folder: str,
        policy: UploadPolicy,
        transformation: Optional[ImageTransformation] = None,
    ) -> list[StoredPhoto]:
        """
        Upload ``files`` concurrently; the result keeps the input order.

        Under STRICT any failure releases the files that did upload and raises
        ``UpstreamFailure``. Under LENIENT a failed file is stored as a data URI
        without a deletion handle.
        """
        if not files:
            return []
        results: list[Optional[StoredPhoto]] = []
        failure: Optional[Exception] = None
        with ThreadPoolExecutor(max_workers=min(len(files), self.max_workers)) as pool:
            futures = [
                pool.submit(self.images.upload, f.data, f.content_type, folder, transformation)
                for f in files
            ]
            for file, future in zip(files, futures):
                try:
                    image = future.result()
                except Exception as exc:
                    if policy is UploadPolicy.STRICT:
                        logger.error("Upload of %s to %s failed: %s", file.filename, folder, exc)
                        failure = failure or exc
                        results.append(None)
                        continue
                    logger.warning(
                        "Upload of %s to %s failed, using inline data URI: %s",
                        file.filename,
                        folder,
                        exc,
                    )
                    results.append(StoredPhoto(url=to_data_uri(file.data, file.content_type)))
                    continue
                results.append(StoredPhoto(url=image.url, deletion_handle=image.deletion_handle))

        if failure is not None:
            release_images(
                self.images,
                [p.deletion_handle for p in results if p],
                context=f"aborted upload to {folder}",
            )
            raise UpstreamFailure() from failure
        return results

    def upload_required(
        self,
        file: IncomingFile,
        folder: str,
        transformation: Optional[ImageTransformation] = None,
        field: str = "image",
    ) -> StoredPhoto:
        """Validate and upload a single admin-supplied image; any failure aborts."""
        check_image_file(file, max_bytes=self.max_upload_bytes, field=field)
        return self.upload_all([file], folder, UploadPolicy.STRICT, transformation)[0]

    # -- flows --------------------------------------------------------------

    def submit_application(
        self, fields: Mapping[str, object], files: Sequence[IncomingFile]
    ) -> ApplicationReceipt:
        form = validate(ApplicationForm, fields)
        check_application_photos(files, max_bytes=self.max_upload_bytes)
        self.check_duplicate(APPLICATIONS, form.email, "an application")

        photos = self.upload_all(files, APPLICATIONS_FOLDER, UploadPolicy.LENIENT)

        doc = form.model_dump()
        doc["photos"] = [p.url for p in photos]
        doc["photoHandles"] = [p.deletion_handle for p in photos]
        doc["status"] = "pending"
        try:
            record = self.store.insert(APPLICATIONS, doc, created_at=self.clock())
        except Exception as exc:
            logger.exception("Error saving application for %s", form.email)
            release_images(self.images, doc["photoHandles"], context="unsaved application")
            raise InternalError("Unable to process your application. Please try again.") from exc

        logger.info("Application saved: %s - %s", record["id"], record["email"])
        notify_quietly(self.notifier, record)

        return ApplicationReceipt(
            applicationId=record["id"],
            data=ApplicationSummary(
                id=record["id"],
                email=record["email"],
                name=f"{record['firstName']} {record['lastName']}",
                submittedAt=record["createdAt"],
            ),
        )

    def submit_booking(self, payload: Mapping[str, object]) -> BookingReceipt:
        form = validate(BookingForm, payload)
        if self.dedupe_bookings:
            self.check_duplicate(BOOKINGS, form.email, "a booking request")

        doc = form.model_dump(mode="json")
        if form.modelId:
            model = self.store.get(MODELS, form.modelId)
            if model is None:
                raise NotFound("Model not found")
            doc["modelName"] = form.modelName or model.get("name")
        doc["status"] = "pending"
        doc["revenue"] = 0

        try:
            record = self.store.insert(BOOKINGS, doc, created_at=self.clock())
        except Exception as exc:
            logger.exception("Error saving booking for %s", form.email)
            raise InternalError() from exc

        logger.info("Booking saved: %s - %s", record["id"], record["email"])
        return BookingReceipt(id=record["id"])
