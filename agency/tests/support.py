"""
Shared fixtures for the API tests: an app wired to fresh in-memory backends.
"""

from __future__ import annotations

import io
import time
from typing import Optional

from fastapi.testclient import TestClient
from PIL import Image

from agency.app import create_app
from agency.config import Settings, get_settings
from agency.db import InMemoryDocumentStore
from agency.dependencies import (
    get_document_store,
    get_image_store,
    get_intake_pipeline,
    get_notifier,
)
from agency.intake import IntakePipeline
from agency.notifications import InMemoryNotifier
from agency.security import issue_token
from agency.storage import InMemoryImageStore

TEST_SECRET = "test-secret"


def image_bytes(color: str = "red", size: tuple[int, int] = (8, 8), fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


class FakeClock:
    def __init__(self, start: Optional[float] = None):
        self.now = start if start is not None else time.time()

    def __call__(self) -> float:
        return self.now

    def advance(self, hours: float) -> None:
        self.now += hours * 3600


class ApiHarness:
    """Builds an app whose dependencies resolve to fresh in-memory backends."""

    def __init__(self, **settings_overrides):
        self.settings = Settings(
            jwt_secret=TEST_SECRET,
            use_in_memory_backends=True,
            **settings_overrides,
        )
        self.store = InMemoryDocumentStore()
        self.images = InMemoryImageStore()
        self.notifier = InMemoryNotifier()
        self.clock = FakeClock()

        self.app = create_app()
        overrides = self.app.dependency_overrides
        overrides[get_settings] = lambda: self.settings
        overrides[get_document_store] = lambda: self.store
        overrides[get_image_store] = lambda: self.images
        overrides[get_notifier] = lambda: self.notifier
        overrides[get_intake_pipeline] = self.pipeline
        self.client = TestClient(self.app)

    def pipeline(self) -> IntakePipeline:
        return IntakePipeline(
            self.store,
            self.images,
            max_upload_bytes=self.settings.max_upload_bytes,
            duplicate_window_hours=self.settings.duplicate_window_hours,
            dedupe_bookings=self.settings.dedupe_bookings,
            notifier=self.notifier,
            clock=self.clock,
        )

    def admin_headers(self, admin_id: str = "admin-1") -> dict:
        return {"Authorization": f"Bearer {issue_token(admin_id, TEST_SECRET)}"}


def png_files(field: str, count: int, start: int = 0) -> list:
    """``count`` distinct PNG parts for a multipart upload."""
    colors = ["red", "green", "blue", "yellow", "purple", "orange", "black", "white"]
    return [
        (field, (f"photo{i}.png", image_bytes(colors[i % len(colors)], size=(8 + i, 8)), "image/png"))
        for i in range(start, start + count)
    ]


def application_fields(**overrides) -> dict:
    fields = {
        "firstName": "Jane",
        "lastName": "Doe",
        "bust": "86",
        "waist": "61",
        "hips": "90",
        "justCo": "No",
        "height": "178",
        "instagram": "@jane",
        "location": "Lagos",
        "dob": "2001-04-12",
        "startDate": "2026-12-01",
        "email": "Jane.Doe@Mail.com",
        "altContact": "+234 801 234 5678",
    }
    fields.update(overrides)
    return fields


def booking_payload(**overrides) -> dict:
    payload = {
        "fullName": "Ada Obi",
        "email": "Ada@Mail.com",
        "phone": "+1 555 123 4567",
        "shootType": "Editorial",
        "bookingDateTime": "2026-11-01T10:00:00Z",
        "location": {
            "address": "12 Marina Road",
            "city": "Lagos",
            "state": "Lagos",
            "country": "Nigeria",
        },
        "contactMethod": "WhatsApp",
    }
    payload.update(overrides)
    return payload
