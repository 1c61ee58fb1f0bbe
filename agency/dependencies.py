"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header

from agency.config import Settings, get_settings
from agency.crud import (
    AboutController,
    ApplicationController,
    BookingController,
    CompanyController,
    GalleryController,
    ModelController,
    NewsletterController,
    TeamController,
)
from agency.db import DocumentStore, InMemoryDocumentStore, SqlDocumentStore
from agency.intake import IntakePipeline
from agency.notifications import Notifier, SmtpNotifier
from agency.security import bearer_token, verify_token
from agency.storage import ImageStore, InMemoryImageStore, S3ImageStore

_document_store: DocumentStore | None = None
_image_store: ImageStore | None = None
_notifier: Notifier | None = None


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store shared by every request.
    """
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _document_store = InMemoryDocumentStore()
    else:
        _document_store = SqlDocumentStore(settings.database_url)
    return _document_store


def get_image_store() -> ImageStore:
    global _image_store
    if _image_store:
        return _image_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.image_bucket:
        _image_store = InMemoryImageStore()
    else:
        _image_store = S3ImageStore(
            bucket=settings.image_bucket,
            region=settings.image_region or "",
            endpoint=settings.image_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.image_public_base_url or "",
        )
    return _image_store


def get_notifier() -> Optional[Notifier]:
    """
    Return the mail notifier, or None when outbound mail is not configured.
    """
    global _notifier
    if _notifier:
        return _notifier

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.mail_configured:
        return None
    _notifier = SmtpNotifier(
        host=settings.mail_host,
        port=settings.mail_port,
        username=settings.mail_username,
        password=settings.mail_password,
        admin_address=settings.mail_admin_address,
    )
    return _notifier


def get_intake_pipeline(
    settings: Settings = Depends(get_settings),
    store: DocumentStore = Depends(get_document_store),
    images: ImageStore = Depends(get_image_store),
    notifier: Optional[Notifier] = Depends(get_notifier),
) -> IntakePipeline:
    return IntakePipeline.from_settings(settings, store, images, notifier)


def require_admin(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Resolve the admin id from the bearer token or raise a 401 error."""
    return verify_token(bearer_token(authorization), settings.jwt_secret)


def get_model_controller(
    store: DocumentStore = Depends(get_document_store),
    images: ImageStore = Depends(get_image_store),
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
) -> ModelController:
    return ModelController(store, images, pipeline)


def get_gallery_controller(
    store: DocumentStore = Depends(get_document_store),
    images: ImageStore = Depends(get_image_store),
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
) -> GalleryController:
    return GalleryController(store, images, pipeline)


def get_team_controller(
    store: DocumentStore = Depends(get_document_store),
    images: ImageStore = Depends(get_image_store),
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
) -> TeamController:
    return TeamController(store, images, pipeline)


def get_company_controller(
    store: DocumentStore = Depends(get_document_store),
    images: ImageStore = Depends(get_image_store),
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
) -> CompanyController:
    return CompanyController(store, images, pipeline)


def get_application_controller(
    store: DocumentStore = Depends(get_document_store),
    images: ImageStore = Depends(get_image_store),
) -> ApplicationController:
    return ApplicationController(store, images)


def get_booking_controller(
    store: DocumentStore = Depends(get_document_store),
    images: ImageStore = Depends(get_image_store),
) -> BookingController:
    return BookingController(store, images)


def get_about_controller(
    store: DocumentStore = Depends(get_document_store),
    images: ImageStore = Depends(get_image_store),
) -> AboutController:
    return AboutController(store, images)


def get_newsletter_controller(
    store: DocumentStore = Depends(get_document_store),
    images: ImageStore = Depends(get_image_store),
) -> NewsletterController:
    return NewsletterController(store, images)
