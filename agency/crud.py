"""
Entity controllers: list / get / create / update / delete for every collection.

Image-bearing entities own the deletion handles of their hosted images. A
replaced image is uploaded first (strictly: a failed upload aborts with nothing
changed), the old one is then released best-effort, and only then is the
record updated. Deletion releases every owned handle best-effort before the
record is removed; a failed release never blocks the delete.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional, Sequence, Type

from agency.db import (
    ABOUT,
    APPLICATIONS,
    BOOKINGS,
    COMPANIES,
    GALLERY,
    MODELS,
    NEWSLETTER,
    TEAM,
    DocumentStore,
    Filter,
    is_valid_id,
    isoformat,
)
from agency.errors import Conflict, InternalError, NotFound, ValidationFailed
from agency.intake import IntakePipeline, StoredPhoto
from agency.schemas import (
    AboutOut,
    AboutUpdate,
    ApplicationList,
    ApplicationOut,
    ApplicationStatusUpdate,
    BookingOut,
    BookingUpdate,
    CompanyCreate,
    CompanyOut,
    CompanyUpdate,
    GalleryCreate,
    GalleryImageOut,
    GalleryUpdate,
    InputSchema,
    MessageResponse,
    ModelCreate,
    ModelFields,
    ModelList,
    ModelOut,
    NewsletterSubscribe,
    SubscriberOut,
    TeamCreate,
    TeamMemberOut,
    TeamUpdate,
)
from agency.storage import (
    COMPANIES_FOLDER,
    GALLERY_FOLDER,
    LOGO_LIMIT,
    MODELS_FOLDER,
    PORTFOLIO_FOLDER,
    PORTRAIT_LIMIT,
    TEAM_FOLDER,
    ImageStore,
    ImageTransformation,
    release_image,
    release_images,
)
from agency.validation import IncomingFile, validate

logger = logging.getLogger(__name__)


def _now() -> str:
    return isoformat(time.time())


class EntityController:
    collection: str = ""
    label: str = "Record"
    out_schema: Type[Any] = dict

    def __init__(self, store: DocumentStore, images: ImageStore):
        self.store = store
        self.images = images

    def owned_handles(self, doc: dict) -> list[Optional[str]]:
        return []

    def out(self, doc: dict):
        return self.out_schema.model_validate(doc)

    def not_found(self) -> NotFound:
        return NotFound(f"{self.label} not found")

    def fetch(self, doc_id: str) -> dict:
        if not is_valid_id(doc_id):
            raise self.not_found()
        doc = self.store.get(self.collection, doc_id)
        if doc is None:
            raise self.not_found()
        return doc

    def get(self, doc_id: str):
        return self.out(self.fetch(doc_id))

    def list_records(
        self,
        filters: Sequence[Filter] = (),
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list:
        docs = self.store.find(self.collection, filters, skip=skip, limit=limit)
        return [self.out(d) for d in docs]

    def save(self, doc_id: str, changes: dict) -> dict:
        changes = {**changes, "updatedAt": _now()}
        updated = self.store.update(self.collection, doc_id, changes)
        if updated is None:
            raise self.not_found()
        return updated

    def delete(self, doc_id: str) -> MessageResponse:
        doc = self.fetch(doc_id)
        release_images(self.images, self.owned_handles(doc), context=f"{self.collection}/{doc_id}")
        if self.store.delete(self.collection, doc_id) is None:
            raise self.not_found()
        logger.info("Deleted %s %s", self.collection, doc_id)
        return MessageResponse(message=f"{self.label} deleted successfully")


class ImageEntityController(EntityController):
    """Controller for entities carrying one hosted image plus free-text fields."""

    create_schema: Type[InputSchema] = InputSchema
    update_schema: Type[InputSchema] = InputSchema
    folder: str = ""
    transformation: Optional[ImageTransformation] = None
    url_field: str = "imageUrl"
    handle_field: str = "imageHandle"
    file_field: str = "image"
    image_required: bool = True
    image_message: str = "Image is required"

    def __init__(self, store: DocumentStore, images: ImageStore, pipeline: IntakePipeline):
        super().__init__(store, images)
        self.pipeline = pipeline

    def owned_handles(self, doc: dict) -> list[Optional[str]]:
        return [doc.get(self.handle_field)]

    def document_from(self, form: InputSchema) -> dict:
        return form.model_dump(exclude_none=True)

    def changes_from(self, form: InputSchema, existing: dict) -> dict:
        return form.model_dump(exclude_none=True)

    def _upload(self, file: IncomingFile) -> StoredPhoto:
        return self.pipeline.upload_required(
            file, self.folder, self.transformation, field=self.file_field
        )

    def create(self, fields: Mapping[str, Any], file: Optional[IncomingFile]):
        form = validate(self.create_schema, fields)
        if file is None and self.image_required:
            raise ValidationFailed(self.file_field, self.image_message)

        doc = self.document_from(form)
        uploaded = self._upload(file) if file is not None else None
        if uploaded:
            doc[self.url_field] = uploaded.url
            doc[self.handle_field] = uploaded.deletion_handle
        try:
            record = self.store.insert(self.collection, doc)
        except Exception as exc:
            logger.exception("Error adding %s", self.collection)
            if uploaded:
                release_image(self.images, uploaded.deletion_handle, context=f"unsaved {self.collection}")
            raise InternalError() from exc
        logger.info("Created %s %s", self.collection, record["id"])
        return self.out(record)

    def update(self, doc_id: str, fields: Mapping[str, Any], file: Optional[IncomingFile]):
        form = validate(self.update_schema, fields)
        existing = self.fetch(doc_id)
        changes = self.changes_from(form, existing)

        uploaded = None
        if file is not None:
            uploaded = self._upload(file)
            release_image(
                self.images,
                existing.get(self.handle_field),
                context=f"replaced {self.collection}/{doc_id}",
            )
            changes[self.url_field] = uploaded.url
            changes[self.handle_field] = uploaded.deletion_handle
        try:
            updated = self.save(doc_id, changes)
        except NotFound:
            if uploaded:
                release_image(self.images, uploaded.deletion_handle, context=f"orphaned {self.collection}")
            raise
        except Exception as exc:
            logger.exception("Error updating %s %s", self.collection, doc_id)
            if uploaded:
                release_image(self.images, uploaded.deletion_handle, context=f"unsaved {self.collection}")
            raise InternalError() from exc
        return self.out(updated)


class GalleryController(ImageEntityController):
    collection = GALLERY
    label = "Gallery image"
    out_schema = GalleryImageOut
    create_schema = GalleryCreate
    update_schema = GalleryUpdate
    folder = GALLERY_FOLDER
    transformation = PORTRAIT_LIMIT


class TeamController(ImageEntityController):
    collection = TEAM
    label = "Team member"
    out_schema = TeamMemberOut
    create_schema = TeamCreate
    update_schema = TeamUpdate
    folder = TEAM_FOLDER
    transformation = PORTRAIT_LIMIT


class CompanyController(ImageEntityController):
    collection = COMPANIES
    label = "Company"
    out_schema = CompanyOut
    create_schema = CompanyCreate
    update_schema = CompanyUpdate
    folder = COMPANIES_FOLDER
    transformation = LOGO_LIMIT
    url_field = "logoUrl"
    handle_field = "logoHandle"
    file_field = "logo"
    image_required = False


class ModelController(ImageEntityController):
    collection = MODELS
    label = "Model"
    out_schema = ModelOut
    create_schema = ModelCreate
    update_schema = ModelFields
    folder = MODELS_FOLDER
    transformation = PORTRAIT_LIMIT
    image_message = "Main image is required"

    def owned_handles(self, doc: dict) -> list[Optional[str]]:
        handles = [doc.get(self.handle_field)]
        handles.extend(img.get("deletionHandle") for img in doc.get("portfolioImages") or [])
        return handles

    def document_from(self, form: InputSchema) -> dict:
        doc = form.model_dump(exclude_none=True)
        doc.setdefault("placements", [])
        doc["socialLinks"] = {
            "instagram": None,
            "tiktok": None,
            **doc.get("socialLinks", {}),
        }
        doc["portfolioImages"] = []
        return doc

    def changes_from(self, form: InputSchema, existing: dict) -> dict:
        changes = form.model_dump(exclude_none=True)
        if "socialLinks" in changes:
            changes["socialLinks"] = {
                "instagram": None,
                "tiktok": None,
                **(existing.get("socialLinks") or {}),
                **changes["socialLinks"],
            }
        return changes

    def list_page(
        self,
        *,
        category: Optional[str],
        name: Optional[str],
        model_size: Optional[str],
        page: int,
        limit: int,
    ) -> ModelList:
        filters: list[Filter] = []
        if category and category.lower() != "all":
            filters.append(Filter("category", category.lower()))
        if name:
            filters.append(Filter("name", name, op="icontains"))
        if model_size:
            filters.append(Filter("modelSize", model_size, op="icontains"))
        models = self.list_records(filters, skip=(page - 1) * limit, limit=limit)
        total = self.store.count(self.collection, filters)
        return ModelList(models=models, total=total)

    def add_portfolio_image(self, doc_id: str, file: Optional[IncomingFile]) -> ModelOut:
        existing = self.fetch(doc_id)
        if file is None:
            raise ValidationFailed("image", "Portfolio image is required")
        uploaded = self.pipeline.upload_required(file, PORTFOLIO_FOLDER, self.transformation)
        images = list(existing.get("portfolioImages") or [])
        images.append({"url": uploaded.url, "deletionHandle": uploaded.deletion_handle})
        try:
            updated = self.save(doc_id, {"portfolioImages": images})
        except NotFound:
            release_image(self.images, uploaded.deletion_handle, context="orphaned portfolio image")
            raise
        except Exception as exc:
            logger.exception("Error adding portfolio image to %s", doc_id)
            release_image(self.images, uploaded.deletion_handle, context="unsaved portfolio image")
            raise InternalError() from exc
        return self.out(updated)

    def remove_portfolio_image(self, doc_id: str, image_index: str) -> ModelOut:
        existing = self.fetch(doc_id)
        images = list(existing.get("portfolioImages") or [])
        try:
            index = int(image_index)
        except (TypeError, ValueError):
            raise ValidationFailed("imageIndex", "Invalid image index") from None
        if index < 0 or index >= len(images):
            raise ValidationFailed("imageIndex", "Invalid image index")
        removed = images.pop(index)
        release_image(self.images, removed.get("deletionHandle"), context=f"portfolio of {doc_id}")
        return self.out(self.save(doc_id, {"portfolioImages": images}))


class ApplicationController(EntityController):
    collection = APPLICATIONS
    label = "Application"
    out_schema = ApplicationOut

    def owned_handles(self, doc: dict) -> list[Optional[str]]:
        return list(doc.get("photoHandles") or [])

    def list_all(self) -> ApplicationList:
        applications = self.list_records()
        return ApplicationList(count=len(applications), data=applications)

    def update_status(self, doc_id: str, payload: Mapping[str, Any]) -> ApplicationOut:
        form = validate(ApplicationStatusUpdate, payload)
        self.fetch(doc_id)
        return self.out(self.save(doc_id, {"status": form.status}))


class BookingController(EntityController):
    collection = BOOKINGS
    label = "Booking"
    out_schema = BookingOut

    def update(self, doc_id: str, payload: Mapping[str, Any]) -> BookingOut:
        form = validate(BookingUpdate, payload)
        self.fetch(doc_id)
        return self.out(self.save(doc_id, form.model_dump(exclude_none=True)))


class AboutController(EntityController):
    collection = ABOUT
    label = "About section"
    out_schema = AboutOut

    def current(self) -> AboutOut:
        doc = self.store.find_one(self.collection)
        if doc is None:
            return AboutOut()
        return AboutOut(id=doc["id"], text=doc.get("text", ""))

    def upsert(self, payload: Mapping[str, Any]) -> AboutOut:
        form = validate(AboutUpdate, payload)
        if form.id:
            self.fetch(form.id)
            doc = self.save(form.id, {"text": form.text})
        else:
            doc = self.store.insert(self.collection, {"text": form.text, "updatedAt": _now()})
        return AboutOut(id=doc["id"], text=doc["text"])


class NewsletterController(EntityController):
    collection = NEWSLETTER
    label = "Subscriber"
    out_schema = SubscriberOut

    def subscribe(self, payload: Mapping[str, Any]) -> MessageResponse:
        form = validate(NewsletterSubscribe, payload)
        if self.store.find_one(self.collection, [Filter("email", form.email)]):
            raise Conflict("Email already subscribed")
        self.store.insert(self.collection, {"email": form.email})
        return MessageResponse(message="Subscribed successfully")
