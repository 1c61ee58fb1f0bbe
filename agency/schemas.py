"""
Pydantic schemas for the agency backend.

Input schemas carry a ``messages`` table mapping a field (or ``field:error_type``)
to the message returned to the client when that field is the first to fail.
Output schemas fix the response shape: optional keys are always present, with
``null`` when unset, and deletion handles are never included.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Annotated, Any, ClassVar, Literal, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)

from agency.db import is_valid_id

APPLICATION_STATUSES = ("pending", "reviewed", "accepted", "rejected")
BOOKING_STATUSES = ("pending", "reviewed", "confirmed", "cancelled")
CONTACT_METHODS = ("whatsapp", "call", "email", "instagram")
MODEL_CATEGORIES = (
    "fashion",
    "commercial",
    "editorial",
    "runway",
    "fitness",
    "ebony",
    "mocha",
    "caramel",
    "honey",
    "fair",
)

URL_PATTERN = r"^https?://[^\s$.?#].[^\s]*$"
PHONE_PATTERN = r"^\+?[0-9\s\-()]{7,20}$"
MEASUREMENT_PATTERN = r"^\d+(\.\d+)?\s?[cC][mM]$"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _category(value: Any) -> Any:
    return _lower(_blank_to_none(value))


def _json_field(value: Any) -> Any:
    # Multipart forms send nested structures as JSON strings.
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return json.loads(value)
        except ValueError as exc:
            raise ValueError("must be valid JSON") from exc
    return value


RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
LongText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=2000)]
OptionalText = Annotated[Optional[RequiredText], BeforeValidator(_blank_to_none)]
OptionalLongText = Annotated[Optional[LongText], BeforeValidator(_blank_to_none)]
Url = Annotated[str, StringConstraints(strip_whitespace=True, pattern=URL_PATTERN)]
OptionalUrl = Annotated[Optional[Url], BeforeValidator(_blank_to_none)]
Measurement = Annotated[str, StringConstraints(strip_whitespace=True, pattern=MEASUREMENT_PATTERN)]
OptionalMeasurement = Annotated[Optional[Measurement], BeforeValidator(_blank_to_none)]
NormalizedEmail = Annotated[EmailStr, BeforeValidator(_lower)]


class InputSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    messages: ClassVar[dict[str, str]] = {}


# ---------------------------------------------------------------------------
# Auth


class LoginRequest(InputSchema):
    username: RequiredText
    password: Annotated[str, StringConstraints(min_length=1)]

    messages = {
        "username": "Username is required",
        "password": "Password is required",
    }


class LoginResponse(BaseModel):
    token: str


# ---------------------------------------------------------------------------
# Applications


class ApplicationForm(InputSchema):
    firstName: RequiredText
    lastName: RequiredText
    bust: RequiredText
    waist: RequiredText
    hips: RequiredText
    justCo: RequiredText
    height: RequiredText
    instagram: OptionalText = None
    tiktok: OptionalText = None
    location: RequiredText
    dob: RequiredText
    startDate: RequiredText
    email: NormalizedEmail
    altContact: RequiredText

    messages = {
        "firstName": "First name is required",
        "lastName": "Last name is required",
        "bust": "Bust measurement is required",
        "waist": "Waist measurement is required",
        "hips": "Hip measurement is required",
        "justCo": "Agency representation status is required",
        "height": "Height is required",
        "instagram": "Instagram handle is too long",
        "tiktok": "TikTok handle is too long",
        "location": "Location is required",
        "dob": "Date of birth is required",
        "startDate": "Start date is required",
        "email": "Please provide a valid email",
        "altContact": "Alternative contact method is required",
    }


class ApplicationStatusUpdate(InputSchema):
    status: Literal[APPLICATION_STATUSES]

    messages = {"status": "Invalid status"}


class ApplicationSummary(BaseModel):
    id: str
    email: str
    name: str
    submittedAt: str


class ApplicationReceipt(BaseModel):
    success: bool = True
    message: str = "Application submitted successfully!"
    applicationId: str
    data: ApplicationSummary


class ApplicationOut(BaseModel):
    id: str
    firstName: str
    lastName: str
    bust: Optional[str] = None
    waist: Optional[str] = None
    hips: Optional[str] = None
    justCo: Optional[str] = None
    height: Optional[str] = None
    photos: list[str] = Field(default_factory=list)
    instagram: Optional[str] = None
    tiktok: Optional[str] = None
    location: Optional[str] = None
    dob: Optional[str] = None
    startDate: Optional[str] = None
    email: str
    altContact: Optional[str] = None
    status: str = "pending"
    createdAt: str
    updatedAt: Optional[str] = None


class ApplicationList(BaseModel):
    success: bool = True
    count: int
    data: list[ApplicationOut]


# ---------------------------------------------------------------------------
# Bookings


class BookingLocation(InputSchema):
    address: RequiredText
    city: RequiredText
    state: RequiredText
    country: RequiredText


class BookingForm(InputSchema):
    modelId: Annotated[Optional[str], BeforeValidator(_blank_to_none)] = None
    modelName: OptionalText = None
    imageUrl: OptionalUrl = None
    fullName: RequiredText
    email: NormalizedEmail
    phone: Annotated[str, StringConstraints(strip_whitespace=True, pattern=PHONE_PATTERN)]
    shootType: RequiredText
    bookingDateTime: datetime
    location: BookingLocation
    contactMethod: Annotated[Literal[CONTACT_METHODS], BeforeValidator(_lower)]
    additionalNote: OptionalLongText = None
    company: OptionalText = None

    messages = {
        "modelId": "Invalid model ID",
        "modelName": "Model name must be a string",
        "imageUrl": "Valid image URL is required",
        "fullName": "Full name is required",
        "email": "Valid email is required",
        "phone": "Valid phone number is required (7-15 digits)",
        "shootType": "Shoot type is required",
        "bookingDateTime": "Valid date/time is required",
        "location": "Location is required",
        "location.address": "Address is required",
        "location.city": "City is required",
        "location.state": "State is required",
        "location.country": "Country is required",
        "contactMethod": "Valid contact method is required",
        "additionalNote": "Additional note must be a string",
        "company": "Company must be a string",
    }

    @field_validator("modelId")
    @classmethod
    def _model_id_shape(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_valid_id(value):
            raise ValueError("invalid id")
        return value


class BookingUpdate(InputSchema):
    status: Optional[Literal[BOOKING_STATUSES]] = None
    revenue: Optional[float] = Field(default=None, ge=0)

    messages = {
        "status": "Invalid status",
        "revenue": "Revenue must be a non-negative number",
    }

    @model_validator(mode="after")
    def _something_to_update(self) -> "BookingUpdate":
        if self.status is None and self.revenue is None:
            raise ValueError("Provide a status or revenue to update")
        return self


class BookingLocationOut(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class BookingOut(BaseModel):
    id: str
    fullName: str
    email: str
    phone: str
    shootType: str
    modelId: Optional[str] = None
    modelName: Optional[str] = None
    imageUrl: Optional[str] = None
    bookingDateTime: str
    location: BookingLocationOut = Field(default_factory=BookingLocationOut)
    contactMethod: str
    additionalNote: Optional[str] = None
    company: Optional[str] = None
    status: str = "pending"
    revenue: float = 0
    createdAt: str


class BookingReceipt(BaseModel):
    message: str = "Booking request submitted successfully"
    id: str


# ---------------------------------------------------------------------------
# Models


class Placement(InputSchema):
    city: OptionalText = None
    agency: OptionalText = None


class SocialLinks(InputSchema):
    instagram: OptionalUrl = None
    tiktok: OptionalUrl = None


class ModelFields(InputSchema):
    """Every model attribute, all optional; the shape accepted by updates."""

    name: Optional[RequiredText] = None
    category: Annotated[Optional[Literal[MODEL_CATEGORIES]], BeforeValidator(_category)] = None
    description: OptionalLongText = None
    height: OptionalText = None
    bust: OptionalMeasurement = None
    waist: OptionalMeasurement = None
    hips: OptionalMeasurement = None
    hair: OptionalText = None
    eyes: OptionalText = None
    shoes: OptionalText = None
    modelSize: OptionalText = None
    location: OptionalText = None
    placements: Annotated[Optional[list[Placement]], BeforeValidator(_json_field)] = None
    socialLinks: Annotated[Optional[SocialLinks], BeforeValidator(_json_field)] = None

    messages = {
        "name": "Name cannot be empty",
        "category": "Invalid category",
        "description": "Description cannot exceed 2000 characters",
        "bust": "Bust must look like '86 cm'",
        "waist": "Waist must look like '61 cm'",
        "hips": "Hips must look like '90 cm'",
        "placements": "Placements must be a list of {city, agency}",
        "socialLinks": "Social links must be an object",
        "socialLinks.instagram": "Instagram link must be a valid URL",
        "socialLinks.tiktok": "TikTok link must be a valid URL",
    }


class ModelCreate(ModelFields):
    name: RequiredText
    category: Annotated[Literal[MODEL_CATEGORIES], BeforeValidator(_lower)]

    messages = {
        **ModelFields.messages,
        "name": "Name is required",
        "category": "Valid category is required",
    }


class PlacementOut(BaseModel):
    city: Optional[str] = None
    agency: Optional[str] = None


class SocialLinksOut(BaseModel):
    instagram: Optional[str] = None
    tiktok: Optional[str] = None


class PortfolioImageOut(BaseModel):
    url: str


class ModelOut(BaseModel):
    id: str
    name: str
    category: Optional[str] = None
    imageUrl: Optional[str] = None
    description: Optional[str] = None
    height: Optional[str] = None
    bust: Optional[str] = None
    waist: Optional[str] = None
    hips: Optional[str] = None
    hair: Optional[str] = None
    eyes: Optional[str] = None
    shoes: Optional[str] = None
    modelSize: Optional[str] = None
    location: Optional[str] = None
    placements: list[PlacementOut] = Field(default_factory=list)
    portfolioImages: list[PortfolioImageOut] = Field(default_factory=list)
    socialLinks: SocialLinksOut = Field(default_factory=SocialLinksOut)
    createdAt: str
    updatedAt: Optional[str] = None

    @field_validator("socialLinks", mode="before")
    @classmethod
    def _social_links_present(cls, value: Any) -> Any:
        return value if value is not None else {}

    @field_validator("placements", "portfolioImages", mode="before")
    @classmethod
    def _lists_present(cls, value: Any) -> Any:
        return value if value is not None else []


class ModelList(BaseModel):
    models: list[ModelOut]
    total: int


# ---------------------------------------------------------------------------
# Gallery, team, companies, about


class GalleryCreate(InputSchema):
    title: RequiredText
    campaignLink: OptionalUrl = None

    messages = {
        "title": "Title is required",
        "campaignLink": "Valid campaign link is required",
    }


class GalleryUpdate(InputSchema):
    title: Optional[RequiredText] = None
    campaignLink: OptionalUrl = None

    messages = {
        "title": "Title cannot be empty",
        "campaignLink": "Valid campaign link is required",
    }


class GalleryImageOut(BaseModel):
    id: str
    title: str
    imageUrl: str
    campaignLink: Optional[str] = None
    createdAt: str
    updatedAt: Optional[str] = None


class TeamCreate(InputSchema):
    name: RequiredText
    role: RequiredText
    description: OptionalLongText = None

    messages = {
        "name": "Name is required",
        "role": "Role is required",
        "description": "Description cannot exceed 2000 characters",
    }


class TeamUpdate(InputSchema):
    name: Optional[RequiredText] = None
    role: Optional[RequiredText] = None
    description: OptionalLongText = None

    messages = {
        "name": "Name cannot be empty",
        "role": "Role cannot be empty",
        "description": "Description cannot exceed 2000 characters",
    }


class TeamMemberOut(BaseModel):
    id: str
    name: str
    role: str
    imageUrl: str
    description: Optional[str] = None
    createdAt: str
    updatedAt: Optional[str] = None


class CompanyCreate(InputSchema):
    name: RequiredText
    link: OptionalUrl = None

    messages = {
        "name": "Company name is required",
        "link": "Please enter a valid URL",
    }


class CompanyUpdate(InputSchema):
    name: Optional[RequiredText] = None
    link: OptionalUrl = None

    messages = {
        "name": "Company name cannot be empty",
        "link": "Please enter a valid URL",
    }


class CompanyOut(BaseModel):
    id: str
    name: str
    logoUrl: Optional[str] = None
    link: Optional[str] = None
    createdAt: str
    updatedAt: Optional[str] = None


class AboutUpdate(InputSchema):
    id: Annotated[Optional[str], BeforeValidator(_blank_to_none)] = None
    text: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]

    messages = {
        "text": "About text is required",
        "text:string_too_long": "About text cannot exceed 500 characters",
    }


class AboutOut(BaseModel):
    id: Optional[str] = None
    text: str = ""


# ---------------------------------------------------------------------------
# Newsletter


class NewsletterSubscribe(InputSchema):
    email: NormalizedEmail

    messages = {"email": "Valid email is required"}


class SubscriberOut(BaseModel):
    id: str
    email: str
    createdAt: str


class MessageResponse(BaseModel):
    message: str
