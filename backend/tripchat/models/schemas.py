"""
TripChat - Pydantic Schemas
Data validation and serialization for API requests/responses
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================

class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class MessageType(str, Enum):
    TEXT = "text"
    ACTION = "action"


class ActionType(str, Enum):
    CREATE_TRIP = "create_trip"


# =============================================================================
# Conversation Models
# =============================================================================

class Turn(BaseModel):
    """A stored conversation turn as returned by the history endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    role: Optional[str] = None
    message: Optional[str] = None
    message_type: Optional[str] = None
    raw_response: Optional[str] = None
    created_at: datetime


class ChatRequest(BaseModel):
    # Optional on purpose: missing fields are answered with a flat 400 {error}
    user_id: Optional[str] = None
    message: Optional[str] = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    suggestions: list[str] = []
    trip_id: Optional[str] = Field(None, alias="tripId")


class ChatHistoryResponse(BaseModel):
    messages: list[Turn]


# =============================================================================
# Action Models
# =============================================================================

class AttractionRef(BaseModel):
    """An attraction as echoed back by the model: only the name is trusted."""

    name: str = Field(..., min_length=1, max_length=200)


class ActionParams(BaseModel):
    """Parameters of a create_trip action."""

    city: Optional[str] = None
    days: Optional[int] = None
    attractions: list[AttractionRef] = []

    @field_validator("days", mode="before")
    @classmethod
    def lenient_days(cls, v):
        # "3", 3.0 and 3 are all fine; anything unusable falls back to the default
        try:
            days = int(v)
        except (TypeError, ValueError):
            return None
        return days if days >= 1 else None

    @field_validator("attractions", mode="before")
    @classmethod
    def coerce_attractions(cls, v):
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("attractions must be a list")
        # Accept bare strings as names
        return [{"name": item} if isinstance(item, str) else item for item in v]

    @field_validator("city")
    @classmethod
    def blank_city_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        return v or None


class ExtractedReply(BaseModel):
    """Result of splitting a raw completion into message, suggestions and action."""

    assistant_message: str
    suggestions: list[str] = []
    action: Optional[ActionParams] = None


class TripSlots(BaseModel):
    """Destination and length inferred from the latest user message."""

    city: str
    days: int = Field(..., ge=1)


class MaterializedTrip(BaseModel):
    id: str
    url: str
    title: str


# =============================================================================
# Catalog / Trip Models
# =============================================================================

class Attraction(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    name: str
    city: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    rating: Optional[float] = None
    description: Optional[str] = None
    working_status: Optional[str] = None
    photos: list[str] = []

    @field_validator("photos", mode="before")
    @classmethod
    def none_photos_is_empty(cls, v):
        return v or []


class Point(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order: int
    name: str
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    how_to_get: Optional[str] = None
    impressions: Optional[str] = None
    images: list[str] = []

    @field_validator("images", mode="before")
    @classmethod
    def image_urls(cls, v):
        return [getattr(image, "url", image) for image in v or []]


class TripSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    location: Optional[str] = None
    is_draft: bool = True
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: datetime


class Trip(TripSummary):
    user_id: str
    description: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    photo_url: Optional[str] = None
    created_by_ai: bool = True
    is_public: bool = False
    budget: Optional[float] = None
    likes: int = 0
    comments: int = 0
    points: list[Point] = []


class DraftRouteRequest(BaseModel):
    user_id: Optional[str] = None


class DraftRouteResponse(BaseModel):
    trip_id: str
    url: str


# =============================================================================
# Health Check
# =============================================================================

class HealthCheck(BaseModel):
    status: str = "healthy"
    version: str
    timestamp: datetime
