"""TripChat Models Package"""

from tripchat.models.schemas import (
    ActionParams,
    Attraction,
    AttractionRef,
    ChatRequest,
    ChatResponse,
    ExtractedReply,
    MaterializedTrip,
    MessageType,
    Role,
    Trip,
    Turn,
)

__all__ = [
    "ActionParams",
    "Attraction",
    "AttractionRef",
    "ChatRequest",
    "ChatResponse",
    "ExtractedReply",
    "MaterializedTrip",
    "MessageType",
    "Role",
    "Trip",
    "Turn",
]
