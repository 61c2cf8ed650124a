"""
TripChat Chat Router
Conversational trip planning and conversation history
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tripchat.exceptions import ChatValidationError, TripChatError, TripGenerationFailed
from tripchat.models.database import get_db
from tripchat.models.schemas import (
    ChatHistoryResponse,
    ChatRequest,
    ChatResponse,
    DraftRouteRequest,
    DraftRouteResponse,
    Turn,
)
from tripchat.services.catalog import AttractionCatalog
from tripchat.services.chat import ChatService
from tripchat.services.history import ConversationStore
from tripchat.services.llm import DialogueEngine, get_dialogue_engine
from tripchat.services.materializer import TripMaterializer

logger = logging.getLogger(__name__)

router = APIRouter()


def get_chat_service(
    db: Session = Depends(get_db),
    engine: DialogueEngine = Depends(get_dialogue_engine),
) -> ChatService:
    return ChatService(db, engine)


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def send_message(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
):
    """
    Send a message to the travel assistant.

    When the user has confirmed a route, the assistant creates a draft trip
    and the response carries its tripId.
    """
    if not request.user_id or not request.message or not request.message.strip():
        raise ChatValidationError("Missing user_id or message")

    try:
        return await service.handle(request.user_id, request.message)
    except TripChatError:
        raise
    except Exception as e:
        logger.error(f"Chat failed for user {request.user_id}: {e}", exc_info=True)
        raise TripChatError(str(e), cause=e) from e


@router.get("/chat-history", response_model=ChatHistoryResponse)
async def get_chat_history(
    user_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    """Full conversation of a user, oldest first."""
    if not user_id:
        raise ChatValidationError("user_id is required")

    try:
        turns = ConversationStore(db).list_turns(user_id)
    except Exception as e:
        logger.error(f"History read failed for user {user_id}: {e}", exc_info=True)
        raise TripChatError("History read failed", cause=e) from e

    return ChatHistoryResponse(messages=[Turn.model_validate(t) for t in turns])


@router.post("/create-draft-route", response_model=DraftRouteResponse)
async def create_draft_route(
    request: DraftRouteRequest,
    db: Session = Depends(get_db),
):
    """
    Create a draft trip from the best rated attractions in the catalog,
    without going through the conversation.
    """
    if not request.user_id:
        raise ChatValidationError("user_id is required")

    materializer = TripMaterializer(db, AttractionCatalog(db))
    try:
        trip = materializer.materialize_top_rated(request.user_id)
    except TripGenerationFailed as e:
        logger.error(f"Draft route failed for user {request.user_id}: {e}", exc_info=True)
        raise

    return DraftRouteResponse(trip_id=trip.id, url=trip.url)
