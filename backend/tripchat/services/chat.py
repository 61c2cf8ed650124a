"""
TripChat - Chat Pipeline
Runs one /chat request: log, build context, generate, extract, materialize, log
"""

import logging
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from tripchat.config import Settings, get_settings
from tripchat.models.schemas import ChatResponse, MessageType
from .catalog import AttractionCatalog
from .context import ContextBuilder
from .extractor import ActionExtractor
from .history import ConversationStore, TurnLogger
from .llm import DialogueEngine
from .materializer import TripMaterializer

logger = logging.getLogger(__name__)


class ChatStage(str, Enum):
    """Request-level stages, in order"""
    RECEIVED = "received"
    HISTORY_LOADED = "history_loaded"
    PROMPTED = "prompted"
    COMPLETED = "completed"
    REPLIED = "replied"
    ACTION_EXECUTING = "action_executing"
    ACTION_REPLIED = "action_replied"
    LOGGED = "logged"


class ChatService:
    """Orchestrates one chat turn over the injected store, catalog and model."""

    def __init__(
        self,
        db: Session,
        engine: DialogueEngine,
        settings: Optional[Settings] = None,
        extractor: Optional[ActionExtractor] = None,
    ):
        self.settings = settings or get_settings()
        self.engine = engine
        self.store = ConversationStore(db)
        self.catalog = AttractionCatalog(db)
        self.turns = TurnLogger(self.store)
        self.context = ContextBuilder(self.store, self.catalog, self.settings)
        self.extractor = extractor or ActionExtractor()
        self.materializer = TripMaterializer(db, self.catalog, self.settings)

    async def handle(self, user_id: str, message: str) -> ChatResponse:
        """
        Process a user message and produce the reply.

        The user turn is stored before anything else so it survives a
        failed generation. Any failure after that propagates and no
        assistant turn is written.
        """
        self.turns.log_user(user_id, message)
        self._stage(user_id, ChatStage.RECEIVED)

        # The new message is already stored, so it comes back with the history
        messages = self.context.build_messages(user_id)
        self._stage(user_id, ChatStage.HISTORY_LOADED)

        self._stage(user_id, ChatStage.PROMPTED)
        raw_response = await self.engine.complete(messages)
        self._stage(user_id, ChatStage.COMPLETED)

        extracted = self.extractor.extract(raw_response)
        reply = extracted.assistant_message
        trip_id = None
        message_type = MessageType.TEXT

        if extracted.action is not None:
            self._stage(user_id, ChatStage.ACTION_EXECUTING)
            trip = self.materializer.materialize(user_id, extracted.action)
            confirmation = f"Готово! Я создал черновик маршрута «{trip.title}». Открыть: {trip.url}"
            reply = f"{reply}\n\n{confirmation}" if reply else confirmation
            trip_id = trip.id
            message_type = MessageType.ACTION
            self._stage(user_id, ChatStage.ACTION_REPLIED)
        else:
            self._stage(user_id, ChatStage.REPLIED)

        self.turns.log_assistant(user_id, reply, message_type, raw_response=raw_response)
        self._stage(user_id, ChatStage.LOGGED)

        return ChatResponse(reply=reply, suggestions=extracted.suggestions, trip_id=trip_id)

    def _stage(self, user_id: str, stage: ChatStage) -> None:
        logger.debug(f"chat[{user_id}] -> {stage.value}")
