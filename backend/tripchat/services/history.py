"""
TripChat Conversation Store
Append-only per-user log of chat turns
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from tripchat.models.database import ChatMessageModel
from tripchat.models.schemas import MessageType, Role

logger = logging.getLogger(__name__)


class ConversationStore:
    """Insert and ordered select over the chat_history table."""

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        user_id: str,
        role: Role,
        message: str,
        message_type: MessageType = MessageType.TEXT,
        raw_response: Optional[str] = None,
    ) -> ChatMessageModel:
        """Insert one turn and commit it immediately."""
        turn = ChatMessageModel(
            user_id=user_id,
            role=role.value,
            message=message,
            message_type=message_type.value,
            raw_response=raw_response,
        )
        self.db.add(turn)
        self.db.commit()
        self.db.refresh(turn)
        return turn

    def list_turns(self, user_id: str) -> list[ChatMessageModel]:
        """All turns for a user, oldest first."""
        return (
            self.db.query(ChatMessageModel)
            .filter(ChatMessageModel.user_id == user_id)
            .order_by(ChatMessageModel.created_at.asc(), ChatMessageModel.id.asc())
            .all()
        )


class TurnLogger:
    """Writes the two turns of a chat request back to the store."""

    def __init__(self, store: ConversationStore):
        self.store = store

    def log_user(self, user_id: str, message: str) -> ChatMessageModel:
        return self.store.append(user_id, Role.USER, message)

    def log_assistant(
        self,
        user_id: str,
        message: str,
        message_type: MessageType,
        raw_response: Optional[str] = None,
    ) -> ChatMessageModel:
        turn = self.store.append(
            user_id,
            Role.ASSISTANT,
            message,
            message_type=message_type,
            raw_response=raw_response,
        )
        logger.debug(f"Logged {message_type.value} reply for user {user_id}")
        return turn
