"""TripChat Services"""

from tripchat.services.catalog import AttractionCatalog
from tripchat.services.chat import ChatService
from tripchat.services.context import ContextBuilder
from tripchat.services.extractor import ActionExtractor
from tripchat.services.history import ConversationStore, TurnLogger
from tripchat.services.llm import DialogueEngine
from tripchat.services.materializer import TripMaterializer

__all__ = [
    "ActionExtractor",
    "AttractionCatalog",
    "ChatService",
    "ContextBuilder",
    "ConversationStore",
    "DialogueEngine",
    "TripMaterializer",
    "TurnLogger",
]
