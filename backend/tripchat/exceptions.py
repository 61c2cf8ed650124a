"""
TripChat Errors
Failure taxonomy shared by the chat pipeline and the HTTP layer
"""

from typing import Optional


class TripChatError(Exception):
    """Base class for all pipeline errors."""

    status_code = 500
    public_message = "Ошибка генерации"

    def __init__(self, message: str = "", cause: Optional[BaseException] = None):
        super().__init__(message or self.public_message)
        self.cause = cause


class ChatValidationError(TripChatError):
    """Required request fields are missing. Raised before any side effect."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.public_message = message


class GenerationFailed(TripChatError):
    """The model call failed (transport, quota, model error or empty reply)."""


class ParseDegraded(TripChatError):
    """Model output had no usable trailing JSON object.

    Never leaves the action extractor.
    """


class TripGenerationFailed(TripChatError):
    """A catalog lookup or one of the trip writes failed."""

    public_message = "Не удалось создать маршрут"


class NoAttractionsAvailable(TripGenerationFailed):
    """Nothing to put in the trip: no attractions named and none in the catalog."""

    public_message = "Не удалось получить достопримечательности"
