"""
TripChat - Action Extractor
Recovers the trailing JSON hint (suggestions / create_trip action) from free model text
"""

import re
import json
import logging
from typing import Optional

from pydantic import ValidationError

from tripchat.exceptions import ParseDegraded
from tripchat.models.schemas import ActionParams, ActionType, ExtractedReply

logger = logging.getLogger(__name__)

CLOSING_FENCE = re.compile(r"\s*```\s*$")
OPENING_FENCE = re.compile(r"```[a-zA-Z]*\s*$")


class ActionExtractor:
    """
    Splits a raw completion into the user-visible text and the structured
    object the model appends at the very end.

    The model is not a trusted structured-output source: whatever it
    returns, extract() yields a usable reply and never raises.
    """

    def __init__(self):
        self._decoder = json.JSONDecoder()

    def extract(self, raw: Optional[str]) -> ExtractedReply:
        text = raw or ""

        try:
            prefix, payload = self._split_last_object(text)
        except ParseDegraded as e:
            logger.debug(f"No structured tail in model output: {e}")
            return ExtractedReply(assistant_message=text.strip())

        message = prefix.strip()
        if not message:
            message = self._payload_message(payload)

        return ExtractedReply(
            assistant_message=message,
            suggestions=self._suggestions(payload),
            action=self._action(payload),
        )

    def _split_last_object(self, text: str) -> tuple[str, dict]:
        """
        Split the last top-level JSON object off the end of the text.

        Only that object is read; objects earlier in the text stay part of
        the message.

        Raises:
            ParseDegraded: when the text does not end with a JSON object
        """
        body = text.rstrip()
        fence = CLOSING_FENCE.search(body)
        if fence:
            body = body[:fence.start()].rstrip()

        if not body.endswith("}"):
            raise ParseDegraded("text does not end with '}'")

        # The leftmost '{' whose object runs exactly to the end is the outermost one
        for match in re.finditer(r"\{", body):
            start = match.start()
            try:
                obj, end = self._decoder.raw_decode(body, start)
            except json.JSONDecodeError:
                continue
            if end != len(body) or not isinstance(obj, dict):
                continue
            prefix = body[:start]
            if prefix.count("{") > prefix.count("}"):
                # Nested inside a truncated outer object
                continue
            return OPENING_FENCE.sub("", prefix.rstrip()), obj

        raise ParseDegraded("trailing braces are not a JSON object")

    def _payload_message(self, payload: dict) -> str:
        """The object's own "message" field, unless it ends in another object."""
        candidate = payload.get("message")
        if not isinstance(candidate, str):
            return ""
        try:
            self._split_last_object(candidate)
        except ParseDegraded:
            return candidate.strip()
        return ""

    def _suggestions(self, payload: dict) -> list[str]:
        suggestions = payload.get("suggestions")
        if not isinstance(suggestions, list):
            return []
        return [str(s) for s in suggestions if s is not None and str(s).strip()]

    def _action(self, payload: dict) -> Optional[ActionParams]:
        if payload.get("action") != ActionType.CREATE_TRIP.value:
            return None

        params = payload.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            logger.warning(f"Ignoring create_trip with non-object params: {params!r}")
            return None

        try:
            return ActionParams.model_validate(params)
        except ValidationError as e:
            logger.warning(f"Ignoring create_trip with invalid params: {e}")
            return None
