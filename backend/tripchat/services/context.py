"""
TripChat - Prompt Context Builder
Turns stored history and catalog data into the message list sent to the LLM
"""

import re
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from tripchat.config import Settings, get_settings
from tripchat.models.database import ChatMessageModel
from tripchat.models.schemas import Attraction, Role, TripSlots
from .catalog import AttractionCatalog
from .history import ConversationStore

logger = logging.getLogger(__name__)

ALLOWED_ROLES = {Role.USER.value, Role.ASSISTANT.value}

NO_DATA_LINE = "Нет данных о достопримечательностях для этого города."

# "3 days", "5-day", "на 4 дня", "7 дней", "2 суток"
DAYS_PATTERN = re.compile(
    r"(\d{1,3})\s*-?\s*(?:days?\b|дн(?:ей|я)|день|сут(?:ок|ки))",
    re.IGNORECASE,
)

# Capitalised place name after a locative preposition: "in Paris", "в Сочи", "во Владимире"
CITY_PATTERN = re.compile(
    r"\b(?:[Ii]n|[Tt]o|[Вв]о?)\s+([A-ZА-ЯЁ][\w-]*(?:\s+[A-ZА-ЯЁ][\w-]*)?)"
)

# System prompt for the travel assistant
SYSTEM_PROMPT = """Ты ассистент по путешествиям. Отвечай дружелюбно и структурировано.

Сейчас обсуждается поездка: город {city}, длительность {days} дн.

Достопримечательности города (используй только их):
{attractions}

ПРАВИЛА:
1. Дай понятный, логичный ответ. Если пользователь просит маршрут, предложи его по дням.
2. Сначала задай уточняющие вопросы (даты, интересы, темп поездки).
3. Не придумывай достопримечательности, которых нет в списке выше.
4. Создавай маршрут только после того, как пользователь явно согласился ("да", "создай", "давай").
5. Никогда не придумывай ссылки на маршрут: ссылку сформирует система после создания.

ФОРМАТ ОТВЕТА:
В самом конце каждого ответа добавь JSON-объект с 3 подсказками:
{{"suggestions": ["+ Создай маршрут на выходные", "+ Найди необычные отели", "+ Подскажи куда поехать с детьми"]}}

Когда пользователь подтвердил создание маршрута, добавь в конце вместо этого:
{{"action": "create_trip", "params": {{"city": "{city}", "days": {days}, "attractions": [{{"name": "Название из списка"}}]}}, "suggestions": ["..."]}}

JSON-объект должен быть последним в ответе, после него ничего не пиши."""


def sanitize_turns(rows: Iterable[ChatMessageModel]) -> list[ChatMessageModel]:
    """Drop turns that must never reach the model: unknown roles, empty or non-text content."""
    return [
        row
        for row in rows
        if row is not None
        and row.role in ALLOWED_ROLES
        and isinstance(row.message, str)
        and row.message.strip()
    ]


def _city_stem(city: str) -> str:
    """Lowercased city name without its last letter, so "Москва" also matches "Москве"."""
    folded = city.casefold()
    return folded[:-1] if len(folded) > 4 else folded


def infer_slots(
    text: Optional[str],
    known_cities: Iterable[str] = (),
    default_city: str = "Сочи",
    default_days: int = 3,
    max_days: int = 30,
) -> TripSlots:
    """
    Best-effort destination and trip length from one user utterance.

    Args:
        text: Latest user message (may be empty)
        known_cities: Catalog city names, preferred over free-text guesses
        default_city: Used when no city is found
        default_days: Used when no day count is found
        max_days: Upper bound for the day count

    Returns:
        TripSlots with city and days always filled
    """
    text = text or ""
    days = default_days
    city = None

    days_match = DAYS_PATTERN.search(text)
    if days_match:
        days = max(1, min(int(days_match.group(1)), max_days))

    folded = text.casefold()
    best_length = 0
    for known in known_cities:
        stem = _city_stem(known)
        if stem and len(stem) > best_length and re.search(r"\b" + re.escape(stem), folded):
            city = known
            best_length = len(stem)

    if city is None:
        candidates = list(CITY_PATTERN.finditer(text))
        if candidates:
            # Prefer the place named right after the day count
            after_days = [
                m for m in candidates if days_match and m.start() >= days_match.end()
            ]
            city = (after_days or candidates)[0].group(1)

    return TripSlots(city=city or default_city, days=days)


def render_attractions(attractions: list[Attraction]) -> str:
    """Numbered "name — description" list for the system prompt."""
    if not attractions:
        return NO_DATA_LINE
    lines = []
    for i, attraction in enumerate(attractions, start=1):
        if attraction.description:
            lines.append(f"{i}. {attraction.name} — {attraction.description}")
        else:
            lines.append(f"{i}. {attraction.name}")
    return "\n".join(lines)


class ContextBuilder:
    """Builds the ordered chat message list for one request."""

    def __init__(
        self,
        store: ConversationStore,
        catalog: AttractionCatalog,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.settings = settings or get_settings()

    def load_history(self, user_id: str) -> list[ChatMessageModel]:
        """Sanitized turns, limited to the most recent history window."""
        turns = sanitize_turns(self.store.list_turns(user_id))
        window = self.settings.history_window
        return turns[-window:] if window > 0 else []

    def build_messages(self, user_id: str, new_message: Optional[str] = None) -> list[dict]:
        """
        Assemble [system, ...history, (new user turn)] for the dialogue engine.

        Pass new_message only when it has not been stored yet, otherwise it
        would appear twice.
        """
        history = self.load_history(user_id)

        latest_user_text = new_message
        if latest_user_text is None:
            latest_user_text = next(
                (t.message for t in reversed(history) if t.role == Role.USER.value),
                None,
            )

        slots = infer_slots(
            latest_user_text,
            known_cities=self._known_cities(),
            default_city=self.settings.default_city,
            default_days=self.settings.default_days,
            max_days=self.settings.max_trip_days,
        )
        logger.debug(f"Inferred slots for {user_id}: city={slots.city} days={slots.days}")

        messages = [{"role": "system", "content": self.system_prompt(slots)}]
        messages.extend({"role": t.role, "content": t.message} for t in history)
        if new_message is not None:
            messages.append({"role": Role.USER.value, "content": new_message})

        return messages

    def system_prompt(self, slots: TripSlots) -> str:
        return SYSTEM_PROMPT.format(
            city=slots.city,
            days=slots.days,
            attractions=self._attractions_block(slots.city),
        )

    def _known_cities(self) -> list[str]:
        try:
            return self.catalog.cities()
        except SQLAlchemyError as e:
            logger.warning(f"Catalog city list unavailable: {e}")
            self.catalog.db.rollback()
            return []

    def _attractions_block(self, city: str) -> str:
        try:
            attractions = self.catalog.top_rated(city, limit=self.settings.catalog_limit)
        except SQLAlchemyError as e:
            logger.warning(f"Catalog query failed for {city}: {e}")
            self.catalog.db.rollback()
            return NO_DATA_LINE
        return render_attractions(attractions)
