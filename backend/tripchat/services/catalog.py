"""
TripChat Attraction Catalog
Read-only access to points of interest per city
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from tripchat.models.database import AttractionModel
from tripchat.models.schemas import Attraction

logger = logging.getLogger(__name__)


class AttractionCatalog:
    """Queries over the attractions table, best rated first."""

    def __init__(self, db: Session):
        self.db = db

    def cities(self) -> list[str]:
        """Distinct city names present in the catalog."""
        rows = (
            self.db.query(AttractionModel.city)
            .filter(AttractionModel.city.isnot(None))
            .distinct()
            .all()
        )
        return [row[0] for row in rows if row[0]]

    def resolve_city(self, city: Optional[str]) -> Optional[str]:
        """
        Map a city name to the spelling stored in the catalog.

        Comparison is done in Python: SQLite's lower() only folds ASCII,
        which breaks Cyrillic names.
        """
        if not city:
            return None
        wanted = city.strip().casefold()
        for known in self.cities():
            if known.casefold() == wanted:
                return known
        return None

    def top_rated(self, city: Optional[str], limit: int = 10) -> list[Attraction]:
        """
        Best rated attractions of a city.

        Args:
            city: City name, matched case-insensitively
            limit: Maximum results

        Returns:
            Attractions ordered by descending rating (empty if the city is unknown)
        """
        stored_city = self.resolve_city(city)
        if stored_city is None:
            logger.info(f"No catalog entries for city {city!r}")
            return []

        rows = (
            self.db.query(AttractionModel)
            .filter(AttractionModel.city == stored_city)
            .order_by(AttractionModel.rating.desc(), AttractionModel.id.asc())
            .limit(limit)
            .all()
        )
        return [Attraction.model_validate(row) for row in rows]

    def top_rated_anywhere(self, limit: int = 6) -> list[Attraction]:
        """Best rated attractions regardless of city."""
        rows = (
            self.db.query(AttractionModel)
            .order_by(AttractionModel.rating.desc(), AttractionModel.id.asc())
            .limit(limit)
            .all()
        )
        return [Attraction.model_validate(row) for row in rows]

    def find_by_name(self, name: str, city: Optional[str] = None) -> Optional[Attraction]:
        """Look up one attraction by name, preferring the given city."""
        return self.find_by_names([name], city=city)[0]

    def find_by_names(self, names: list[str], city: Optional[str] = None) -> list[Optional[Attraction]]:
        """
        Look up attractions by name, preferring the given city.

        Names echoed back by the model may differ in case or surrounding
        whitespace from the catalog spelling. The city list and the catalog
        rows are read once for the whole batch.

        Returns:
            One entry per name, in input order; None where nothing matched
        """
        wanted = [name.strip().casefold() for name in names]
        if not any(wanted):
            return [None] * len(names)

        stored_city = self.resolve_city(city)
        rows = (
            self.db.query(AttractionModel)
            .filter(AttractionModel.name.isnot(None))
            .order_by(AttractionModel.rating.desc(), AttractionModel.id.asc())
            .all()
        )

        # Best rated row per folded name; rows of the preferred city go first
        by_name: dict[str, AttractionModel] = {}
        preferred = [row for row in rows if stored_city is not None and row.city == stored_city]
        for row in preferred + rows:
            by_name.setdefault(row.name.strip().casefold(), row)

        return [
            Attraction.model_validate(by_name[key]) if key and key in by_name else None
            for key in wanted
        ]
