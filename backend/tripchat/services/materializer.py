"""
TripChat Trip Materializer
Executes a create_trip action: trip row, then ordered points with their photos
"""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from tripchat.config import Settings, get_settings
from tripchat.exceptions import NoAttractionsAvailable, TripGenerationFailed
from tripchat.models.database import PointImageModel, PointModel, TripModel
from tripchat.models.schemas import ActionParams, Attraction, MaterializedTrip
from tripchat.utils.links import generate_map_link, generate_trip_link
from .catalog import AttractionCatalog

logger = logging.getLogger(__name__)

DRAFT_ROUTE_TITLE = "Маршрут от AI"
UNKNOWN_COUNTRY = "Не указана"


class TripMaterializer:
    """
    Writes a draft trip for a user.

    Writes are sequential and committed one row group at a time: the trip,
    then each point together with its images. If a later point fails the
    earlier ones stay committed and the trip remains a partially filled
    draft, which is safe to discard or regenerate.
    """

    def __init__(
        self,
        db: Session,
        catalog: AttractionCatalog,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.catalog = catalog
        self.settings = settings or get_settings()

    def materialize(self, user_id: str, params: ActionParams) -> MaterializedTrip:
        """
        Create a trip from a create_trip action.

        Args:
            user_id: Owner of the trip
            params: Parsed action parameters (city, days, attractions)

        Returns:
            MaterializedTrip with id and shareable url

        Raises:
            NoAttractionsAvailable: nothing named and nothing in the catalog
            TripGenerationFailed: a catalog read or any write failed
        """
        city = params.city or self.settings.default_city
        days = self._clamp_days(params.days)

        try:
            attractions = self.resolve_attractions(params, city)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Catalog lookup failed for {city}: {e}")
            raise TripGenerationFailed("Catalog lookup failed", cause=e) from e

        title = f"{city}: маршрут на {days} дн."
        return self._write_trip(user_id, attractions, city=city, days=days, title=title)

    def materialize_top_rated(self, user_id: str, limit: Optional[int] = None) -> MaterializedTrip:
        """Draft trip from the best rated catalog entries of any city."""
        limit = limit or self.settings.draft_route_limit

        try:
            attractions = self.catalog.top_rated_anywhere(limit=limit)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Catalog lookup failed: {e}")
            raise TripGenerationFailed("Catalog lookup failed", cause=e) from e

        city = attractions[0].city if attractions else None
        return self._write_trip(
            user_id,
            attractions,
            city=city,
            days=self.settings.default_days,
            title=DRAFT_ROUTE_TITLE,
        )

    def resolve_attractions(self, params: ActionParams, city: str) -> list[Attraction]:
        """
        Points to visit, in order.

        Named attractions are kept as given and enriched from the catalog
        when a matching entry exists; with no names the city's best rated
        entries are used.
        """
        if params.attractions:
            names = [ref.name for ref in params.attractions]
            known = self.catalog.find_by_names(names, city=city)
            return [
                match or Attraction(name=name.strip(), city=city)
                for name, match in zip(names, known)
            ]

        logger.info(f"No attractions named, using top rated entries for {city}")
        return self.catalog.top_rated(city, limit=self.settings.catalog_limit)

    def _write_trip(
        self,
        user_id: str,
        attractions: list[Attraction],
        city: Optional[str],
        days: int,
        title: str,
    ) -> MaterializedTrip:
        if not attractions:
            raise NoAttractionsAvailable(f"No attractions available for {city}")

        try:
            trip = self._create_trip(user_id, attractions, city=city, days=days, title=title)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Trip insert failed for user {user_id}: {e}")
            raise TripGenerationFailed("Trip insert failed", cause=e) from e

        for order, attraction in enumerate(attractions):
            try:
                self._create_point(trip.id, order, attraction)
            except Exception as e:
                self.db.rollback()
                logger.error(
                    f"Point {order} ({attraction.name}) failed for trip {trip.id}, "
                    f"draft left with {order} of {len(attractions)} points: {e}"
                )
                raise TripGenerationFailed("Point insert failed", cause=e) from e

        url = generate_trip_link(trip.id, self.settings.share_base_url)
        logger.info(f"Created draft trip {trip.id} with {len(attractions)} points for user {user_id}")
        return MaterializedTrip(id=trip.id, url=url, title=title)

    def _create_trip(
        self,
        user_id: str,
        attractions: list[Attraction],
        city: Optional[str],
        days: int,
        title: str,
    ) -> TripModel:
        first = attractions[0]
        today = date.today()

        trip = TripModel(
            user_id=user_id,
            title=title,
            description=f"Маршрут составлен AI: {len(attractions)} мест, {days} дн.",
            country=first.country or UNKNOWN_COUNTRY,
            location=city,
            lat=first.latitude,
            lng=first.longitude,
            photo_url=first.photos[0] if first.photos else None,
            is_draft=True,
            created_by_ai=True,
            is_public=False,
            budget=None,
            start_date=today,
            end_date=today + timedelta(days=days),
            likes=0,
            comments=0,
        )
        self.db.add(trip)
        self.db.commit()
        self.db.refresh(trip)
        return trip

    def _create_point(self, trip_id: str, order: int, attraction: Attraction) -> PointModel:
        how_to_get = attraction.working_status or generate_map_link(
            attraction.latitude, attraction.longitude, attraction.name
        )

        point = PointModel(
            trip_id=trip_id,
            order=order,
            name=attraction.name,
            description=attraction.description,
            latitude=attraction.latitude,
            longitude=attraction.longitude,
            how_to_get=how_to_get or "",
            impressions=attraction.description or "",
        )
        self.db.add(point)
        self.db.flush()

        for url in attraction.photos:
            self.db.add(PointImageModel(point_id=point.id, url=url))

        self.db.commit()
        return point

    def _clamp_days(self, days: Optional[int]) -> int:
        if not days:
            return self.settings.default_days
        return max(1, min(days, self.settings.max_trip_days))
