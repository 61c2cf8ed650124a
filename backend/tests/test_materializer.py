"""
Tests for TripMaterializer
"""

from datetime import date, timedelta
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from tripchat.exceptions import NoAttractionsAvailable, TripGenerationFailed
from tripchat.models.database import PointImageModel, PointModel, TripModel
from tripchat.models.schemas import ActionParams
from tripchat.services.catalog import AttractionCatalog
from tripchat.services.materializer import DRAFT_ROUTE_TITLE, TripMaterializer


@pytest.fixture
def materializer(db_session, settings):
    return TripMaterializer(db_session, AttractionCatalog(db_session), settings)


def points_of(db_session, trip_id):
    return (
        db_session.query(PointModel)
        .filter(PointModel.trip_id == trip_id)
        .order_by(PointModel.order)
        .all()
    )


class TestMaterialize:
    """create_trip execution."""

    def test_single_named_attraction(self, materializer, db_session):
        params = ActionParams(city="Сочи", days=3, attractions=[{"name": "X"}])

        trip = materializer.materialize("user-1", params)

        points = points_of(db_session, trip.id)
        assert len(points) == 1
        assert points[0].name == "X"
        assert points[0].order == 0
        assert trip.url == f"https://trips.example.com/trips/{trip.id}"

    def test_trip_row_defaults(self, materializer, db_session, sochi_attractions):
        params = ActionParams(city="Сочи", days=4, attractions=[{"name": "Роза Хутор"}])

        result = materializer.materialize("user-1", params)

        trip = db_session.query(TripModel).filter(TripModel.id == result.id).one()
        assert trip.user_id == "user-1"
        assert trip.is_draft is True
        assert trip.created_by_ai is True
        assert trip.is_public is False
        assert trip.likes == 0
        assert trip.comments == 0
        assert trip.location == "Сочи"
        assert trip.country == "Россия"
        assert trip.photo_url == "https://img.example.com/roza-1.jpg"
        assert trip.lat == pytest.approx(43.6727)
        assert trip.start_date == date.today()
        assert trip.end_date == date.today() + timedelta(days=4)

    def test_named_attractions_keep_order_and_are_enriched(self, materializer, db_session, sochi_attractions):
        params = ActionParams(
            city="Сочи",
            attractions=[
                {"name": "олимпийский парк"},
                {"name": "Неизвестное место"},
                {"name": "Роза Хутор"},
            ],
        )

        trip = materializer.materialize("user-1", params)

        points = points_of(db_session, trip.id)
        assert [p.order for p in points] == [0, 1, 2]
        assert [p.name for p in points] == ["Олимпийский парк", "Неизвестное место", "Роза Хутор"]
        assert points[0].how_to_get == "Ежедневно"
        assert points[0].impressions == "Объекты Олимпиады 2014"
        assert points[1].latitude is None
        assert [i.url for i in points[2].images] == [
            "https://img.example.com/roza-1.jpg",
            "https://img.example.com/roza-2.jpg",
        ]

    def test_catalog_fallback_when_no_names(self, materializer, db_session, sochi_attractions):
        trip = materializer.materialize("user-1", ActionParams(city="сочи", days=2))

        points = points_of(db_session, trip.id)
        assert [p.name for p in points] == ["Роза Хутор", "Дендрарий", "Олимпийский парк"]
        assert [p.order for p in points] == list(range(len(points)))
        # No working status: falls back to a map link
        assert points[1].how_to_get.startswith("https://www.google.com/maps/search/")
        assert db_session.query(PointImageModel).count() == 3

    def test_default_city_when_missing(self, materializer, db_session, sochi_attractions):
        trip = materializer.materialize("user-1", ActionParams())

        assert trip.title == "Сочи: маршрут на 3 дн."
        assert len(points_of(db_session, trip.id)) == 3

    def test_no_attractions_creates_nothing(self, materializer, db_session, sochi_attractions):
        with pytest.raises(NoAttractionsAvailable):
            materializer.materialize("user-1", ActionParams(city="Атлантида", attractions=[]))

        assert db_session.query(TripModel).count() == 0

    def test_days_clamped(self, materializer, db_session):
        result = materializer.materialize(
            "user-1", ActionParams(city="Сочи", days=365, attractions=[{"name": "X"}])
        )

        trip = db_session.query(TripModel).filter(TripModel.id == result.id).one()
        assert trip.end_date - trip.start_date == timedelta(days=30)


class TestMaterializeFailures:
    """Failures surface as TripGenerationFailed with the cause attached."""

    def test_catalog_failure(self, db_session, settings):
        catalog = AttractionCatalog(db_session)
        catalog.top_rated = MagicMock(side_effect=OperationalError("SELECT", {}, Exception("down")))
        materializer = TripMaterializer(db_session, catalog, settings)

        with pytest.raises(TripGenerationFailed) as exc_info:
            materializer.materialize("user-1", ActionParams(city="Сочи"))

        assert isinstance(exc_info.value.cause, OperationalError)
        assert db_session.query(TripModel).count() == 0

    def test_point_failure_leaves_partial_draft(self, materializer, db_session, sochi_attractions):
        original = materializer._create_point

        def flaky_create_point(trip_id, order, attraction):
            if order == 2:
                raise OperationalError("INSERT", {}, Exception("disk full"))
            return original(trip_id, order, attraction)

        with patch.object(materializer, "_create_point", side_effect=flaky_create_point):
            with pytest.raises(TripGenerationFailed) as exc_info:
                materializer.materialize("user-1", ActionParams(city="Сочи"))

        assert isinstance(exc_info.value.cause, OperationalError)
        trip = db_session.query(TripModel).one()
        assert trip.is_draft is True
        assert [p.order for p in points_of(db_session, trip.id)] == [0, 1]


class TestMaterializeTopRated:
    def test_draft_route_from_best_rated(self, materializer, db_session, sochi_attractions):
        result = materializer.materialize_top_rated("user-1", limit=2)

        trip = db_session.query(TripModel).filter(TripModel.id == result.id).one()
        assert trip.title == DRAFT_ROUTE_TITLE
        assert trip.location == "Москва"
        assert [p.name for p in points_of(db_session, trip.id)] == ["Красная площадь", "Роза Хутор"]

    def test_empty_catalog(self, materializer):
        with pytest.raises(NoAttractionsAvailable):
            materializer.materialize_top_rated("user-1")
