"""
TripChat Database Setup
SQLAlchemy ORM models and database connection
"""

import uuid
from datetime import date, datetime
from typing import Generator

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from tripchat.config import get_settings

# Get settings
settings = get_settings()

# Create engine
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if "sqlite" in settings.database_url else {},
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create base class for models
Base = declarative_base()


def enable_sqlite_foreign_keys(dbapi_conn, connection_record) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


if engine.dialect.name == "sqlite":
    event.listen(engine, "connect", enable_sqlite_foreign_keys)


# =============================================================================
# ORM Models
# =============================================================================


class ChatMessageModel(Base):
    """One conversation turn. Append-only."""

    __tablename__ = "chat_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    # Plain strings: rows from older revisions may carry other roles or nulls
    role = Column(String(20), nullable=True)
    message = Column(Text, nullable=True)
    message_type = Column(String(20), default="text")
    raw_response = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class AttractionModel(Base):
    """Reference point of interest. Read-only for the chat pipeline."""

    __tablename__ = "attractions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    city = Column(String(100), nullable=True, index=True)
    country = Column(String(100), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    rating = Column(Float, default=0.0)
    description = Column(Text, nullable=True)
    working_status = Column(String(200), nullable=True)
    photos = Column(JSON, default=list)  # list of urls


class TripModel(Base):
    """Trip ORM model."""

    __tablename__ = "trips"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    country = Column(String(100), nullable=True)
    location = Column(String(100), nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    photo_url = Column(String, nullable=True)
    is_draft = Column(Boolean, default=True)
    created_by_ai = Column(Boolean, default=True)
    is_public = Column(Boolean, default=False)
    budget = Column(Float, nullable=True)
    start_date = Column(Date, default=date.today)
    end_date = Column(Date, nullable=True)
    likes = Column(Integer, default=0)
    comments = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    points = relationship(
        "PointModel",
        back_populates="trip",
        order_by="PointModel.order",
        cascade="all, delete-orphan",
    )


class PointModel(Base):
    """Ordered stop within a trip."""

    __tablename__ = "points"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(String, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    order = Column(Integer, nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    how_to_get = Column(Text, default="")
    impressions = Column(Text, default="")

    trip = relationship("TripModel", back_populates="points")
    images = relationship(
        "PointImageModel",
        back_populates="point",
        order_by="PointImageModel.id",
        cascade="all, delete-orphan",
    )


class PointImageModel(Base):
    """Photo attached to a point."""

    __tablename__ = "point_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    point_id = Column(Integer, ForeignKey("points.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String, nullable=False)

    point = relationship("PointModel", back_populates="images")


# =============================================================================
# Database Functions
# =============================================================================


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Get database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
