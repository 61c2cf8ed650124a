"""
TripChat Attractions Router
Read-only catalog lookup
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tripchat.models.database import get_db
from tripchat.models.schemas import Attraction
from tripchat.services.catalog import AttractionCatalog

router = APIRouter()


@router.get("", response_model=list[Attraction])
async def list_attractions(
    city: Optional[str] = Query(default=None, description="City name, case-insensitive"),
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Best rated attractions, for one city or across the whole catalog."""
    catalog = AttractionCatalog(db)
    if city:
        return catalog.top_rated(city, limit=limit)
    return catalog.top_rated_anywhere(limit=limit)
