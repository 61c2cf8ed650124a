"""
TripChat Trips Router
Read and delete access to AI-created trips
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tripchat.models.database import TripModel, get_db
from tripchat.models.schemas import Trip, TripSummary

router = APIRouter()


@router.get("", response_model=list[TripSummary])
async def list_trips(
    user_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """List trips, newest first, optionally filtered by user_id."""
    query = db.query(TripModel)

    if user_id:
        query = query.filter(TripModel.user_id == user_id)

    return query.order_by(TripModel.created_at.desc()).all()


@router.get("/{trip_id}", response_model=Trip)
async def get_trip(trip_id: str, db: Session = Depends(get_db)):
    """Get a trip with its ordered points and their images."""
    trip = db.query(TripModel).filter(TripModel.id == trip_id).first()

    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Trip {trip_id} not found",
        )

    return trip


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(trip_id: str, db: Session = Depends(get_db)):
    """Delete a trip together with its points and images."""
    trip = db.query(TripModel).filter(TripModel.id == trip_id).first()

    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Trip {trip_id} not found",
        )

    db.delete(trip)
    db.commit()
