"""
TripChat Links
Shareable trip links and map links for points
"""

from typing import Optional
from urllib.parse import quote


def generate_trip_link(trip_id: str, base_url: str) -> str:
    """
    Build the shareable link of a trip.

    Args:
        trip_id: Trip identifier
        base_url: Public frontend origin, with or without trailing slash

    Returns:
        Link URL string
    """
    return f"{base_url.rstrip('/')}/trips/{quote(str(trip_id), safe='')}"


def generate_map_link(
    lat: Optional[float],
    lng: Optional[float],
    name: str = "",
) -> Optional[str]:
    """
    Google Maps search link for a point.

    Coordinates are used when known; otherwise the place name is searched.

    Args:
        lat: Latitude
        lng: Longitude
        name: Place name, used only without coordinates

    Returns:
        Link URL string, or None when there is nothing to search for
    """
    if lat is not None and lng is not None:
        query = f"{lat},{lng}"
    elif name and name.strip():
        query = quote(name.strip())
    else:
        return None

    return f"https://www.google.com/maps/search/?api=1&query={query}"
