"""TripChat Utilities"""

from tripchat.utils.links import generate_map_link, generate_trip_link

__all__ = ["generate_map_link", "generate_trip_link"]
