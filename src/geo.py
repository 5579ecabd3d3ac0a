"""
Distance helpers: Haversine distance and nearest-shop ranking.
"""

import math
from dataclasses import replace
from typing import Iterable

from config import EARTH_RADIUS_KM, MAX_NEAREST_SHOPS
from models import Coordinates, Shop


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """
    Great-circle distance between two points.

    Args:
        a: First point
        b: Second point

    Returns:
        Distance in kilometres
    """
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def has_usable_coordinates(shop: Shop) -> bool:
    """Spreadsheet rows without coordinates come through as 0,0."""
    coords = shop.coordinates
    return bool(coords and coords.latitude and coords.longitude)


def rank_nearest(
    location: Coordinates,
    shops: Iterable[Shop],
    limit: int = MAX_NEAREST_SHOPS
) -> list[Shop]:
    """
    Rank shops by distance from the user's location.

    Shops without usable coordinates are dropped. Ties keep their
    original order.

    Returns:
        At most `limit` copies of the nearest shops, each with
        distance_km filled in
    """
    with_distance = [
        replace(shop, distance_km=distance_km(location, shop.coordinates))
        for shop in shops
        if has_usable_coordinates(shop)
    ]
    with_distance.sort(key=lambda shop: shop.distance_km)
    return with_distance[:limit]


def format_distance(km: float) -> str:
    """Human-readable distance label: metres under 1 km, km otherwise."""
    if km < 1:
        return f"{math.floor(km * 1000 + 0.5)} м"
    if km < 10:
        return f"{km:.1f} км"
    return f"{math.floor(km + 0.5)} км"
