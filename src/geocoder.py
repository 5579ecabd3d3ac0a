"""
Address geocoding for the Vacancy Bot.

A typed address is expanded into several query variants and resolved
through an ordered chain of providers:
- Yandex Geocoder (every variant)
- OpenStreetMap Nominatim (first variant only)
"""

import logging
from typing import Optional, Protocol

import requests

from config import (
    COUNTRY,
    DEFAULT_STREET_TYPE,
    GEOCODER_USER_AGENT,
    HTTP_TIMEOUT,
    NOMINATIM_URL,
    STREET_TYPE_TOKENS,
    YANDEX_GEOCODER_URL,
    YANDEX_GEOCODING_API_KEY
)
from models import Coordinates

logger = logging.getLogger(__name__)


def _split_parts(address: str) -> list[str]:
    return [part.strip() for part in address.split(",") if part.strip()]


def normalize_address(address: str) -> str:
    """
    Normalize an address for geocoding.

    "City, Street, House" gets a country prefix and, when the street has
    no street-type word, an inserted "улица". Shorter inputs only get
    the country prefix.

    Example:
        "Москва, Тверская, 1" -> "Россия, Москва, улица Тверская, 1"
    """
    parts = _split_parts(address)
    if len(parts) >= 3:
        city, street = parts[0], parts[1]
        house = " ".join(parts[2:])
        if not any(token in street.lower() for token in STREET_TYPE_TOKENS):
            street = f"{DEFAULT_STREET_TYPE} {street}"
        return f"{COUNTRY}, {city}, {street}, {house}"
    return f"{COUNTRY}, {address}"


def build_address_variants(address: str) -> list[str]:
    """
    Build the ordered list of geocoder queries for an address.

    Variants, in order: raw input, normalized input, normalized
    city+street, normalized city, raw input with country prefix.
    Duplicates (case-insensitive) are dropped.
    """
    original = address.strip()
    parts = _split_parts(original)

    city_street = f"{parts[0]}, {parts[1]}" if len(parts) >= 2 else original
    city_only = parts[0] if parts else original

    variants = [
        original,
        normalize_address(original),
        normalize_address(city_street),
        normalize_address(city_only),
        f"{COUNTRY}, {original}",
    ]

    seen = set()
    unique = []
    for variant in variants:
        key = variant.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(variant)
    return unique


def parse_yandex_coordinates(payload) -> Optional[Coordinates]:
    """
    Extract the first point from a Yandex Geocoder response.

    Handles the GeoJSON shape (features[].geometry.coordinates, lon/lat)
    first, then the legacy GeoObjectCollection shape ("lon lat" string).
    """
    if not isinstance(payload, dict):
        return None

    features = payload.get("features")
    if isinstance(features, list) and features:
        geometry = (features[0] or {}).get("geometry") or {}
        coords = geometry.get("coordinates")
        if isinstance(coords, list) and len(coords) >= 2:
            lon, lat = coords[0], coords[1]
            return Coordinates.parse(lat, lon)

    collection = (payload.get("response") or {}).get("GeoObjectCollection") or {}
    members = collection.get("featureMember")
    if isinstance(members, list) and members:
        geo_object = (members[0] or {}).get("GeoObject") or {}
        pos = (geo_object.get("Point") or {}).get("pos")
        if isinstance(pos, str):
            pieces = pos.split()
            if len(pieces) >= 2:
                return Coordinates.parse(pieces[1], pieces[0])

    return None


class GeocodingProvider(Protocol):
    name: str
    try_all_variants: bool

    def lookup(self, query: str) -> Optional[Coordinates]:
        ...


class YandexGeocoder:
    """Yandex Geocoder HTTP API."""

    name = "yandex"
    try_all_variants = True

    def __init__(self, api_key: str = YANDEX_GEOCODING_API_KEY,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.http = session or requests.Session()

    def lookup(self, query: str) -> Optional[Coordinates]:
        params = {"format": "json", "geocode": query}
        if self.api_key:
            params["apikey"] = self.api_key
        try:
            response = self.http.get(
                YANDEX_GEOCODER_URL, params=params, timeout=HTTP_TIMEOUT
            )
            response.raise_for_status()
            return parse_yandex_coordinates(response.json())
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Yandex geocoding failed for '{query}': {e}")
            return None


class NominatimGeocoder:
    """OpenStreetMap Nominatim search API."""

    name = "nominatim"
    try_all_variants = False

    def __init__(self, user_agent: str = GEOCODER_USER_AGENT,
                 session: Optional[requests.Session] = None):
        self.user_agent = user_agent
        self.http = session or requests.Session()

    def lookup(self, query: str) -> Optional[Coordinates]:
        params = {
            "format": "json",
            "addressdetails": 1,
            "limit": 1,
            "q": query,
        }
        try:
            response = self.http.get(
                NOMINATIM_URL,
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=HTTP_TIMEOUT
            )
            response.raise_for_status()
            results = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Nominatim geocoding failed for '{query}': {e}")
            return None

        if isinstance(results, list) and results and isinstance(results[0], dict):
            return Coordinates.parse(results[0].get("lat"), results[0].get("lon"))
        return None


class Geocoder:
    """
    Resolve free-text addresses through an ordered chain of providers.

    Providers with try_all_variants are queried with every address
    variant; the others only with the first one. The first hit wins.
    """

    def __init__(self, providers: Optional[list[GeocodingProvider]] = None):
        if providers is None:
            providers = [YandexGeocoder(), NominatimGeocoder()]
        self.providers = providers

    def geocode(self, address: str) -> Optional[Coordinates]:
        """
        Args:
            address: What the user typed (e.g., "Москва, Тверская, 1")

        Returns:
            Coordinates, or None when no provider found the address
        """
        if not address or not address.strip():
            return None

        variants = build_address_variants(address)

        for provider in self.providers:
            queries = variants if provider.try_all_variants else variants[:1]
            for query in queries:
                try:
                    coords = provider.lookup(query)
                except Exception as e:
                    logger.error(f"Geocoder {provider.name} crashed on '{query}': {e}")
                    coords = None
                if coords:
                    logger.info(
                        f"Geocoded '{address}' via {provider.name} "
                        f"('{query}'): {coords.latitude}, {coords.longitude}"
                    )
                    return coords

        logger.info(f"Could not geocode '{address}'")
        return None
