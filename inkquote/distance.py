"""
Distance lookup for courier deliveries.

Geocodes addresses with OpenStreetMap Nominatim and measures the
great-circle distance from the warehouse. Lookups never raise: failures
come back as a DistanceResult carrying an error.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import requests

from inkquote.domain import Address
from inkquote.settings import get_settings

logger = logging.getLogger(__name__)

WAREHOUSE_ADDRESS = Address(
    street="3 Rue de la maîtrise",
    city="Nivelles",
    postal_code="1400",
    country="BE",
)

COUNTRIES: Dict[str, str] = {
    "BE": "Belgium",
    "FR": "France",
    "GB": "United Kingdom",
    "ES": "Spain",
    "NL": "Netherlands",
    "DE": "Germany",
    "CH": "Switzerland",
    "LU": "Luxembourg",
}

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class DistanceResult:
    distance_km: float
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def country_code(country: str) -> str:
    """Return the ISO code for a country name or code ("Belgium" -> "BE")."""
    if len(country) == 2 and country.isalpha():
        return country.upper()
    for code, name in COUNTRIES.items():
        if name.lower() == country.lower():
            return code
    return country.upper()


def format_address(address: Address) -> str:
    """Single-line address used as geocoder query."""
    return f"{address.street}, {address.postal_code} {address.city}, {country_code(address.country)}".strip()


def haversine_km(point1: Tuple[float, float], point2: Tuple[float, float]) -> float:
    """
    Great-circle distance between two (lat, lon) points, rounded to 0.1 km.

    Example:
        >>> haversine_km((50.0, 4.0), (50.0, 4.0))
        0.0
    """
    lat1, lon1 = map(math.radians, point1)
    lat2, lon2 = map(math.radians, point2)
    d_lat = lat2 - lat1
    d_lon = lon2 - lon1

    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 1)


class StaticDistanceProvider:
    """Returns the same distance for every address (tests, offline quoting)."""

    def __init__(self, distance_km: float, error: Optional[str] = None):
        self.result = DistanceResult(distance_km, error)

    def distance_to(self, address: Address) -> DistanceResult:
        return self.result


class NominatimDistanceProvider:
    """
    Straight-line distance from the warehouse using Nominatim geocoding.

    Args:
        base_url: Nominatim search endpoint (defaults to settings.GEOCODER_URL)
        timeout: Request timeout in seconds (defaults to settings.DISTANCE_TIMEOUT)
        origin: Warehouse address
        session: Optional requests session (reused connections, tests)
    """

    USER_AGENT = "Inkquote/1.0"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        origin: Address = WAREHOUSE_ADDRESS,
        session: Optional[requests.Session] = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.GEOCODER_URL
        self.timeout = timeout if timeout is not None else settings.DISTANCE_TIMEOUT
        self.origin = origin
        self.session = session or requests.Session()
        self._origin_coords: Optional[Tuple[float, float]] = None

    def geocode(self, address: Address) -> Optional[Tuple[float, float]]:
        """Return (lat, lon) for an address, or None if it cannot be found."""
        query = format_address(address)
        try:
            response = self.session.get(
                self.base_url,
                params={"format": "json", "q": query, "limit": 1},
                headers={"User-Agent": self.USER_AGENT},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Geocoding failed for '{query}': {e}")
            return None

        if not data:
            logger.warning(f"No geocoding match for '{query}'")
            return None

        try:
            return float(data[0]["lat"]), float(data[0]["lon"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected geocoder response for '{query}': {e}")
            return None

    def distance_to(self, address: Address) -> DistanceResult:
        if self._origin_coords is None:
            self._origin_coords = self.geocode(self.origin)
        if self._origin_coords is None:
            return DistanceResult(0.0, "Could not geocode the warehouse address")

        destination = self.geocode(address)
        if destination is None:
            return DistanceResult(0.0, "Could not geocode the delivery address")

        distance = haversine_km(self._origin_coords, destination)
        logger.info(f"Distance to {address.city}: {distance:.1f} km")
        return DistanceResult(distance)
