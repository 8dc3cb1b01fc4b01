"""
Клиент Mapbox Forward Geocoding.
Преобразует "location, country" в пару (longitude, latitude).
"""
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from marketplace.config import get_settings
from marketplace.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class MapboxGeocoder:
    """Геокодер на базе Mapbox Geocoding API"""

    def __init__(
        self,
        access_token: Optional[str],
        base_url: str = "https://api.mapbox.com/geocoding/v5/mapbox.places",
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)

    def close(self):
        self.client.close()

    def forward_geocode(self, query: str, limit: int = 1) -> List[Dict[str, Any]]:
        """Возвращает список features из ответа Mapbox"""
        if not self.access_token:
            raise ExternalServiceError("Geocoding is not configured")

        url = f"{self.base_url}/{quote(query, safe='')}.json"
        try:
            response = self.client.get(url, params={"access_token": self.access_token, "limit": limit})
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Geocoding HTTP error for '{query}': {e.response.status_code}")
            raise ExternalServiceError("Geocoding service unavailable") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Geocoding request failed for '{query}': {e}")
            raise ExternalServiceError("Geocoding service unavailable") from e

        return body.get("features") or []

    def locate(self, location: str, country: str) -> Tuple[float, float]:
        """Координаты первого совпадения; пустой ответ считается ошибкой"""
        query = f"{location}, {country}"
        features = self.forward_geocode(query, limit=1)
        if not features:
            logger.warning(f"No geocoding match for '{query}'")
            raise ExternalServiceError(f"Location '{query}' could not be found")

        longitude, latitude = features[0]["geometry"]["coordinates"][:2]
        return float(longitude), float(latitude)


@lru_cache()
def get_geocoder() -> MapboxGeocoder:
    settings = get_settings()
    return MapboxGeocoder(
        access_token=settings.map_token,
        base_url=settings.geocoding_url,
        timeout=settings.geocoding_timeout,
    )
