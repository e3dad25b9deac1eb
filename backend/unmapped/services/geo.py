from collections import OrderedDict
from typing import Optional, Protocol, Tuple

import httpx

from ..config import get_settings
from ..content import continent_for_country
from ..logger import get_logger
from ..models.game import LocationInfo

logger = get_logger("geo")


class GeoLookup(Protocol):
    """Resolves coordinates to a best-effort country and continent."""

    async def resolve(self, lat: float, lng: float) -> LocationInfo:
        ...


class ReverseGeocoder:
    """
    GeoLookup backed by a Nominatim-compatible reverse geocoding API.

    Only the country code is read from the response; the continent comes
    from the static country table. Any failure resolves to an empty
    ``LocationInfo`` so scoring never aborts on a lookup.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache_size: Optional[int] = None,
    ):
        settings = get_settings()
        self.api_url = api_url or settings.GEOCODER_URL
        self.timeout = timeout or settings.GEOCODER_TIMEOUT
        self.headers = {
            "User-Agent": user_agent or settings.GEOCODER_USER_AGENT,
            "Accept": "application/json",
        }
        self.transport = transport
        self.cache_size = cache_size or settings.GEOCODER_CACHE_SIZE
        self._cache: "OrderedDict[Tuple[float, float], LocationInfo]" = OrderedDict()

    async def resolve(self, lat: float, lng: float) -> LocationInfo:
        """
        Look up the country of a coordinate.

        Args:
            lat: Latitude in degrees
            lng: Longitude in degrees

        Returns:
            Country code and continent, both None when unknown
        """
        key = (lat, lng)
        if key in self._cache:
            self._cache.move_to_end(key)
            return self._cache[key]

        params = {"lat": lat, "lon": lng, "format": "jsonv2", "zoom": 3}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.api_url, params=params, headers=self.headers)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Reverse geocoding failed for %s,%s: %s", lat, lng, e)
            return LocationInfo()

        address = data.get("address") if isinstance(data, dict) else None
        country_code = address.get("country_code") if isinstance(address, dict) else None
        if not isinstance(country_code, str) or not country_code:
            return LocationInfo()

        country_code = country_code.upper()
        info = LocationInfo(country_code=country_code, continent=continent_for_country(country_code))
        self._remember(key, info)
        return info

    def _remember(self, key: Tuple[float, float], info: LocationInfo) -> None:
        self._cache[key] = info
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)

