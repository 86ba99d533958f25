# fetchers/radar_fetcher.py
import logging
from datetime import datetime
from typing import Any, Optional
import requests
from ..caching.ttl_cache import TTLCache
from ..config import ViewerConfig
from ..utils import compact_timestamp
from .http_client import JsonHttpClient


class RadarDataFetcher:
    """Retrieves radar product payloads for a station and caches them"""

    def __init__(self, config: ViewerConfig,
                 client: Optional[JsonHttpClient] = None,
                 cache: Optional[TTLCache] = None,
                 session: Optional[requests.Session] = None):
        self.config = config
        self.client = client or JsonHttpClient(config, session=session)
        # Payloads for a given station/product/elevation do not change; no expiry
        self.cache = cache if cache is not None else TTLCache(ttl=None)
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def cache_key(station_id: str, radar_type: str, elevation: Any) -> str:
        return f"{station_id}_{radar_type}_{elevation}"

    def _endpoint(self) -> str:
        return f"{self.config.radar_base_url}radarserver.py"

    def _fetch_cached(self, key: str, params: dict) -> Optional[Any]:
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        result = self.client.get_json(self._endpoint(), params=params)
        if not result.ok or result.value is None:
            self.logger.error(f"Error fetching radar data for {key}: {result.error or 'empty response'}")
            return None

        self.cache.set(key, result.value)
        return result.value

    def fetch_radar_data(self, station_id: str, radar_type: str, elevation: Any) -> Optional[Any]:
        """Fetch radar data for a specific station (None on failure)"""
        key = self.cache_key(station_id, radar_type, elevation)
        return self._fetch_cached(key, {'station': station_id, 'type': radar_type})

    def fetch_radar_frame(self, station_id: str, radar_type: str, elevation: Any,
                          timestamp: datetime) -> Optional[Any]:
        """Fetch the radar payload valid at one point in time (None on failure)"""
        ts = compact_timestamp(timestamp)
        key = f"{self.cache_key(station_id, radar_type, elevation)}_{ts}"
        return self._fetch_cached(key, {'station': station_id, 'type': radar_type, 'ts': ts})

    def get_reflectivity_data(self, station_id: str, elevation: Any) -> Optional[Any]:
        """Get reflectivity data (base reflectivity)"""
        return self.fetch_radar_data(station_id, 'reflectivity', elevation)

    def get_velocity_data(self, station_id: str, elevation: Any) -> Optional[Any]:
        """Get velocity data (radial velocity)"""
        return self.fetch_radar_data(station_id, 'velocity', elevation)

    def get_spectrum_width_data(self, station_id: str, elevation: Any) -> Optional[Any]:
        return self.fetch_radar_data(station_id, 'spectrum-width', elevation)

    def get_differential_reflectivity_data(self, station_id: str, elevation: Any) -> Optional[Any]:
        return self.fetch_radar_data(station_id, 'differential-reflectivity', elevation)

    def get_correlation_coefficient_data(self, station_id: str, elevation: Any) -> Optional[Any]:
        return self.fetch_radar_data(station_id, 'correlation-coefficient', elevation)

    def clear_cache(self) -> None:
        """Empty the payload cache"""
        self.cache.clear()
        self.logger.info("Radar data cache cleared")
