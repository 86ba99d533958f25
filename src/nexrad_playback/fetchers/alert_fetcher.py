# fetchers/alert_fetcher.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
import requests
from ..caching.ttl_cache import TTLCache
from ..config import ViewerConfig
from ..exceptions import ParseError
from ..models import Alert, GeoPoint
from ..processors.alert_classifier import classify, severity
from ..utils import format_local_time, parse_iso_timestamp, utc_now
from .http_client import JsonHttpClient

ACTIVE_ALERTS_KEY = 'active'


class NwsAlertFetcher:
    """Retrieves and classifies active alerts from the NWS API"""

    def __init__(self, config: ViewerConfig,
                 client: Optional[JsonHttpClient] = None,
                 cache: Optional[TTLCache] = None,
                 session: Optional[requests.Session] = None):
        self.config = config
        self.client = client or JsonHttpClient(config, session=session)
        self.cache = cache if cache is not None else TTLCache(ttl=config.alert_cache_ttl_seconds)
        self.last_update: Optional[datetime] = None
        self.logger = logging.getLogger(__name__)

    def fetch_active_alerts(self) -> List[Alert]:
        """
        Return the active alert list, served from cache while it is fresh.

        Never raises. When the feed cannot be fetched or parsed, the last list
        that was successfully stored is returned, however old, or an empty
        list if there has never been one.
        """
        cached = self.cache.get(ACTIVE_ALERTS_KEY)
        if cached is not None:
            return list(cached)

        result = self.client.get_json(f"{self.config.alerts_base_url}alerts/active")
        if not result.ok:
            self.logger.error(f"Error fetching alerts: {result.error}")
            return self._last_known_good()

        try:
            alerts = self.parse_alerts(self._features(result.value, required=True))
        except ParseError as e:
            self.logger.error(f"Error parsing alerts: {e}")
            return self._last_known_good()

        self.cache.set(ACTIVE_ALERTS_KEY, alerts)
        self.last_update = utc_now()
        self.logger.info(f"Fetched {len(alerts)} active alerts")
        return list(alerts)

    def get_alerts_for_area(self, lat: float, lng: float) -> List[Alert]:
        """Fetch alerts for the forecast area containing a point (empty on failure)"""
        point = self.client.get_json(f"{self.config.alerts_base_url}points/{lat:.4f},{lng:.4f}")
        if not point.ok:
            self.logger.error(f"Error fetching area alerts: {point.error}")
            return []

        try:
            alerts_url = self._resolve_area_alerts_url(point.value)
        except ParseError as e:
            self.logger.error(f"Error resolving alert area for {lat},{lng}: {e}")
            return []

        result = self.client.get_json(alerts_url)
        if not result.ok:
            self.logger.error(f"Error fetching area alerts: {result.error}")
            return []

        try:
            return self.parse_alerts(self._features(result.value, required=False))
        except ParseError as e:
            self.logger.error(f"Error parsing area alerts: {e}")
            return []

    def invalidate(self) -> None:
        """Drop the cached alert list so the next fetch goes to the network"""
        self.cache.delete(ACTIVE_ALERTS_KEY)
        self.last_update = None

    def parse_alerts(self, features: List[Dict[str, Any]]) -> List[Alert]:
        """Map raw GeoJSON features into classified alerts"""
        return [self._parse_feature(feature) for feature in features]

    def _parse_feature(self, feature: Dict[str, Any]) -> Alert:
        try:
            props = feature['properties']
            event = props['event']
            alert_id = props.get('id') or feature.get('id')
            if not alert_id:
                raise ParseError("Alert feature has no id")

            issued_at = parse_iso_timestamp(props.get('sent'))
            expires_at = parse_iso_timestamp(props.get('expires'))

            return Alert(
                id=alert_id,
                category=classify(event),
                severity=severity(event),
                title=f"{event} - {props.get('areaDesc')}",
                description=props.get('description'),
                headline=props.get('headline'),
                location=self._representative_point(feature.get('geometry')),
                issued_at=issued_at,
                expires_at=expires_at,
                effective_at=parse_iso_timestamp(props.get('effective')),
                area_description=props.get('areaDesc'),
                raw_event_name=event,
                issued_local=format_local_time(issued_at, self.config.display_timezone),
                expires_local=format_local_time(expires_at, self.config.display_timezone)
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(f"Malformed alert feature: {e!r}")

    @staticmethod
    def _representative_point(geometry: Optional[Dict[str, Any]]) -> Optional[GeoPoint]:
        """First vertex of the first ring; not a centroid"""
        if not geometry:
            return None

        try:
            ring = geometry['coordinates'][0]
            if geometry.get('type') == 'MultiPolygon':
                ring = ring[0]
            lng, lat = ring[0][0], ring[0][1]
            return GeoPoint(lat=float(lat), lng=float(lng))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ParseError(f"Malformed alert geometry: {e!r}")

    @staticmethod
    def _features(payload: Any, required: bool) -> List[Dict[str, Any]]:
        if not isinstance(payload, dict):
            raise ParseError("Alert response is not an object")
        if required and 'features' not in payload:
            raise ParseError("Alert response has no features")
        features = payload.get('features') or []
        if not isinstance(features, list):
            raise ParseError("Alert features is not a list")
        return features

    def _resolve_area_alerts_url(self, payload: Any) -> str:
        """Extract the region alert feed URL from a points lookup"""
        props = payload.get('properties') if isinstance(payload, dict) else None
        if not props or not isinstance(props, dict):
            raise ParseError("Point response has no properties")

        forecast_url = props.get('forecastUrl')
        if forecast_url and isinstance(forecast_url, str):
            return forecast_url

        zone_url = props.get('forecastZone')
        if zone_url and isinstance(zone_url, str):
            zone_id = zone_url.rstrip('/').split('/')[-1]
            return f"{self.config.alerts_base_url}alerts/active/zone/{zone_id}"

        raise ParseError("Point response has no forecast area")

    def _last_known_good(self) -> List[Alert]:
        stale = self.cache.get_stale(ACTIVE_ALERTS_KEY)
        return list(stale) if stale is not None else []
