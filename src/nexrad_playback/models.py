# models.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Optional, Tuple, TypeVar

K = TypeVar('K')
V = TypeVar('V')
T = TypeVar('T')


class AlertCategory(str, Enum):
    """Stable alert taxonomy used for display filtering"""
    TORNADO_WARNING = 'tornado-warning'
    TORNADO_WATCH = 'tornado-watch'
    SEVERE_THUNDERSTORM_WARNING = 'severe-thunderstorm-warning'
    SEVERE_THUNDERSTORM_WATCH = 'severe-thunderstorm-watch'
    FLASH_FLOOD_WARNING = 'flash-flood-warning'
    OTHER = 'other'


class AlertSeverity(str, Enum):
    WARNING = 'warning'
    WATCH = 'watch'


@dataclass
class CacheEntry(Generic[K, V]):
    """A stored value and the clock reading at which it was stored"""
    key: K
    value: V
    stored_at: float


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True)
class Alert:
    """Represents a classified NWS alert"""
    id: str
    category: AlertCategory
    severity: AlertSeverity
    title: str
    description: Optional[str]
    headline: Optional[str]
    location: Optional[GeoPoint]
    issued_at: Optional[datetime]
    expires_at: Optional[datetime]
    effective_at: Optional[datetime]
    area_description: Optional[str]
    raw_event_name: str
    issued_local: Optional[str] = None
    expires_local: Optional[str] = None


@dataclass(frozen=True)
class RadarFrame:
    """Represents a single timestamped radar snapshot"""
    timestamp: datetime
    payload: Any
    source_url: str


FrameSequence = Tuple[RadarFrame, ...]


@dataclass(frozen=True)
class ViewSelection:
    """Station, product and elevation the viewer is showing"""
    station: str
    radar_type: str = 'reflectivity'
    elevation: str = '0.5'


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """
    Outcome of a remote call: a value on success, a diagnostic otherwise.

    Failures are carried as data so callers can degrade without catching.
    """
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "FetchResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "FetchResult[T]":
        return cls(error=error)
