# utils.py
import logging
from datetime import datetime, timezone
from typing import Optional
import pytz

def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)

def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(timezone.utc)

def compact_timestamp(value: datetime) -> str:
    """Format a timestamp as YYYYmmddTHHMMSS in UTC, as the WMS backend expects"""
    return ensure_utc(value).strftime('%Y%m%dT%H%M%S')

def parse_iso_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the NWS API"""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        logging.error(f"Error parsing timestamp {value!r}")
        return None

def format_local_time(value: Optional[datetime], tz_name: str) -> Optional[str]:
    """Render a timestamp as a local clock time in the given time zone"""
    if value is None:
        return None
    try:
        local_tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logging.error(f"Unknown display time zone {tz_name!r}, using UTC")
        local_tz = pytz.utc
    return ensure_utc(value).astimezone(local_tz).strftime('%I:%M:%S %p').lstrip('0')

def format_frame_offset(position: float, interval_minutes: int = 5) -> str:
    """Label a frame position as HH:MM of elapsed sequence time"""
    minutes = int(position * interval_minutes)
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"
