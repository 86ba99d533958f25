# processors/alert_classifier.py
"""
Maps raw NWS event names onto the display taxonomy and filters alert lists.

Category matching is case-insensitive, but severity looks for the literal,
capitalised word "Warning". "TORNADO WARNING" is therefore a tornado-warning
with severity "watch". Callers rely on this behaviour; do not normalise it.
"""
from typing import Dict, Iterable, List, Mapping

from ..models import Alert, AlertCategory, AlertSeverity

DEFAULT_VISIBILITY: Dict[AlertCategory, bool] = {
    AlertCategory.TORNADO_WARNING: True,
    AlertCategory.TORNADO_WATCH: True,
    AlertCategory.SEVERE_THUNDERSTORM_WARNING: True,
    AlertCategory.SEVERE_THUNDERSTORM_WATCH: True,
    AlertCategory.FLASH_FLOOD_WARNING: True,
}


def classify(raw_event_name: str) -> AlertCategory:
    """Categorize an alert by its event name (first match wins)"""
    event = raw_event_name.lower()

    if 'tornado' in event and 'warning' in event:
        return AlertCategory.TORNADO_WARNING
    if 'tornado' in event:
        return AlertCategory.TORNADO_WATCH
    if 'thunderstorm' in event and 'warning' in event:
        return AlertCategory.SEVERE_THUNDERSTORM_WARNING
    if 'thunderstorm' in event:
        return AlertCategory.SEVERE_THUNDERSTORM_WATCH
    if 'flood' in event:
        return AlertCategory.FLASH_FLOOD_WARNING

    return AlertCategory.OTHER


def severity(raw_event_name: str) -> AlertSeverity:
    """Determine severity level from the case-sensitive word 'Warning'"""
    return AlertSeverity.WARNING if 'Warning' in raw_event_name else AlertSeverity.WATCH


def filter_by_type(alerts: Iterable[Alert], category: AlertCategory) -> List[Alert]:
    return [alert for alert in alerts if alert.category == category]


def filter_by_severity(alerts: Iterable[Alert], level: AlertSeverity) -> List[Alert]:
    return [alert for alert in alerts if alert.severity == level]


def active_warnings(alerts: Iterable[Alert]) -> List[Alert]:
    return filter_by_severity(alerts, AlertSeverity.WARNING)


def active_watches(alerts: Iterable[Alert]) -> List[Alert]:
    return filter_by_severity(alerts, AlertSeverity.WATCH)


def filter_visible(alerts: Iterable[Alert], visibility: Mapping[AlertCategory, bool]) -> List[Alert]:
    """Keep alerts whose category is switched on; unlisted categories are hidden"""
    return [alert for alert in alerts if visibility.get(alert.category, False)]
