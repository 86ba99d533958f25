"""
Shared fixtures for the playback and alert tests.

Nothing here touches the network or a real clock:
  * StubSession stands in for requests.Session and answers by URL.
  * FakeClock drives TTL expiry.
  * FakeLoop records call_later() so playback steps can be fired by hand.
"""

from datetime import datetime, timedelta, timezone

import pytest
import requests

from nexrad_playback.config import ViewerConfig
from nexrad_playback.models import Alert, RadarFrame
from nexrad_playback.processors.alert_classifier import classify, severity


NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


# ── HTTP ──────────────────────────────────────────────────────────────────────

class StubResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class StubSession:
    """Answers GETs from a url -> response table; values may be callables or exceptions"""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if url not in self.routes:
            raise requests.ConnectionError(f"no route for {url}")
        answer = self.routes[url]
        if callable(answer) and not isinstance(answer, StubResponse):
            answer = answer(params)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def calls_to(self, url):
        return [call for call in self.calls if call["url"] == url]


# ── Clocks and loops ──────────────────────────────────────────────────────────

class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeTimerHandle:
    def __init__(self, when, delay, callback, args):
        self.when = when
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Minimal stand-in for the call_later/time part of an asyncio loop"""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def time(self):
        return self.now

    def call_later(self, delay, callback, *args):
        handle = FakeTimerHandle(self.now + delay, delay, callback, args)
        self.handles.append(handle)
        return handle

    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def fire(self, handle):
        """Run a handle's callback even if it was cancelled (a late timer)"""
        self.handles.remove(handle)
        self.now = max(self.now, handle.when)
        handle.callback(*handle.args)

    def run_next(self):
        pending = sorted(self.pending(), key=lambda h: h.when)
        if not pending:
            return False
        self.fire(pending[0])
        return True

    def run_steps(self, count):
        for _ in range(count):
            if not self.run_next():
                break


# ── Factories ─────────────────────────────────────────────────────────────────

def make_frames(count, start=NOW):
    return tuple(
        RadarFrame(
            timestamp=start + timedelta(minutes=5 * i),
            payload={"n": i},
            source_url=f"https://example.test/frame/{i}",
        )
        for i in range(count)
    )


def make_alert(event, alert_id=None):
    return Alert(
        id=alert_id or event,
        category=classify(event),
        severity=severity(event),
        title=f"{event} - Cook, IL",
        description=None,
        headline=None,
        location=None,
        issued_at=None,
        expires_at=None,
        effective_at=None,
        area_description="Cook, IL",
        raw_event_name=event,
    )


def alert_feature(event, alert_id, ring=None, geometry_type="Polygon", **props):
    ring = ring or [[-87.9, 41.8], [-87.5, 41.8], [-87.5, 42.1], [-87.9, 41.8]]
    coordinates = [ring] if geometry_type == "Polygon" else [[ring]]
    properties = {
        "id": alert_id,
        "event": event,
        "areaDesc": "Cook, IL",
        "headline": f"{event} issued",
        "description": "Take cover.",
        "sent": "2024-05-01T12:00:00-05:00",
        "effective": "2024-05-01T12:00:00-05:00",
        "expires": "2024-05-01T13:00:00-05:00",
    }
    properties.update(props)
    return {
        "id": f"https://api.weather.gov/alerts/{alert_id}",
        "type": "Feature",
        "geometry": {"type": geometry_type, "coordinates": coordinates},
        "properties": properties,
    }


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture()
def config():
    return ViewerConfig(
        alerts_base_url="https://api.weather.test/",
        radar_base_url="https://radar.test/json/",
        wms_base_url="https://radar.test/wms/",
        user_agent="NexradPlaybackTests/1.0",
        retry_attempts=1,
        retry_wait_min=0,
        retry_wait_max=0,
        display_timezone="America/Chicago",
        playback_policy="timed",
        base_frame_delay_ms=200,
        render_fps=60,
        max_frames=144,
        frame_interval_minutes=5,
    )


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def fake_loop():
    return FakeLoop()
