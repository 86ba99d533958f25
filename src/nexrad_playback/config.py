# config.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging
import os
from dotenv import load_dotenv

load_dotenv()

PLAYBACK_POLICIES = ("timed", "render")

NUMERIC_SETTINGS = (
    'alert_cache_ttl_seconds', 'alert_refresh_seconds', 'request_timeout', 'retry_attempts',
    'frame_interval_minutes', 'max_frames', 'base_frame_delay_ms', 'render_fps', 'run_seconds'
)

# Short codes used by the WMS backend
PRODUCT_CODES = {
    'reflectivity': 'n0q',
    'velocity': 'n0u',
    'spectrum-width': 'n0s',
    'differential-reflectivity': 'n0z',
    'correlation-coefficient': 'n0c'
}


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


def _env_number(name: str, default, cast) -> Optional[float]:
    """Read a numeric setting; a malformed value is logged and left as None for validate()"""
    raw = os.getenv(name)
    if raw is None:
        return cast(default)
    try:
        return cast(raw)
    except ValueError:
        logging.getLogger(__name__).error(f"Invalid value for {name}: {raw!r}")
        return None


def _env_int(name: str, default: int) -> Optional[int]:
    return _env_number(name, default, int)


def _env_float(name: str, default: float) -> Optional[float]:
    return _env_number(name, default, float)


@dataclass
class ViewerConfig:
    """Configuration for the radar playback and alert system"""
    # NWS API
    alerts_base_url: str = field(default_factory=lambda: _env('NWS_BASE_URL', 'https://api.weather.gov/'))
    user_agent: str = field(default_factory=lambda: _env('NWS_USER_AGENT', 'NexradPlayback/1.0 (contact: unknown)'))
    alert_cache_ttl_seconds: float = field(default_factory=lambda: _env_float('ALERT_CACHE_TTL_SECONDS', 300))
    alert_refresh_seconds: float = field(default_factory=lambda: _env_float('ALERT_REFRESH_SECONDS', 300))

    # Iowa Mesonet radar endpoints
    radar_base_url: str = field(default_factory=lambda: _env('RADAR_BASE_URL', 'https://mesonet.agron.iastate.edu/json/'))
    wms_base_url: str = field(default_factory=lambda: _env('WMS_BASE_URL', 'https://mesonet.agron.iastate.edu/cgi-bin/wms/nexrad/'))

    # HTTP
    request_timeout: float = field(default_factory=lambda: _env_float('REQUEST_TIMEOUT', 10))
    retry_attempts: int = field(default_factory=lambda: _env_int('RETRY_ATTEMPTS', 3))
    retry_wait_min: float = 1.0
    retry_wait_max: float = 8.0

    # Frame sequence
    frame_interval_minutes: int = field(default_factory=lambda: _env_int('FRAME_INTERVAL_MINUTES', 5))
    max_frames: int = field(default_factory=lambda: _env_int('MAX_FRAMES', 144))  # 12 hours at 5-minute intervals

    # Playback
    playback_policy: str = field(default_factory=lambda: _env('PLAYBACK_POLICY', 'timed'))
    base_frame_delay_ms: float = field(default_factory=lambda: _env_float('BASE_FRAME_DELAY_MS', 200))
    render_fps: float = field(default_factory=lambda: _env_float('RENDER_FPS', 60))
    assumed_frame_count: int = 144

    # Initial selection
    station: str = field(default_factory=lambda: _env('RADAR_STATION', 'KLOT'))
    radar_type: str = field(default_factory=lambda: _env('RADAR_TYPE', 'reflectivity'))
    elevation: str = field(default_factory=lambda: _env('RADAR_ELEVATION', '0.5'))

    # Display / logging
    display_timezone: str = field(default_factory=lambda: _env('DISPLAY_TIMEZONE', 'America/Chicago'))
    log_file: str = field(default_factory=lambda: _env('LOG_FILE', 'radar_viewer.log'))
    run_seconds: float = field(default_factory=lambda: _env_float('RUN_SECONDS', 60))

    product_codes: Dict[str, str] = None

    def __post_init__(self):
        if self.product_codes is None:
            self.product_codes = dict(PRODUCT_CODES)

    @classmethod
    def from_env(cls) -> "ViewerConfig":
        """Build a configuration from the current environment"""
        return cls()

    @property
    def base_frame_delay(self) -> float:
        """Per-frame delay of the timed policy, in seconds"""
        return self.base_frame_delay_ms / 1000.0

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)"""
        problems = []

        for name in ('alerts_base_url', 'radar_base_url', 'wms_base_url', 'user_agent', 'station'):
            if not getattr(self, name):
                problems.append(f"Missing required configuration: {name}")

        invalid = [name for name in NUMERIC_SETTINGS if getattr(self, name) is None]
        for name in invalid:
            problems.append(f"Invalid numeric configuration: {name}")
        if invalid:
            return problems

        if self.playback_policy not in PLAYBACK_POLICIES:
            problems.append(f"Unknown playback policy: {self.playback_policy}")
        if self.max_frames <= 0:
            problems.append("max_frames must be positive")
        if self.frame_interval_minutes <= 0:
            problems.append("frame_interval_minutes must be positive")
        if self.base_frame_delay_ms <= 0 or self.render_fps <= 0:
            problems.append("Playback timing values must be positive")
        if self.retry_attempts < 1:
            problems.append("retry_attempts must be at least 1")

        return problems
