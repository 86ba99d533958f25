# processors/frame_sequence_builder.py
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional
from ..config import PRODUCT_CODES, ViewerConfig
from ..fetchers.radar_fetcher import RadarDataFetcher
from ..models import FrameSequence, RadarFrame, ViewSelection
from ..utils import compact_timestamp, utc_now

DEFAULT_PRODUCT_CODE = 'n0q'

FrameSource = Callable[[str, str, Any, datetime], Optional[Any]]


def build_radar_url(station_id: str, radar_type: str, elevation: Any, timestamp: datetime,
                    base_url: str = 'https://mesonet.agron.iastate.edu/cgi-bin/wms/nexrad/',
                    product_codes: Optional[dict] = None) -> str:
    """Build the WMS image URL for one frame; elevation is not part of the URL"""
    codes = product_codes if product_codes is not None else PRODUCT_CODES
    product = codes.get(radar_type, DEFAULT_PRODUCT_CODE)
    return f"{base_url}{product}.py?ts={compact_timestamp(timestamp)}&station={station_id}"


class FrameSequenceBuilder:
    """Builds the ordered list of historical radar frames used for playback"""

    def __init__(self, config: ViewerConfig,
                 fetcher: Optional[RadarDataFetcher] = None,
                 frame_source: Optional[FrameSource] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.config = config
        if frame_source is None:
            fetcher = fetcher or RadarDataFetcher(config)
            frame_source = fetcher.fetch_radar_frame
        self.frame_source = frame_source
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def frame_times(self, frame_count: int) -> List[datetime]:
        """Timestamps for the sequence, oldest first, ending at now"""
        now = self.clock()
        interval = timedelta(minutes=self.config.frame_interval_minutes)
        return [now - i * interval for i in range(frame_count - 1, -1, -1)]

    def build(self, station_id: str, radar_type: str = 'reflectivity', elevation: Any = '0.5',
              frame_count: Optional[int] = None) -> FrameSequence:
        """
        Fetch one frame per time slot, strictly in sequence.

        A slot whose fetch raises or yields no payload is logged and left out,
        so the result can be shorter than ``frame_count``. Remaining frames
        keep chronological order.
        """
        if frame_count is None:
            frame_count = self.config.max_frames

        frames = []
        dropped = 0

        for frame_time in self.frame_times(frame_count):
            try:
                payload = self.frame_source(station_id, radar_type, elevation, frame_time)
            except Exception as e:
                self.logger.warning(f"Error fetching frame at {frame_time.isoformat()}: {e}")
                dropped += 1
                continue

            if payload is None:
                self.logger.warning(f"No radar data for frame at {frame_time.isoformat()}")
                dropped += 1
                continue

            frames.append(RadarFrame(
                timestamp=frame_time,
                payload=payload,
                source_url=self.build_radar_url(station_id, radar_type, elevation, frame_time)
            ))

        self.logger.info(
            f"Built {len(frames)}/{frame_count} frames for {station_id} {radar_type} {elevation}"
            + (f" ({dropped} dropped)" if dropped else "")
        )
        return tuple(frames)

    def build_for(self, selection: ViewSelection, frame_count: Optional[int] = None) -> FrameSequence:
        return self.build(selection.station, selection.radar_type, selection.elevation, frame_count)

    def build_radar_url(self, station_id: str, radar_type: str, elevation: Any, timestamp: datetime) -> str:
        return build_radar_url(station_id, radar_type, elevation, timestamp,
                               base_url=self.config.wms_base_url,
                               product_codes=self.config.product_codes)
