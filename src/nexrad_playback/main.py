# main.py
import asyncio
import dataclasses
import logging
import sys
from typing import List, Optional
import requests
from .config import ViewerConfig
from .fetchers.alert_fetcher import NwsAlertFetcher
from .fetchers.http_client import JsonHttpClient
from .fetchers.radar_fetcher import RadarDataFetcher
from .models import Alert, AlertCategory, RadarFrame, ViewSelection
from .playback.playback_driver import FrameCallback, PlaybackDriver
from .processors.alert_classifier import DEFAULT_VISIBILITY, filter_visible
from .processors.frame_sequence_builder import FrameSequenceBuilder
from .utils import format_frame_offset


def setup_logging(log_file: str, level: int = logging.INFO) -> None:
    """Configure file and stdout logging for the viewer process"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )


class RadarViewerSession:
    """Headless viewer: owns the selection, alert filter and playback"""

    def __init__(self, config: Optional[ViewerConfig] = None,
                 session: Optional[requests.Session] = None,
                 alert_fetcher: Optional[NwsAlertFetcher] = None,
                 radar_fetcher: Optional[RadarDataFetcher] = None,
                 builder: Optional[FrameSequenceBuilder] = None,
                 driver: Optional[PlaybackDriver] = None):
        self.config = config or ViewerConfig()
        self.logger = logging.getLogger(__name__)

        # Initialize components
        client = JsonHttpClient(self.config, session=session)
        self.alert_fetcher = alert_fetcher or NwsAlertFetcher(self.config, client=client)
        self.radar_fetcher = radar_fetcher or RadarDataFetcher(self.config, client=client)
        self.builder = builder or FrameSequenceBuilder(self.config, fetcher=self.radar_fetcher)
        self.driver = driver or PlaybackDriver(self.config)

        self.selection = ViewSelection(self.config.station, self.config.radar_type, self.config.elevation)
        self.visibility = dict(DEFAULT_VISIBILITY)
        self.alerts: List[Alert] = []

        # One remote lookup at a time; the caches do not dedupe in-flight requests
        self._fetch_lock = asyncio.Lock()
        self._refresh_task: Optional[asyncio.Task] = None

        self.logger.info("RadarViewerSession initialized")

    def select(self, station: Optional[str] = None, radar_type: Optional[str] = None,
               elevation: Optional[str] = None) -> ViewSelection:
        """Return the current selection with the given fields replaced"""
        changes = {name: value for name, value in
                   (('station', station), ('radar_type', radar_type), ('elevation', elevation))
                   if value is not None}
        return dataclasses.replace(self.selection, **changes)

    def visible_alerts(self) -> List[Alert]:
        return filter_visible(self.alerts, self.visibility)

    async def load_alerts(self) -> List[Alert]:
        """Refresh the active alert list and return the visible subset"""
        async with self._fetch_lock:
            self.alerts = await asyncio.to_thread(self.alert_fetcher.fetch_active_alerts)
        self.logger.info(f"Loaded {len(self.alerts)} alerts, {len(self.visible_alerts())} visible")
        return self.visible_alerts()

    def set_alert_visibility(self, category: AlertCategory, visible: bool) -> List[Alert]:
        self.visibility[category] = visible
        return self.visible_alerts()

    async def initialize_playback(self, selection: Optional[ViewSelection] = None) -> bool:
        """Rebuild the frame sequence for a selection and load it for playback"""
        if selection is not None:
            self.selection = selection

        self.driver.stop()
        async with self._fetch_lock:
            frames = await asyncio.to_thread(self.builder.build_for, self.selection)

        self.driver.load(frames)
        return len(frames) > 0

    def play(self, on_frame: FrameCallback) -> bool:
        return self.driver.play(on_frame)

    def pause(self) -> None:
        self.driver.pause()

    def stop(self) -> None:
        self.driver.stop()

    def set_speed(self, multiplier: float) -> bool:
        return self.driver.set_speed(multiplier)

    def seek(self, index: int) -> Optional[RadarFrame]:
        return self.driver.jump_to_frame(index)

    def start_auto_refresh(self) -> None:
        """Reload alerts every ``alert_refresh_seconds`` until stopped"""
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.get_running_loop().create_task(self._auto_refresh())

    async def _auto_refresh(self) -> None:
        while True:
            await asyncio.sleep(self.config.alert_refresh_seconds)
            await self.load_alerts()

    async def stop_auto_refresh(self) -> None:
        task, self._refresh_task = self._refresh_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def log_frame(self, frame: Optional[RadarFrame], index: int, total: int) -> None:
        label = format_frame_offset(index, self.config.frame_interval_minutes)
        source = frame.source_url if frame is not None else 'no data'
        self.logger.info(f"Frame {index + 1}/{total} [{label}] {source}")

    async def run(self, duration: float) -> None:
        """Load alerts and radar history, then play for ``duration`` seconds"""
        visible = await self.load_alerts()
        for alert in visible:
            self.logger.info(f"{alert.severity.value.upper()}: {alert.title} (issued {alert.issued_local})")

        if not await self.initialize_playback():
            self.logger.warning(f"No radar frames available for {self.selection.station}")
            return

        self.start_auto_refresh()
        self.play(self.log_frame)
        try:
            await asyncio.sleep(duration)
        finally:
            self.stop()
            await self.stop_auto_refresh()


def main():
    """Entry point"""
    config = ViewerConfig.from_env()
    setup_logging(config.log_file)
    logger = logging.getLogger(__name__)

    problems = config.validate()
    if problems:
        for problem in problems:
            logger.error(problem)
        logger.error("Configuration validation failed")
        sys.exit(1)

    viewer = RadarViewerSession(config)
    try:
        asyncio.run(viewer.run(config.run_seconds))
    except KeyboardInterrupt:
        viewer.logger.info("Received interrupt signal, shutting down...")

if __name__ == "__main__":
    main()
