# playback/playback_driver.py
import asyncio
import logging
import math
from enum import Enum
from typing import Callable, Iterable, Optional
from ..config import ViewerConfig
from ..models import FrameSequence, RadarFrame
from .policies import SchedulingPolicy, make_policy

FrameCallback = Callable[[Optional[RadarFrame], int, int], None]


class PlayerState(str, Enum):
    STOPPED = 'stopped'
    PAUSED = 'paused'
    PLAYING = 'playing'


class PlaybackDriver:
    """
    Animates a frame sequence on an asyncio event loop.

    Each step delivers one frame to the callback given to ``play`` and then
    reschedules itself with ``loop.call_later``. Cancellation is cooperative:
    a step that fires after ``pause``/``stop`` (or after a newer ``play``)
    sees the playing flag or generation has changed and returns without
    delivering or rescheduling.
    """

    def __init__(self, config: Optional[ViewerConfig] = None,
                 policy: Optional[SchedulingPolicy] = None,
                 frames: Iterable[RadarFrame] = (),
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.config = config or ViewerConfig()
        self.policy = policy or make_policy(self.config)
        self.logger = logging.getLogger(__name__)

        self._frames: FrameSequence = tuple(frames)
        self._position = 0
        self._speed = 1.0
        self._playing = False
        self._state = PlayerState.STOPPED
        self._generation = 0
        self._handle: Optional[asyncio.TimerHandle] = None
        self._on_frame: Optional[FrameCallback] = None
        self._loop_override = loop
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def cursor(self) -> int:
        return int(self._position)

    @property
    def speed(self) -> float:
        return self._speed

    def load(self, frames: Iterable[RadarFrame]) -> int:
        """Replace the sequence wholesale and rewind; returns the new length"""
        self._frames = tuple(frames)
        self._position = 0
        if not self._frames and self._playing:
            self.logger.warning("Loaded an empty sequence, pausing playback")
            self.pause()
        return len(self._frames)

    def play(self, on_frame: FrameCallback) -> bool:
        """
        Start playback, delivering the current frame immediately.

        Returns False without doing anything if already playing or if there
        are no frames. Must be called while an event loop is running unless
        one was given to the constructor.
        """
        if self._playing or not self._frames:
            return False

        self._loop = self._loop_override or asyncio.get_running_loop()
        self._on_frame = on_frame
        self._playing = True
        self._state = PlayerState.PLAYING
        self._generation += 1

        self._step(self._generation)
        return True

    def _step(self, generation: int) -> None:
        if not self._playing or generation != self._generation:
            return

        self._handle = None
        delivery, self._position = self.policy.step(self._frames, self._position, self._speed)

        try:
            self._on_frame(*delivery)
        except Exception:
            self.logger.exception(f"Frame callback failed at index {delivery[1]}")

        # The callback may have paused or restarted playback
        if not self._playing or generation != self._generation:
            return

        self._handle = self._loop.call_later(self.policy.delay(self._speed), self._step, generation)

    def pause(self) -> None:
        """Stop advancing but keep the cursor"""
        self._playing = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._state == PlayerState.PLAYING:
            self._state = PlayerState.PAUSED

    def stop(self) -> None:
        """Stop advancing and rewind to the first frame"""
        self.pause()
        self._position = 0
        self._state = PlayerState.STOPPED

    def set_speed(self, multiplier: float) -> bool:
        """Set the speed used from the next scheduled step on"""
        try:
            value = float(multiplier)
        except (TypeError, ValueError):
            value = float('nan')

        if not math.isfinite(value) or value <= 0:
            self.logger.warning(f"Ignoring invalid playback speed {multiplier!r}")
            return False

        self._speed = value
        return True

    def jump_to_frame(self, index: int) -> Optional[RadarFrame]:
        """Move the cursor to ``index``; None (and no change) if out of range"""
        if isinstance(index, int) and 0 <= index < len(self._frames):
            self._position = index
            return self._frames[index]
        return None

    def get_current_frame(self) -> Optional[RadarFrame]:
        index = int(self._position)
        if 0 <= index < len(self._frames):
            return self._frames[index]
        return None

    def get_frame_count(self) -> int:
        return len(self._frames)
