# playback/policies.py
"""
Scheduling policies for the playback driver.

Both policies advance a position through a frame sequence, but they pace it
differently and are not interchangeable:

* ``TimedStepPolicy`` moves exactly one frame per step and waits
  ``base_delay / speed`` between steps. Speed changes the timing only.
* ``RenderLoopPolicy`` ticks at a fixed rate and moves the position by the
  speed multiplier itself, so fractional speeds accumulate across ticks. It
  wraps at a fixed assumed frame count, not at the sequence length.
"""
from typing import Optional, Sequence, Tuple

from ..config import ViewerConfig
from ..exceptions import ConfigurationError
from ..models import RadarFrame

# (frame, index, total) as handed to the frame callback
Delivery = Tuple[Optional[RadarFrame], int, int]


class SchedulingPolicy:
    """Decides which frame is delivered next and how long to wait after it"""
    name = 'base'

    def step(self, frames: Sequence[RadarFrame], position: float, speed: float) -> Tuple[Delivery, float]:
        raise NotImplementedError

    def delay(self, speed: float) -> float:
        raise NotImplementedError


class TimedStepPolicy(SchedulingPolicy):
    name = 'timed'

    def __init__(self, base_delay: float = 0.2):
        self.base_delay = base_delay

    def step(self, frames, position, speed):
        total = len(frames)
        index = int(position)
        if index >= total:
            index = 0

        next_index = index + 1
        if next_index >= total:
            next_index = 0

        return (frames[index], index, total), next_index

    def delay(self, speed):
        return self.base_delay / speed


class RenderLoopPolicy(SchedulingPolicy):
    name = 'render'

    def __init__(self, fps: float = 60.0, assumed_frame_count: int = 144):
        self.fps = fps
        self.assumed_frame_count = assumed_frame_count

    def step(self, frames, position, speed):
        position += speed
        # Reset, not modulo: overshoot past the end is discarded
        if position >= self.assumed_frame_count:
            position = 0

        index = int(position)
        frame = frames[index] if index < len(frames) else None
        return (frame, index, self.assumed_frame_count), position

    def delay(self, speed):
        return 1.0 / self.fps


def make_policy(config: ViewerConfig) -> SchedulingPolicy:
    """Create the scheduling policy named by the configuration"""
    if config.playback_policy == 'timed':
        return TimedStepPolicy(base_delay=config.base_frame_delay)
    if config.playback_policy == 'render':
        return RenderLoopPolicy(fps=config.render_fps,
                                assumed_frame_count=config.assumed_frame_count)
    raise ConfigurationError(f"Unknown playback policy: {config.playback_policy}")
