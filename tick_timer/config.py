"""Timer configuration dataclass and delay clamping."""
from __future__ import annotations

import math
from dataclasses import dataclass

# Smallest delay (ms) the loop will ever schedule.
MIN_INTERVAL_MS = 1.0


@dataclass(frozen=True)
class TimerConfig:
    """Immutable construction settings for a Timer.

    Attributes:
        interval: Milliseconds between automatic ticks.
        auto_start: Start the timer as soon as it is constructed.
        min_interval: Lower bound (ms) applied to ``interval`` when scheduling.
    """

    interval: float = 1000.0
    auto_start: bool = False
    min_interval: float = MIN_INTERVAL_MS

    def __post_init__(self) -> None:
        if not math.isfinite(self.interval):
            raise ValueError("interval must be finite")
        if not self.min_interval > 0:
            raise ValueError("min_interval must be positive")


def clamp_delay(interval: float, min_interval: float = MIN_INTERVAL_MS) -> float:
    """Convert an interval in ms to a scheduler delay in seconds.

    Zero, negative and NaN intervals are raised to ``min_interval``.
    """
    if not interval >= min_interval:
        interval = min_interval
    return interval / 1000.0
