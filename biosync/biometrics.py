import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from biosync.utils import clamp
from biosync.config import (
    BASE_HEART_RATE,
    HEART_RATE_VARIATION,
    HEART_RATE_PERIOD,
    HEART_RATE_JITTER,
    VIDEO_RAMP_START,
    VIDEO_RAMP_DURATION,
    VIDEO_RAMP_GAIN,
    VIDEO_HEART_RATE_VARIATION,
    VIDEO_HEART_RATE_PERIOD,
    MIN_HEART_RATE,
    MAX_HEART_RATE,
    BASE_BREATHING_RATE,
    BREATHING_VARIATION,
    BREATHING_PERIOD,
    VIDEO_BREATHING_VARIATION,
    VIDEO_BREATHING_PERIOD,
    BREATHING_JITTER,
    INHALE_MAX,
    EXHALE_MIN,
    EXCURSION_STEPS,
    NORMAL_HEART_RATE,
    HP_GAIN,
    HP_LOSS_HIGH,
    HP_LOSS_LOW,
    HP_NOISE,
)


class ExcursionKind(Enum):
    NONE = "none"
    INHALE = "inhale"
    EXHALE = "exhale"


EXCURSION_TARGETS: dict[ExcursionKind, int] = {
    ExcursionKind.INHALE: INHALE_MAX,
    ExcursionKind.EXHALE: EXHALE_MIN,
}


@dataclass(frozen=True)
class Excursion:
    """Scripted deviation of the breathing rate towards a bound.

    A single value for both directions, so that a big inhale and a big
    exhale can never be active at the same time.
    """

    kind: ExcursionKind = ExcursionKind.NONE
    step: int = 0

    @classmethod
    def idle(cls) -> "Excursion":
        return cls()

    @classmethod
    def begin(cls, kind: ExcursionKind) -> "Excursion":
        return cls(kind, 0)

    @property
    def active(self) -> bool:
        return self.kind is not ExcursionKind.NONE


def compute_heart_rate(
    wall_clock_ms: float,
    video_position: Optional[float] = None,
    rng=random,
) -> int:
    heart_rate = BASE_HEART_RATE + math.sin(
        wall_clock_ms / HEART_RATE_PERIOD
    ) * HEART_RATE_VARIATION
    if video_position is not None:
        ramp = max(video_position - VIDEO_RAMP_START, 0) / VIDEO_RAMP_DURATION
        heart_rate += min(ramp, 1) * VIDEO_RAMP_GAIN
        heart_rate += (
            math.sin(video_position / VIDEO_HEART_RATE_PERIOD)
            * VIDEO_HEART_RATE_VARIATION
        )
    heart_rate += rng.uniform(-HEART_RATE_JITTER, HEART_RATE_JITTER)

    return clamp(round(heart_rate), MIN_HEART_RATE, MAX_HEART_RATE)


def compute_breathing_rate(
    wall_clock_ms: float,
    video_position: Optional[float],
    excursion: Excursion,
    limits: tuple[int, int],
    rng=random,
    steps: int = EXCURSION_STEPS,
) -> tuple[int, Excursion]:
    """Return breathing rate and the excursion state for the next call.

    An active excursion moves the rate linearly from the baseline to its
    target in `steps` calls and then returns to idle. Without excursion the
    rate oscillates around the baseline.
    """
    lower, upper = limits
    if excursion.active:
        step = min(excursion.step + 1, steps)
        target = EXCURSION_TARGETS[excursion.kind]
        breathing_rate = (
            BASE_BREATHING_RATE + (target - BASE_BREATHING_RATE) * step / steps
        )
        next_excursion = (
            Excursion.idle() if step >= steps else Excursion(excursion.kind, step)
        )
        return clamp(round(breathing_rate), lower, upper), next_excursion

    breathing_rate = BASE_BREATHING_RATE + math.sin(
        wall_clock_ms / BREATHING_PERIOD
    ) * BREATHING_VARIATION
    if video_position is not None:
        breathing_rate += (
            math.cos(video_position / VIDEO_BREATHING_PERIOD)
            * VIDEO_BREATHING_VARIATION
        )
    breathing_rate += rng.uniform(-BREATHING_JITTER, BREATHING_JITTER)

    return clamp(round(breathing_rate), lower, upper), excursion


def update_gauge(
    current_value: float,
    heart_rate: int,
    max_value: float,
    rng=random,
) -> float:
    low, high = NORMAL_HEART_RATE
    if heart_rate > high:
        value = current_value - HP_LOSS_HIGH
    elif heart_rate < low:
        value = current_value - HP_LOSS_LOW
    else:
        value = current_value + HP_GAIN
    value += rng.uniform(-HP_NOISE, HP_NOISE)

    return clamp(value, 0.0, max_value)


def hp_to_icons(hp: float, max_value: float, icons: int) -> int:
    """Number of filled heart icons, each icon standing for an equal share."""
    if hp <= 0:
        return 0
    return min(icons, math.ceil(hp / max_value * icons))
