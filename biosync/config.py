from typing import Final


UPDATE_INTERVAL: Final[int] = 1000  # msec
MIN_UPDATE_INTERVAL: Final[int] = 100  # msec
MAX_UPDATE_INTERVAL: Final[int] = 10_000  # msec
HISTORY_SIZE: Final[int] = 30  # samples
MIN_HISTORY_SIZE: Final[int] = 5  # samples
MAX_HISTORY_SIZE: Final[int] = 300  # samples

BASE_HEART_RATE: Final[int] = 72  # beats per minute
HEART_RATE_VARIATION: Final[float] = 15.0
HEART_RATE_PERIOD: Final[float] = 5000.0  # msec, divides wall-clock time
HEART_RATE_JITTER: Final[float] = 4.0
# Heart rate starts climbing once the video is past VIDEO_RAMP_START and
# reaches +VIDEO_RAMP_GAIN after another VIDEO_RAMP_DURATION seconds.
VIDEO_RAMP_START: Final[float] = 30.0  # seconds
VIDEO_RAMP_DURATION: Final[float] = 60.0  # seconds
VIDEO_RAMP_GAIN: Final[float] = 10.0
VIDEO_HEART_RATE_VARIATION: Final[float] = 5.0
VIDEO_HEART_RATE_PERIOD: Final[float] = 10.0  # seconds, divides video position
MIN_HEART_RATE: Final[int] = 50
MAX_HEART_RATE: Final[int] = 120

BASE_BREATHING_RATE: Final[int] = 16  # breaths per minute
BREATHING_VARIATION: Final[float] = 3.0
BREATHING_PERIOD: Final[float] = 8000.0  # msec, divides wall-clock time
VIDEO_BREATHING_VARIATION: Final[float] = 2.0
VIDEO_BREATHING_PERIOD: Final[float] = 15.0  # seconds, divides video position
BREATHING_JITTER: Final[float] = 1.0
INHALE_MAX: Final[int] = 28
EXHALE_MIN: Final[int] = 5
EXCURSION_STEPS: Final[int] = 3  # ticks

# Deployments disagree on the breathing range, hence presets.
BREATHING_LIMITS: Final[dict[str, tuple[int, int]]] = {
    "resting": (10, 25),
    "scripted": (0, 28),
    "wide": (0, 30),
}
DEFAULT_BREATHING_LIMITS: Final[str] = "wide"

MAX_HP: Final[float] = 100.0
HP_ICONS: Final[int] = 5
NORMAL_HEART_RATE: Final[tuple[int, int]] = (60, 100)
HP_GAIN: Final[float] = 2.0  # heart rate within NORMAL_HEART_RATE
HP_LOSS_HIGH: Final[float] = 0.5  # heart rate above NORMAL_HEART_RATE
HP_LOSS_LOW: Final[float] = 1.0  # heart rate below NORMAL_HEART_RATE
HP_NOISE: Final[float] = 0.5

SENSOR_URL: Final[str] = "http://172.20.10.10/"
SENSOR_TIMEOUT: Final[int] = 800  # msec, must stay below UPDATE_INTERVAL
