import json
import mimetypes
from collections import namedtuple
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse


NamedSignal = namedtuple("NamedSignal", "name value")


def clamp(value, lower, upper):
    return max(lower, min(upper, value))


def valid_path(path: str) -> bool:
    """Make sure that path is valid by OS standards and that a file doesn't
    exist on that path already. No builtin solution for this atm."""
    valid = False
    test_path = Path(path)
    try:
        test_path.touch(exist_ok=False)  # create file
        test_path.unlink()  # remove file (only called if file doesn't exist)
        valid = True
    except OSError:  # path exists or is invalid
        pass

    return valid


def valid_video_path(path: str) -> bool:
    """Accept existing files whose type is guessed as video/*."""
    if not Path(path).is_file():
        return False
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type is not None and mime_type.startswith("video/")


def valid_sensor_url(url: str) -> bool:
    parsed = urlparse(url.strip())
    return parsed.scheme in ["http", "https"] and bool(parsed.netloc)


def parse_pulse_payload(payload: bytes) -> Optional[int]:
    """Extract the averaged pulse rate from a sensor reply.

    The sensor answers with ``{"pulse_rate_bpm": <int>}``. Returns None if
    the payload is not of that shape. A rate of 0 means that the sensor
    hasn't detected any beats yet.
    """
    try:
        data = json.loads(payload)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    rate = data.get("pulse_rate_bpm")
    if isinstance(rate, bool) or not isinstance(rate, int) or rate < 0:
        return None
    return rate


def format_time_label(timestamp: Optional[datetime] = None) -> str:
    if timestamp is None:
        timestamp = datetime.now()
    return timestamp.strftime("%H:%M:%S")
