import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional, Union
from PySide6.QtCore import QStandardPaths
from biosync.events import Script
from biosync.config import (
    HISTORY_SIZE,
    MIN_HISTORY_SIZE,
    MAX_HISTORY_SIZE,
    UPDATE_INTERVAL,
    MIN_UPDATE_INTERVAL,
    MAX_UPDATE_INTERVAL,
    BREATHING_LIMITS,
    DEFAULT_BREATHING_LIMITS,
    SENSOR_URL,
)


@dataclass
class AppSettings:
    history_size: int = HISTORY_SIZE  # samples
    update_interval: int = UPDATE_INTERVAL  # msec
    breathing_limits: str = DEFAULT_BREATHING_LIMITS
    sensor_url: str = SENSOR_URL
    script_path: str = ""


class SettingsStore:
    def __init__(self, base: Optional[Union[str, Path]] = None):
        if base is None:
            base = QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)
        self.path = Path(base) / "settings.json"

    def load(self) -> AppSettings:
        if not self.path.exists():
            return AppSettings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return AppSettings()
        if not isinstance(data, dict):
            return AppSettings()

        s = AppSettings()
        for k, v in data.items():
            if hasattr(s, k) and isinstance(v, type(getattr(s, k))):
                setattr(s, k, v)
        return validated(s)

    def save(self, settings: AppSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")


def load_script(path: Union[str, Path]) -> Script:
    """Read one-shot events from a JSON file.

    Raises ValueError if the file can't be read or doesn't describe a script.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ValueError(f"Couldn't read script {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Script {path} must contain a JSON object.")
    try:
        return Script.from_dict(data)
    except TypeError as e:
        raise ValueError(f"Invalid script {path}: {e}") from e


def validated(settings: AppSettings) -> AppSettings:
    """Reset values that are out of range to their defaults."""
    defaults = AppSettings()
    if not MIN_HISTORY_SIZE <= settings.history_size <= MAX_HISTORY_SIZE:
        settings.history_size = defaults.history_size
    if not MIN_UPDATE_INTERVAL <= settings.update_interval <= MAX_UPDATE_INTERVAL:
        settings.update_interval = defaults.update_interval
    if settings.breathing_limits not in BREATHING_LIMITS:
        settings.breathing_limits = defaults.breathing_limits
    return settings
