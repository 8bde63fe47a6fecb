import csv
from collections import deque
from datetime import datetime
from pathlib import Path
from PySide6.QtCore import QObject, Signal, Slot
from biosync.model import PlaybackState
from biosync.utils import NamedSignal


HEADER = ["event", "value", "video_position", "timestamp"]


class Logger(QObject):
    """Writes every published value to CSV, stamped with the video position
    it belongs to."""

    recording_status = Signal(int)
    status_update = Signal(str)

    def __init__(self):
        super().__init__()
        self.file = None
        self.writer = None
        self.video_position: float = 0.0  # seconds

    @Slot(str)
    def start_recording(self, file_path: str):
        if self.file:
            self.status_update.emit(f"Already writing to a file at {self.file.name}.")
            return  # only write to one file at a time
        append = Path(file_path).is_file() and Path(file_path).stat().st_size > 0
        try:
            self.file = open(file_path, "a", newline="", encoding="utf-8")
        except OSError as e:
            self.status_update.emit(f"Couldn't record to {file_path}: {e.strerror}.")
            return
        self.writer = csv.writer(self.file)
        if not append:
            self.writer.writerow(HEADER)
        self.recording_status.emit(0)
        self.status_update.emit(f"Started recording to {self.file.name}.")

    @Slot()
    def save_recording(self):
        """Called when:
        1. User saves recording.
        2. User closes app while recording
        """
        if not self.file:
            return
        self.file.close()
        self.recording_status.emit(1)
        self.status_update.emit(f"Saved recording at {self.file.name}.")
        self.file = None
        self.writer = None

    @Slot(object)
    def update_playback(self, playback: PlaybackState):
        self.video_position = playback.position

    @Slot(object)
    def write_to_file(self, data: NamedSignal):
        if not self.file:
            return
        key, val = data
        if isinstance(val, (list, deque)):
            val = val[-1] if val else ""  # latest message only
        if isinstance(val, float):
            val = f"{val:.1f}"
        timestamp = datetime.now().isoformat()
        self.writer.writerow([key, val, f"{self.video_position:.3f}", timestamp])
