from typing import Optional
from PySide6.QtCore import QObject, QTimer, Signal, Slot
from biosync.model import Model
from biosync.config import (
    UPDATE_INTERVAL,
    MIN_UPDATE_INTERVAL,
    MAX_UPDATE_INTERVAL,
    MIN_HISTORY_SIZE,
    MAX_HISTORY_SIZE,
)


IDLE = "Idle"
MONITORING = "Monitoring"
PAUSED = "Paused"


class Monitor(QObject):
    """Drives the model with a recurring tick while monitoring.

    Two states, Idle and Monitoring. The timer only runs while monitoring,
    and it is stopped before it is started again, so ticks never overlap.
    "Paused" is reported while monitoring is suspended because the
    application is hidden.
    """

    state_update = Signal(str)
    status_update = Signal(str)

    def __init__(self, model: Model, update_interval: int = UPDATE_INTERVAL):
        super().__init__()
        self.model = model
        self.timer = QTimer()
        self.timer.setInterval(update_interval)
        self.timer.timeout.connect(self.tick)
        self.monitoring: bool = False
        self.suspended: bool = False

    @property
    def state(self) -> str:
        if self.monitoring:
            return MONITORING
        if self.suspended:
            return PAUSED
        return IDLE

    @property
    def update_interval(self) -> int:
        return self.timer.interval()

    @Slot()
    def start(self):
        if self.monitoring:
            self.status_update.emit("Already monitoring.")
            return
        self.suspended = False
        self.monitoring = True
        self.timer.start()
        self.state_update.emit(self.state)
        self.status_update.emit("Started monitoring.")

    @Slot()
    def stop(self):
        if not self.monitoring and not self.suspended:
            self.status_update.emit("Monitoring hasn't been started.")
            return
        self.timer.stop()
        self.monitoring = False
        self.suspended = False
        self.state_update.emit(self.state)
        self.status_update.emit("Stopped monitoring.")

    def suspend(self):
        """Stop ticking while the application isn't visible."""
        if not self.monitoring:
            return
        self.timer.stop()
        self.monitoring = False
        self.suspended = True
        self.state_update.emit(self.state)

    def resume(self, is_playing: bool):
        """Pick up monitoring after `suspend` if the video is still playing."""
        if not self.suspended:
            return
        self.suspended = False
        if not is_playing:
            self.state_update.emit(self.state)
            self.status_update.emit("Video isn't playing, monitoring stays stopped.")
            return
        self.monitoring = True
        self.timer.start()
        self.state_update.emit(self.state)

    def update_config(
        self,
        max_data_points: Optional[int] = None,
        update_interval: Optional[int] = None,
    ):
        """Apply each given setting on its own; invalid ones are reported
        and skipped."""
        if max_data_points is not None:
            if MIN_HISTORY_SIZE <= max_data_points <= MAX_HISTORY_SIZE:
                self.model.resize_history(max_data_points)
            else:
                self.status_update.emit(f"Invalid history size: {max_data_points}.")
        if update_interval is None:
            return
        if not MIN_UPDATE_INTERVAL <= update_interval <= MAX_UPDATE_INTERVAL:
            self.status_update.emit(f"Invalid update interval: {update_interval}.")
            return
        restart = self.timer.isActive()
        self.timer.stop()
        self.timer.setInterval(update_interval)
        if restart:
            self.timer.start()

    @Slot()
    def clear_data(self):
        self.model.clear_history()
        self.status_update.emit("Cleared data.")

    @Slot()
    def tick(self):
        try:
            self.model.tick()
        except Exception as e:
            # Skip this update, the next tick starts afresh.
            self.status_update.emit(f"Couldn't update biometrics: {e}")
