import math
import json
from random import randint
from PySide6.QtCore import QObject, Signal, QTimer
from biosync.utils import parse_pulse_payload
from biosync.config import UPDATE_INTERVAL


class MockPulseSensorClient(QObject):
    pulse_update = Signal(int)
    status_update = Signal(str)
    connection_update = Signal(bool)

    def __init__(self, interval: int = UPDATE_INTERVAL):
        super().__init__()
        self.url = None
        self.n_replies = 0
        self.timer = QTimer()
        self.timer.setInterval(interval)
        self.timer.timeout.connect(self.simulate_pulse)

    def connect_client(self, url):
        self.url = url
        self.status_update.emit(f"Connecting to sensor at {url}.")
        self.timer.start()
        self.connection_update.emit(True)

    def disconnect_client(self):
        if self.url is None:
            return
        self.status_update.emit("Disconnecting from sensor.")
        self.timer.stop()
        self.url = None
        self.connection_update.emit(False)

    def simulate_pulse(self):
        # Like the real sensor, report 0 until a few beats have been averaged,
        # then a slowly drifting pulse.
        self.n_replies += 1
        if self.n_replies < 3:
            self.pulse_update.emit(0)
            return
        pulse = round(75 + 10 * math.sin(self.n_replies / 10)) + randint(-2, 2)
        payload = json.dumps({"pulse_rate_bpm": pulse}).encode()
        self.pulse_update.emit(parse_pulse_payload(payload))


def main():
    """Mock sensor classes.

    Mock classes need to replace their mocked counterparts in namespace before
    the latter are imported elsewhere:
    https://stackoverflow.com/questions/3765222/monkey-patch-python-class
    """
    from biosync import sensor  # noqa

    sensor.PulseSensorClient = MockPulseSensorClient

    from biosync.app import main as mock_main  # noqa

    mock_main()


if __name__ == "__main__":
    main()
