from typing import Optional
from PySide6.QtCore import QObject, QTimer, QUrl, Signal
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkRequest, QNetworkReply
from biosync.utils import parse_pulse_payload
from biosync.config import UPDATE_INTERVAL, SENSOR_TIMEOUT


class PulseSensorClient(QObject):
    """
    Poll a pulse sensor that serves its heart rate over HTTP.

    The sensor answers a GET on its root URL with
    ``{"pulse_rate_bpm": <int>}``, a moving average over its last five
    beats. Only one request is in flight at a time.
    """

    pulse_update = Signal(int)
    status_update = Signal(str)
    connection_update = Signal(bool)

    def __init__(self, interval: int = UPDATE_INTERVAL):
        super().__init__()
        self.url: Optional[QUrl] = None
        self.reply: Optional[QNetworkReply] = None
        self.network = QNetworkAccessManager()
        self.timer = QTimer()
        self.timer.setInterval(interval)
        self.timer.timeout.connect(self._request_pulse)

    def connect_client(self, url: str):
        if self.url is not None:
            msg = (
                f"Currently connected to sensor at {self.url.toString()}."
                " Please disconnect before (re-)connecting to (another) sensor."
            )
            self.status_update.emit(msg)
            return
        self.url = QUrl(url)
        self.status_update.emit(f"Connecting to sensor at {self.url.toString()}.")
        self.timer.start()
        self.connection_update.emit(True)
        self._request_pulse()

    def disconnect_client(self):
        if self.url is None:
            return
        self.status_update.emit(f"Disconnecting from sensor at {self.url.toString()}.")
        self.timer.stop()
        if self.reply is not None:
            self.reply.abort()
        self.url = None
        self.connection_update.emit(False)

    def _request_pulse(self):
        if self.url is None or self.reply is not None:
            return
        request = QNetworkRequest(self.url)
        request.setTransferTimeout(SENSOR_TIMEOUT)
        self.reply = self.network.get(request)
        self.reply.finished.connect(self._data_handler)

    def _data_handler(self):
        reply, self.reply = self.reply, None
        if reply is None:
            return
        try:
            if reply.error() == QNetworkReply.OperationCanceledError:
                return
            if reply.error() != QNetworkReply.NoError:
                self.status_update.emit(f"Couldn't reach sensor: {reply.errorString()}")
                return
            pulse_rate = parse_pulse_payload(reply.readAll().data())
            if pulse_rate is None:
                self.status_update.emit("Sensor sent an invalid reply.")
                return
            self.pulse_update.emit(pulse_rate)
        finally:
            reply.deleteLater()
