from datetime import datetime
from pathlib import Path
from typing import Optional
from PySide6.QtWidgets import (
    QMainWindow,
    QPushButton,
    QHBoxLayout,
    QVBoxLayout,
    QWidget,
    QLabel,
    QComboBox,
    QSlider,
    QSpinBox,
    QLineEdit,
    QGroupBox,
    QFormLayout,
    QFileDialog,
    QProgressBar,
    QGridLayout,
)
from PySide6.QtCore import Qt, QThread, Signal, QObject, QMargins, QPointF, QEvent
from PySide6.QtGui import QColor
from PySide6.QtCharts import QChartView, QChart, QLineSeries, QValueAxis
from PySide6.QtMultimediaWidgets import QVideoWidget
from biosync.utils import valid_path, valid_sensor_url
from biosync.biometrics import ExcursionKind, hp_to_icons
from biosync.monitor import Monitor, IDLE, MONITORING
from biosync.player import VideoPlayer
from biosync.sensor import PulseSensorClient
from biosync.logger import Logger
from biosync.settings import SettingsStore, load_script
from biosync.config import (
    BREATHING_LIMITS,
    MIN_HEART_RATE,
    MAX_HEART_RATE,
    MIN_HISTORY_SIZE,
    MAX_HISTORY_SIZE,
    MIN_UPDATE_INTERVAL,
    MAX_UPDATE_INTERVAL,
    MAX_HP,
    HP_ICONS,
)

RED = QColor(231, 76, 60)
BLUE = QColor(52, 152, 219)


class XYSeriesWidget(QChartView):
    def __init__(self, line_color=BLUE):
        super().__init__()

        self.plot = QChart()
        self.plot.legend().setVisible(False)
        self.plot.setBackgroundRoundness(0)
        self.plot.setMargins(QMargins(0, 0, 0, 0))

        self.time_series = QLineSeries()
        self.plot.addSeries(self.time_series)
        pen = self.time_series.pen()
        pen.setWidth(3)
        pen.setColor(line_color)
        self.time_series.setPen(pen)
        self.time_series.setPointsVisible(True)

        self.x_axis = QValueAxis()
        self.x_axis.setLabelFormat("%i")
        self.plot.addAxis(self.x_axis, Qt.AlignBottom)
        self.time_series.attachAxis(self.x_axis)

        self.y_axis = QValueAxis()
        self.y_axis.setLabelFormat("%i")
        self.plot.addAxis(self.y_axis, Qt.AlignLeft)
        self.time_series.attachAxis(self.y_axis)

        self.setChart(self.plot)

    def set_window(self, n_samples: int):
        self.x_axis.setRange(-(n_samples - 1), 0)

    def update_series(self, y_values):
        """Plot the most recent value at 0, older ones at negative offsets."""
        n = len(y_values)
        self.time_series.replace(
            [QPointF(i - n + 1, y) for i, y in enumerate(y_values)]
        )


class ViewSignals(QObject):
    """Cannot be defined on View directly since Signal needs to be defined on
    object that inherits from QObject"""

    annotation = Signal(tuple)
    start_recording = Signal(str)


class View(QMainWindow):
    def __init__(
        self, model, monitor: Monitor, settings_store: Optional[SettingsStore] = None
    ):
        super().__init__()

        self.setWindowTitle("BioSync")

        self.settings_store = settings_store or SettingsStore()
        self.settings = self.settings_store.load()

        self.model = model
        self.model.heart_rate_update.connect(self.show_heart_rate)
        self.model.breathing_rate_update.connect(self.show_breathing_rate)
        self.model.history_update.connect(self.plot_history)
        self.model.hp_update.connect(self.show_hp)
        self.model.messages_update.connect(self.show_messages)
        self.model.status_update.connect(self.show_status)

        self.monitor = monitor
        self.monitor.state_update.connect(self.show_monitoring_state)
        self.monitor.status_update.connect(self.show_status)

        self.signals = ViewSignals()

        self.player = VideoPlayer()
        self.player.playback_update.connect(self.model.update_playback)
        self.player.playback_update.connect(self.show_playback)
        self.player.status_update.connect(self.show_status)

        self.sensor = PulseSensorClient(self.settings.update_interval)
        self.sensor.pulse_update.connect(self.model.update_pulse_rate)
        self.sensor.connection_update.connect(self.update_sensor_connection)
        self.sensor.status_update.connect(self.show_status)

        self.logger = Logger()
        self.logger.recording_status.connect(self.show_recording_status)
        self.logger.status_update.connect(self.show_status)
        self.logger_thread = QThread()
        self.logger_thread.finished.connect(self.logger.save_recording)
        self.signals.start_recording.connect(self.logger.start_recording)
        self.logger.moveToThread(self.logger_thread)

        self.model.heart_rate_update.connect(self.logger.write_to_file)
        self.model.breathing_rate_update.connect(self.logger.write_to_file)
        self.model.hp_update.connect(self.logger.write_to_file)
        self.model.messages_update.connect(self.logger.write_to_file)
        self.signals.annotation.connect(self.logger.write_to_file)
        self.player.playback_update.connect(self.logger.update_playback)

        self.video_widget = QVideoWidget()
        self.video_widget.setMinimumSize(320, 180)
        self.player.set_video_output(self.video_widget)

        self.open_video_button = QPushButton("Open")
        self.open_video_button.clicked.connect(self.get_video_path)
        self.play_button = QPushButton("Play")
        self.play_button.clicked.connect(self.player.toggle_playback)
        self.position_slider = QSlider(Qt.Horizontal)
        self.position_slider.sliderMoved.connect(self.player.seek)
        self.position_label = QLabel("0:00 / 0:00")

        self.heart_rate_widget = XYSeriesWidget(RED)
        self.heart_rate_widget.y_axis.setTitleText("Heart rate (bpm)")
        self.heart_rate_widget.y_axis.setRange(MIN_HEART_RATE, MAX_HEART_RATE)

        self.breathing_widget = XYSeriesWidget(BLUE)
        self.breathing_widget.y_axis.setTitleText("Breathing rate (rpm)")

        self.heart_rate_label = QLabel("-- bpm")
        self.breathing_label = QLabel("-- rpm")
        self.hp_label = QLabel()
        self.monitoring_label = QLabel(self.monitor.state)
        self.messages_label = QLabel()
        self.messages_label.setWordWrap(True)

        self.start_button = QPushButton("Start")
        self.start_button.clicked.connect(self.monitor.start)
        self.stop_button = QPushButton("Stop")
        self.stop_button.clicked.connect(self.monitor.stop)
        self.clear_button = QPushButton("Clear")
        self.clear_button.clicked.connect(self.monitor.clear_data)

        self.history_size = QSpinBox()
        self.history_size.setRange(MIN_HISTORY_SIZE, MAX_HISTORY_SIZE)
        self.history_size.setSuffix(" samples")
        self.history_size.editingFinished.connect(self.update_history_size)

        self.update_interval = QSpinBox()
        self.update_interval.setRange(MIN_UPDATE_INTERVAL, MAX_UPDATE_INTERVAL)
        self.update_interval.setSingleStep(100)
        self.update_interval.setSuffix(" msec")
        self.update_interval.editingFinished.connect(self.update_update_interval)

        self.breathing_limits = QComboBox()
        self.breathing_limits.addItems(list(BREATHING_LIMITS))
        self.breathing_limits.currentTextChanged.connect(self.update_breathing_limits)

        self.script_button = QPushButton("Load script")
        self.script_button.clicked.connect(self.get_script_path)
        self.inhale_button = QPushButton("Big inhale")
        self.inhale_button.clicked.connect(
            lambda: self.model.start_excursion(ExcursionKind.INHALE)
        )
        self.exhale_button = QPushButton("Big exhale")
        self.exhale_button.clicked.connect(
            lambda: self.model.start_excursion(ExcursionKind.EXHALE)
        )

        self.sensor_url = QLineEdit(self.settings.sensor_url)
        self.connect_button = QPushButton("Connect")
        self.connect_button.clicked.connect(self.connect_sensor)
        self.disconnect_button = QPushButton("Disconnect")
        self.disconnect_button.clicked.connect(self.sensor.disconnect_client)

        self.start_recording_button = QPushButton("Start")
        self.start_recording_button.clicked.connect(self.get_filepath)
        self.save_recording_button = QPushButton("Save")
        self.save_recording_button.clicked.connect(self.logger.save_recording)
        self.annotation = QComboBox()
        self.annotation.setEditable(True)
        self.annotation.setDuplicatesEnabled(False)
        self.annotation_button = QPushButton("Annotate")
        self.annotation_button.clicked.connect(self.emit_annotation)
        self.recording_statusbar = QProgressBar()
        self.recording_statusbar.setRange(0, 1)

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.statusbar = self.statusBar()

        self.vlayout0 = QVBoxLayout(self.central_widget)

        self.video_controls = QHBoxLayout()
        self.video_controls.addWidget(self.open_video_button)
        self.video_controls.addWidget(self.play_button)
        self.video_controls.addWidget(self.position_slider, stretch=1)
        self.video_controls.addWidget(self.position_label)
        self.video_layout = QVBoxLayout()
        self.video_layout.addWidget(self.video_widget, stretch=1)
        self.video_layout.addLayout(self.video_controls)

        self.values_config = QFormLayout()
        self.values_config.addRow("Heart rate:", self.heart_rate_label)
        self.values_config.addRow("Breathing:", self.breathing_label)
        self.values_config.addRow("HP:", self.hp_label)
        self.values_config.addRow("Status:", self.monitoring_label)
        self.values_config.addRow(self.messages_label)
        self.values_panel = QGroupBox("Current Values")
        self.values_panel.setLayout(self.values_config)

        self.hlayout0 = QHBoxLayout()
        self.hlayout0.addLayout(self.video_layout, stretch=70)
        self.hlayout0.addWidget(self.values_panel, stretch=30)
        self.vlayout0.addLayout(self.hlayout0, stretch=40)

        self.hlayout1 = QHBoxLayout()
        self.hlayout1.addWidget(self.heart_rate_widget)
        self.hlayout1.addWidget(self.breathing_widget)
        self.vlayout0.addLayout(self.hlayout1, stretch=40)

        self.hlayout2 = QHBoxLayout()

        self.monitoring_config = QGridLayout()
        self.monitoring_config.addWidget(self.start_button, 0, 0)
        self.monitoring_config.addWidget(self.stop_button, 0, 1)
        self.monitoring_config.addWidget(self.clear_button, 0, 2)
        # row, column, rowspan, columnspan
        self.monitoring_config.addWidget(self.history_size, 1, 0, 1, 2)
        self.monitoring_config.addWidget(self.update_interval, 1, 2)
        self.monitoring_config.addWidget(QLabel("Breathing range:"), 2, 0)
        self.monitoring_config.addWidget(self.breathing_limits, 2, 1, 1, 2)
        self.monitoring_panel = QGroupBox("Monitoring")
        self.monitoring_panel.setLayout(self.monitoring_config)
        self.hlayout2.addWidget(self.monitoring_panel, stretch=25)

        self.script_config = QVBoxLayout()
        self.script_config.addWidget(self.script_button)
        self.script_config.addWidget(self.inhale_button)
        self.script_config.addWidget(self.exhale_button)
        self.script_panel = QGroupBox("Script")
        self.script_panel.setLayout(self.script_config)
        self.hlayout2.addWidget(self.script_panel, stretch=25)

        self.sensor_config = QGridLayout()
        self.sensor_config.addWidget(self.sensor_url, 0, 0, 1, 2)
        self.sensor_config.addWidget(self.connect_button, 1, 0)
        self.sensor_config.addWidget(self.disconnect_button, 1, 1)
        self.sensor_panel = QGroupBox("Pulse Sensor")
        self.sensor_panel.setLayout(self.sensor_config)
        self.hlayout2.addWidget(self.sensor_panel, stretch=25)

        self.recording_config = QGridLayout()
        self.recording_config.addWidget(self.start_recording_button, 0, 0)
        self.recording_config.addWidget(self.save_recording_button, 0, 1)
        self.recording_config.addWidget(self.recording_statusbar, 0, 2)
        self.recording_config.addWidget(self.annotation, 1, 0, 1, 2)
        self.recording_config.addWidget(self.annotation_button, 1, 2)
        self.recording_panel = QGroupBox("Recording")
        self.recording_panel.setLayout(self.recording_config)
        self.hlayout2.addWidget(self.recording_panel, stretch=25)

        self.vlayout0.addLayout(self.hlayout2)

        self.apply_settings()
        self.logger_thread.start()

    def apply_settings(self):
        self.history_size.setValue(self.settings.history_size)
        self.update_interval.setValue(self.settings.update_interval)
        # Spin boxes clamp to the allowed ranges.
        self.monitor.update_config(
            max_data_points=self.history_size.value(),
            update_interval=self.update_interval.value(),
        )
        self.settings.history_size = self.model.history.max_len
        self.settings.update_interval = self.monitor.update_interval
        self.sensor.timer.setInterval(self.monitor.update_interval)
        self.set_chart_window(self.model.history.max_len)
        if self.settings.breathing_limits in BREATHING_LIMITS:
            self.breathing_limits.setCurrentText(self.settings.breathing_limits)
        self.update_breathing_limits(self.breathing_limits.currentText())
        if self.settings.script_path:
            self.load_script(self.settings.script_path)
        self.show_monitoring_state(self.monitor.state)
        self.model.emit_hp()

    def closeEvent(self, event):
        """Release the video, stop polling and shut down all threads."""
        print("Closing threads...")
        self.settings_store.save(self.settings)

        if self.monitor.state != IDLE:
            self.monitor.stop()
        self.player.release()
        self.sensor.disconnect_client()

        self.logger_thread.quit()
        self.logger_thread.wait()

    def changeEvent(self, event):
        if event.type() == QEvent.WindowStateChange:
            if self.isMinimized():
                self.monitor.suspend()
            else:
                self.monitor.resume(self.player.playback.playing)
        super().changeEvent(event)

    def get_video_path(self):
        file_path = QFileDialog.getOpenFileName(
            None,
            "Open video",
            "",
            "Videos (*.mp4 *.m4v *.webm *.mov *.mkv *.avi *.ogv)",
        )[0]
        if not file_path:  # user cancelled or closed file dialog
            return
        self.player.load(file_path)

    def get_script_path(self):
        file_path = QFileDialog.getOpenFileName(
            None, "Load script", "", "Scripts (*.json)"
        )[0]
        if not file_path:
            return
        self.load_script(file_path)

    def load_script(self, file_path: str):
        try:
            script = load_script(file_path)
        except ValueError as e:
            self.show_status(str(e))
            return
        self.model.update_script(script)
        self.settings.script_path = file_path
        self.show_status(f"Loaded script {Path(file_path).name}.")

    def get_filepath(self):
        current_time = datetime.now().strftime("%Y-%m-%d-%H-%M")
        default_file_name = f"BioSync_{current_time}.csv"
        # native file dialog not reliable on Windows (most likely COM issues)
        file_path = QFileDialog.getSaveFileName(
            None,
            "Create file",
            default_file_name,
            options=QFileDialog.DontUseNativeDialog,
        )[0]
        if not file_path:  # user cancelled or closed file dialog
            return
        if not valid_path(file_path):
            self.show_status("File path is invalid or exists already.")
            return
        self.signals.start_recording.emit(file_path)

    def connect_sensor(self):
        url = self.sensor_url.text().strip()
        if not valid_sensor_url(url):
            self.show_status(f"Invalid sensor address: {url}.")
            return
        self.settings.sensor_url = url
        self.sensor.connect_client(url)

    def update_sensor_connection(self, connected: bool):
        if not connected:
            self.model.clear_pulse_rate()

    def update_history_size(self):
        self.monitor.update_config(max_data_points=self.history_size.value())
        self.settings.history_size = self.model.history.max_len
        self.set_chart_window(self.model.history.max_len)

    def update_update_interval(self):
        self.monitor.update_config(update_interval=self.update_interval.value())
        self.settings.update_interval = self.monitor.update_interval
        self.sensor.timer.setInterval(self.monitor.update_interval)

    def update_breathing_limits(self, preset: str):
        self.model.update_breathing_limits(preset)
        self.settings.breathing_limits = preset
        self.breathing_widget.y_axis.setRange(*self.model.breathing_limits)

    def set_chart_window(self, n_samples: int):
        self.heart_rate_widget.set_window(n_samples)
        self.breathing_widget.set_window(n_samples)

    def plot_history(self, history):
        _, heart_rates, breathing_rates = history.value
        self.heart_rate_widget.update_series(heart_rates)
        self.breathing_widget.update_series(breathing_rates)

    def show_heart_rate(self, heart_rate):
        self.heart_rate_label.setText(f"{heart_rate.value} bpm")

    def show_breathing_rate(self, breathing_rate):
        self.breathing_label.setText(f"{breathing_rate.value} rpm")

    def show_hp(self, hp):
        icons = hp_to_icons(hp.value, MAX_HP, HP_ICONS)
        hearts = "♥" * icons + "♡" * (HP_ICONS - icons)
        self.hp_label.setText(f"{hearts}  {hp.value:.0f}")

    def show_messages(self, messages):
        self.messages_label.setText("\n".join(messages.value))

    def show_playback(self, playback):
        self.play_button.setText("Pause" if playback.playing else "Play")
        self.position_slider.setRange(0, int(playback.duration * 1000))
        if not self.position_slider.isSliderDown():
            self.position_slider.setValue(int(playback.position * 1000))
        self.position_label.setText(
            f"{format_seconds(playback.position)} / {format_seconds(playback.duration)}"
        )

    def show_monitoring_state(self, state: str):
        self.monitoring_label.setText(state)
        self.start_button.setEnabled(state != MONITORING)
        self.stop_button.setEnabled(state != IDLE)

    def show_recording_status(self, status):
        """Indicate busy state if `status` is 0."""
        self.recording_statusbar.setRange(0, status)

    def show_status(self, status, print_to_terminal=True):
        self.statusbar.showMessage(status, 0)
        if print_to_terminal:
            print(status)

    def emit_annotation(self):
        self.signals.annotation.emit(("Annotation", self.annotation.currentText()))


def format_seconds(seconds: float) -> str:
    minutes, seconds = divmod(int(seconds), 60)
    return f"{minutes}:{seconds:02d}"
