from pathlib import Path
from typing import Optional
from PySide6.QtCore import QObject, QUrl, Signal, Slot
from PySide6.QtMultimedia import QMediaPlayer, QAudioOutput
from biosync.model import PlaybackState
from biosync.utils import valid_video_path


class VideoPlayer(QObject):
    """Plays the video that the biometrics are synchronized to.

    Every change in playback (state, position, duration) is published as a
    fresh PlaybackState snapshot.
    """

    playback_update = Signal(object)
    status_update = Signal(str)

    def __init__(self):
        super().__init__()
        self.player = QMediaPlayer()
        self.audio = QAudioOutput()
        self.player.setAudioOutput(self.audio)
        self.player.playbackStateChanged.connect(self._publish)
        self.player.positionChanged.connect(self._publish)
        self.player.durationChanged.connect(self._publish)
        self.player.errorOccurred.connect(self._catch_error)
        self.source: Optional[Path] = None

    def set_video_output(self, output):
        self.player.setVideoOutput(output)

    @property
    def playback(self) -> PlaybackState:
        return PlaybackState(
            playing=self.player.playbackState() == QMediaPlayer.PlayingState,
            position=max(self.player.position(), 0) / 1000,
            duration=max(self.player.duration(), 0) / 1000,
        )

    def load(self, path: str) -> bool:
        if not valid_video_path(path):
            self.status_update.emit(f"Not a video file: {path}.")
            return False
        self.release()
        self.source = Path(path)
        self.player.setSource(QUrl.fromLocalFile(str(self.source)))
        self.status_update.emit(f"Loaded {self.source.name}.")
        self._publish()
        return True

    def release(self):
        """Let go of the current video. Does nothing if none is loaded."""
        if self.source is None:
            return
        self.player.stop()
        self.player.setSource(QUrl())
        self.source = None
        self._publish()

    @Slot()
    def toggle_playback(self):
        if self.source is None:
            self.status_update.emit("Please open a video first.")
            return
        if self.player.playbackState() == QMediaPlayer.PlayingState:
            self.player.pause()
        else:
            self.player.play()

    @Slot(int)
    def seek(self, position: int):
        """Jump to `position` (msec)."""
        if self.source is None:
            return
        self.player.setPosition(position)

    def _publish(self, *_):
        self.playback_update.emit(self.playback)

    def _catch_error(self, error, error_string):
        if error == QMediaPlayer.NoError:
            return
        self.status_update.emit(f"Couldn't play video: {error_string}")
