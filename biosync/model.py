import random
import time
from dataclasses import dataclass
from typing import Optional
from PySide6.QtCore import QObject, Signal, Slot
from biosync.utils import NamedSignal, clamp, format_time_label
from biosync.history import History, Sample
from biosync.events import Script
from biosync.biometrics import (
    Excursion,
    ExcursionKind,
    compute_heart_rate,
    compute_breathing_rate,
    update_gauge,
)
from biosync.config import (
    HISTORY_SIZE,
    BREATHING_LIMITS,
    DEFAULT_BREATHING_LIMITS,
    EXCURSION_STEPS,
    MAX_HP,
)


@dataclass(frozen=True)
class PlaybackState:
    playing: bool = False
    position: float = 0.0  # seconds
    duration: float = 0.0  # seconds

    @property
    def loaded(self) -> bool:
        return self.duration > 0


class Model(QObject):
    heart_rate_update = Signal(NamedSignal)
    breathing_rate_update = Signal(NamedSignal)
    history_update = Signal(NamedSignal)
    hp_update = Signal(NamedSignal)
    messages_update = Signal(NamedSignal)
    status_update = Signal(str)

    def __init__(self, rng=random):
        super().__init__()
        self.rng = rng
        self.history = History(HISTORY_SIZE)
        self.playback = PlaybackState()
        self.script = Script()
        self.excursion = Excursion.idle()
        self.excursion_steps: int = EXCURSION_STEPS
        self.breathing_limits: tuple[int, int] = BREATHING_LIMITS[
            DEFAULT_BREATHING_LIMITS
        ]
        self.hp: float = MAX_HP
        self.heart_rate: Optional[int] = None
        self.breathing_rate: Optional[int] = None
        self.pulse_rate: Optional[int] = None  # live sensor, None if unavailable

    def tick(self, now_ms: Optional[float] = None, label: Optional[str] = None):
        """Compute one sample and publish it.

        Values are computed and stored before anything is emitted, so that an
        error halfway through doesn't leave the displays half updated.
        """
        if now_ms is None:
            now_ms = time.time() * 1000
        position = self.playback.position if self.playback.loaded else None

        if self.pulse_rate:
            heart_rate = self.pulse_rate
        else:
            heart_rate = compute_heart_rate(now_ms, position, self.rng)
        breathing_rate, self.excursion = compute_breathing_rate(
            now_ms,
            position,
            self.excursion,
            self.breathing_limits,
            self.rng,
            self.excursion_steps,
        )
        self.heart_rate = heart_rate
        self.breathing_rate = breathing_rate
        self.history.push_sample(
            Sample(heart_rate, breathing_rate, label or format_time_label())
        )
        self.hp = update_gauge(self.hp, heart_rate, MAX_HP, self.rng)

        self.heart_rate_update.emit(NamedSignal("HeartRate", heart_rate))
        self.breathing_rate_update.emit(NamedSignal("BreathingRate", breathing_rate))
        self.emit_history()
        self.emit_hp()

    def emit_history(self):
        self.history_update.emit(NamedSignal("History", self.history.snapshot()))

    def emit_hp(self):
        self.hp_update.emit(NamedSignal("Hp", self.hp))

    def emit_messages(self):
        self.messages_update.emit(
            NamedSignal("Messages", [e.payload for e in self.script.messages.fired])
        )

    @Slot(object)
    def update_playback(self, playback: PlaybackState):
        moved = playback.position != self.playback.position
        self.playback = playback
        if moved:
            self.apply_script(playback.position)

    def apply_script(self, position: float):
        hp_track = self.script.hp
        last_hp_cursor = hp_track.cursor
        hp_track.advance(position)
        if hp_track.cursor != last_hp_cursor and hp_track.cursor > 0:
            self.hp = clamp(hp_track.value, 0.0, MAX_HP)
            self.emit_hp()

        breaths = self.script.breath.advance(position)
        if breaths:
            self.start_excursion(breaths[-1])

        last_message_cursor = self.script.messages.cursor
        self.script.messages.advance(position)
        if self.script.messages.cursor != last_message_cursor:
            self.emit_messages()

    @Slot(object)
    def start_excursion(self, kind: ExcursionKind):
        self.excursion = Excursion.begin(kind)
        self.status_update.emit(f"Big {kind.value} started.")

    @Slot(object)
    def update_script(self, script: Script):
        self.script = script
        # Breaths that are already behind the playhead don't fire on load.
        script.breath.advance(self.playback.position)
        self.apply_script(self.playback.position)
        self.emit_messages()

    @Slot(int)
    def update_pulse_rate(self, pulse_rate: int):
        # A sensor reports 0 until it has detected beats.
        self.pulse_rate = pulse_rate or None

    def clear_pulse_rate(self):
        self.pulse_rate = None

    @Slot(str)
    def update_breathing_limits(self, preset: str):
        if preset not in BREATHING_LIMITS:
            self.status_update.emit(f"Unknown breathing range: {preset}.")
            return
        self.breathing_limits = BREATHING_LIMITS[preset]

    def resize_history(self, max_len: int):
        self.history.resize(max_len)
        self.emit_history()

    def clear_history(self):
        self.history.clear()
        self.emit_history()
