import math
from bisect import bisect_right
from typing import Any, Generic, NamedTuple, Optional, TypeVar
from biosync.biometrics import ExcursionKind


T = TypeVar("T")


class OneShotEvent(NamedTuple):
    position: float  # seconds into the video
    payload: Any


class EventTrack(Generic[T]):
    """Time-indexed events, each applied once when playback crosses it.

    The cursor counts the events whose trigger position is at or before the
    last evaluated position. It is always derived from the position alone,
    so playing forward and seeking (in either direction) go through the same
    code path.
    """

    def __init__(self, events=(), default: Optional[T] = None):
        self.events: list[OneShotEvent] = [OneShotEvent(*e) for e in events]
        positions = [e.position for e in self.events]
        if not all(math.isfinite(p) for p in positions):
            raise ValueError("Event positions must be finite numbers.")
        if any(p < 0 for p in positions):
            raise ValueError("Event positions must not be negative.")
        if positions != sorted(positions):
            raise ValueError("Events must be in ascending order of position.")
        self._positions: list[float] = positions
        self.default = default
        self.cursor: int = 0

    def __len__(self) -> int:
        return len(self.events)

    def cursor_at(self, position: float) -> int:
        return bisect_right(self._positions, position)

    def advance(self, position: float) -> list[T]:
        """Move to `position` and return the payloads that fire.

        Moving forward fires every event passed since the last call, in
        order. Moving backward fires nothing and makes the events that are
        now ahead of `position` fireable again.
        """
        cursor = self.cursor_at(position)
        fired = [e.payload for e in self.events[self.cursor : cursor]]
        self.cursor = cursor
        return fired

    def reset(self):
        self.cursor = 0

    @property
    def value(self) -> Optional[T]:
        """Payload of the latest event at or before the cursor."""
        if self.cursor == 0:
            return self.default
        return self.events[self.cursor - 1].payload

    @property
    def fired(self) -> list[OneShotEvent]:
        return self.events[: self.cursor]


class Script:
    """The one-shot events that accompany a video."""

    def __init__(self, hp=(), breath=(), messages=()):
        self.hp: EventTrack[float] = EventTrack(
            (p, float(v)) for p, v in hp
        )
        self.breath: EventTrack[ExcursionKind] = EventTrack(
            (p, ExcursionKind(k)) for p, k in breath
        )
        self.messages: EventTrack[str] = EventTrack(
            (p, str(m)) for p, m in messages
        )
        for _, kind in self.breath.events:
            if kind is ExcursionKind.NONE:
                raise ValueError("Breath events must be 'inhale' or 'exhale'.")

    @classmethod
    def from_dict(cls, data: dict) -> "Script":
        """Build a script from lists of [position, payload] pairs.

        Each list is sorted by position first.
        """
        unknown = set(data) - {"hp", "breath", "messages"}
        if unknown:
            raise ValueError(f"Unknown event tracks: {', '.join(sorted(unknown))}.")
        tracks = {}
        for name in ["hp", "breath", "messages"]:
            entries = data.get(name, [])
            if not isinstance(entries, list) or not all(
                isinstance(e, (list, tuple)) and len(e) == 2 for e in entries
            ):
                raise ValueError(f"Track '{name}' must be a list of [position, value] pairs.")
            tracks[name] = sorted(((float(p), v) for p, v in entries), key=lambda e: e[0])
        return cls(**tracks)

    def reset(self):
        self.hp.reset()
        self.breath.reset()
        self.messages.reset()
