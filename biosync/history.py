from collections import deque, namedtuple
from typing import Optional
from biosync.config import HISTORY_SIZE


Sample = namedtuple("Sample", "heart_rate breathing_rate label")


class History:
    """Sliding window over the most recent samples.

    Three parallel buffers (heart rate, breathing rate, time label) that
    always have the same length.
    """

    def __init__(self, max_len: int = HISTORY_SIZE):
        if max_len < 1:
            raise ValueError(f"History needs room for at least one sample, got {max_len}.")
        # Once a bounded length deque is full, when new items are added,
        # a corresponding number of items are discarded from the opposite end.
        self.heart_rates: deque[int] = deque(maxlen=max_len)
        self.breathing_rates: deque[int] = deque(maxlen=max_len)
        self.labels: deque[str] = deque(maxlen=max_len)

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def max_len(self) -> int:
        return self.labels.maxlen

    def push_sample(self, sample: Sample):
        self.heart_rates.append(sample.heart_rate)
        self.breathing_rates.append(sample.breathing_rate)
        self.labels.append(sample.label)

    def resize(self, max_len: int):
        """Change the window size, keeping the most recent samples."""
        if max_len < 1:
            raise ValueError(f"History needs room for at least one sample, got {max_len}.")
        self.heart_rates = deque(self.heart_rates, max_len)
        self.breathing_rates = deque(self.breathing_rates, max_len)
        self.labels = deque(self.labels, max_len)

    def clear(self):
        self.heart_rates.clear()
        self.breathing_rates.clear()
        self.labels.clear()

    def snapshot(self) -> tuple[list[str], list[int], list[int]]:
        return list(self.labels), list(self.heart_rates), list(self.breathing_rates)


def push_sample(history: History, sample: Sample, max_len: Optional[int] = None) -> History:
    if max_len is not None and max_len != history.max_len:
        history.resize(max_len)
    history.push_sample(sample)
    return history
