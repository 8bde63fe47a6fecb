import os

# Charts and widgets need a platform plugin, even when nothing is shown.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402


class FixedRandom:
    """Stands in for `random` so that jitter and noise are predictable."""

    def __init__(self, fraction: float = 0.5):
        self.fraction = fraction  # 0 picks the lower bound, 1 the upper one

    def uniform(self, a, b):
        return a + (b - a) * self.fraction


@pytest.fixture
def no_jitter():
    return FixedRandom(0.5)


@pytest.fixture
def max_jitter():
    return FixedRandom(1.0)


@pytest.fixture
def min_jitter():
    return FixedRandom(0.0)
