import pytest

pytest.importorskip("PySide6.QtMultimedia")

from biosync.player import VideoPlayer  # noqa: E402


@pytest.fixture
def player(qtbot):
    return VideoPlayer()


@pytest.fixture
def releases(player, monkeypatch):
    """Source that each call to `release` found loaded."""
    calls = []
    release = player.release

    def spy():
        calls.append(player.source)
        release()

    monkeypatch.setattr(player, "release", spy)
    return calls


@pytest.fixture
def video(tmp_path):
    def write(name):
        path = tmp_path / name
        path.write_bytes(b"\x00" * 64)
        return path

    return write


def test_release_without_video_does_nothing(player, qtbot):
    with qtbot.assertNotEmitted(player.playback_update):
        player.release()
        player.release()
    assert player.source is None
    assert player.player.source().isEmpty()


def test_load_rejects_non_video_and_keeps_current_source(player, qtbot, video, tmp_path):
    first = video("first.mp4")
    assert player.load(str(first))
    loaded = player.player.source()

    notes = tmp_path / "notes.txt"
    notes.write_text("not a video", encoding="utf-8")
    with qtbot.waitSignal(player.status_update):
        assert not player.load(str(notes))
    assert player.source == first
    assert player.player.source() == loaded


def test_loading_another_video_releases_the_previous_one_once(player, releases, video):
    first, second = video("first.mp4"), video("second.mp4")
    assert player.load(str(first))
    assert player.load(str(second))
    assert [r for r in releases if r is not None] == [first]
    assert player.source == second


def test_release_frees_the_video_once(player, qtbot, releases, video):
    first = video("first.mp4")
    player.load(str(first))
    with qtbot.waitSignal(player.playback_update) as blocker:
        player.release()
    assert not blocker.args[0].loaded
    player.release()
    assert [r for r in releases if r is not None] == [first]
    assert player.source is None
    assert player.player.source().isEmpty()


def test_toggle_playback_requires_a_video(player, qtbot):
    with qtbot.waitSignal(player.status_update) as blocker:
        player.toggle_playback()
    assert blocker.args == ["Please open a video first."]
