import pytest
from biosync.events import EventTrack, OneShotEvent, Script
from biosync.biometrics import ExcursionKind


@pytest.fixture
def hp_track():
    return EventTrack([(5, 40), (15, 60), (28, 30)], default=100)


def test_values_follow_forward_sweep(hp_track):
    assert hp_track.value == 100
    expected = {0: 100, 4.9: 100, 5: 40, 15: 60, 28: 30, 40: 30}
    for position, value in expected.items():
        hp_track.advance(position)
        assert hp_track.value == value


def test_each_event_fires_once(hp_track):
    assert hp_track.advance(0) == []
    assert hp_track.advance(5) == [40]
    assert hp_track.advance(5) == []
    assert hp_track.advance(14.9) == []
    assert hp_track.advance(40) == [60, 30]
    assert hp_track.advance(41) == []


def test_seeking_backward_rewinds(hp_track):
    hp_track.advance(40)
    assert hp_track.advance(10) == []
    assert hp_track.value == 40
    assert hp_track.cursor == 1
    assert hp_track.advance(15) == [60]
    assert hp_track.advance(28) == [30]


def test_seeking_before_first_event_restores_default(hp_track):
    hp_track.advance(40)
    hp_track.advance(1)
    assert hp_track.value == 100
    assert hp_track.fired == []


def test_fired_lists_events_behind_the_playhead(hp_track):
    hp_track.advance(20)
    assert hp_track.fired == [OneShotEvent(5, 40), OneShotEvent(15, 60)]
    hp_track.reset()
    assert hp_track.fired == []


def test_events_must_be_ascending():
    with pytest.raises(ValueError):
        EventTrack([(15, 60), (5, 40)])
    with pytest.raises(ValueError):
        EventTrack([(-1, 60)])


@pytest.mark.parametrize("position", [float("nan"), float("inf"), float("-inf")])
def test_event_positions_must_be_finite(position):
    with pytest.raises(ValueError):
        EventTrack([(position, 40)])
    with pytest.raises(ValueError):
        EventTrack([(5, 60), (position, 40)])


def test_empty_track():
    track = EventTrack(default="nothing")
    assert track.advance(100) == []
    assert track.value == "nothing"


def test_script_from_dict_sorts_tracks():
    script = Script.from_dict(
        {
            "hp": [[28, 30], [5, 40], [15, 60]],
            "breath": [[12, "inhale"], [3, "exhale"]],
            "messages": [[20, "A friend has arrived"]],
        }
    )
    assert [e.position for e in script.hp.events] == [5, 15, 28]
    assert script.breath.advance(20) == [ExcursionKind.EXHALE, ExcursionKind.INHALE]
    assert script.messages.advance(20) == ["A friend has arrived"]


@pytest.mark.parametrize(
    "data",
    [
        {"breath": [[3, "yawn"]]},
        {"breath": [[3, "none"]]},
        {"hp": [[5]]},
        {"hp": {"5": 40}},
        {"cues": []},
        {"hp": [["soon", 40]]},
        {"hp": [["NaN", 40]]},
        {"messages": [[5, "start"], ["inf", "end"]]},
    ],
)
def test_script_from_dict_rejects_invalid_data(data):
    with pytest.raises(ValueError):
        Script.from_dict(data)


def test_script_reset():
    script = Script(hp=[(1, 50)], messages=[(2, "hi")])
    script.hp.advance(10)
    script.messages.advance(10)
    script.reset()
    assert script.hp.cursor == script.messages.cursor == 0
