import pytest
from biosync.model import Model
from biosync.monitor import Monitor, IDLE, MONITORING, PAUSED


@pytest.fixture
def monitor(qtbot, no_jitter):
    monitor = Monitor(Model(rng=no_jitter), update_interval=100)
    yield monitor
    monitor.timer.stop()


def test_starts_idle(monitor):
    assert monitor.state == IDLE
    assert not monitor.timer.isActive()


def test_start_twice_keeps_single_timer(monitor, qtbot):
    with qtbot.waitSignal(monitor.state_update) as blocker:
        monitor.start()
    assert blocker.args == [MONITORING]
    timer = monitor.timer
    with qtbot.assertNotEmitted(monitor.state_update):
        monitor.start()
    assert monitor.timer is timer
    assert monitor.timer.isActive()
    assert monitor.state == MONITORING


def test_stop_twice_is_noop(monitor, qtbot):
    monitor.start()
    with qtbot.waitSignal(monitor.state_update) as blocker:
        monitor.stop()
    assert blocker.args == [IDLE]
    with qtbot.assertNotEmitted(monitor.state_update):
        monitor.stop()
    assert not monitor.timer.isActive()


def test_stop_when_idle_reports_status(monitor, qtbot):
    with qtbot.waitSignal(monitor.status_update) as blocker:
        monitor.stop()
    assert "hasn't been started" in blocker.args[0]


def test_timer_drives_ticks(monitor, qtbot):
    monitor.start()
    with qtbot.waitSignal(monitor.model.history_update, timeout=2000):
        pass
    assert len(monitor.model.history) >= 1


def test_stopped_monitor_does_not_tick(monitor, qtbot):
    monitor.start()
    monitor.stop()
    with qtbot.assertNotEmitted(monitor.model.history_update, wait=300):
        pass
    assert len(monitor.model.history) == 0


def test_tick_errors_are_contained(monitor, qtbot, monkeypatch):
    def broken_tick(*args, **kwargs):
        raise RuntimeError("sensor glitch")

    monkeypatch.setattr(monitor.model, "tick", broken_tick)
    monitor.start()
    with qtbot.waitSignal(monitor.status_update, timeout=2000) as blocker:
        pass
    assert "sensor glitch" in blocker.args[0]
    assert monitor.state == MONITORING
    assert monitor.timer.isActive()


def test_update_config_restarts_timer(monitor):
    monitor.start()
    monitor.update_config(max_data_points=10, update_interval=500)
    assert monitor.timer.isActive()
    assert monitor.update_interval == 500
    assert monitor.model.history.max_len == 10


def test_update_config_while_idle_keeps_timer_stopped(monitor):
    monitor.update_config(update_interval=2000)
    assert not monitor.timer.isActive()
    assert monitor.update_interval == 2000


@pytest.mark.parametrize(
    "config", [{"max_data_points": 1}, {"update_interval": 10}]
)
def test_update_config_rejects_invalid_values(monitor, qtbot, config):
    with qtbot.waitSignal(monitor.status_update):
        monitor.update_config(**config)
    assert monitor.model.history.max_len == 30
    assert monitor.update_interval == 100


def test_update_config_applies_interval_despite_invalid_history_size(monitor, qtbot):
    with qtbot.waitSignal(monitor.status_update):
        monitor.update_config(max_data_points=2, update_interval=500)
    assert monitor.model.history.max_len == 30
    assert monitor.update_interval == 500


def test_update_config_applies_history_size_despite_invalid_interval(monitor, qtbot):
    with qtbot.waitSignal(monitor.status_update):
        monitor.update_config(max_data_points=50, update_interval=10)
    assert monitor.model.history.max_len == 50
    assert monitor.update_interval == 100


def test_suspend_and_resume_while_playing(monitor):
    monitor.start()
    monitor.suspend()
    assert monitor.state == PAUSED
    assert not monitor.timer.isActive()
    monitor.resume(is_playing=True)
    assert monitor.state == MONITORING
    assert monitor.timer.isActive()


def test_resume_without_playback_stays_idle(monitor):
    monitor.start()
    monitor.suspend()
    monitor.resume(is_playing=False)
    assert monitor.state == IDLE
    assert not monitor.timer.isActive()


def test_suspend_when_idle_is_noop(monitor):
    monitor.suspend()
    monitor.resume(is_playing=True)
    assert monitor.state == IDLE


def test_stop_while_paused(monitor):
    monitor.start()
    monitor.suspend()
    monitor.stop()
    assert monitor.state == IDLE
    monitor.resume(is_playing=True)
    assert monitor.state == IDLE


def test_clear_data(monitor):
    monitor.model.tick(now_ms=0)
    monitor.clear_data()
    assert len(monitor.model.history) == 0
