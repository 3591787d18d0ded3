from islandrun.core.macro_state import Stage
from islandrun.core.monitor import StallMonitor


def test_monitor_flags_stall_after_threshold_unchanged_executes():
    monitor = StallMonitor(stall_threshold=3)
    results = [monitor.record_execute(Stage.BANKER, "OPEN_BANK") for _ in range(4)]
    assert results == [False, False, False, True]
    assert monitor.stall_count(Stage.BANKER) == 1


def test_progress_resets_the_count():
    monitor = StallMonitor(stall_threshold=2)
    monitor.record_execute(Stage.BANKER, "OPEN_BANK")
    monitor.record_execute(Stage.BANKER, "OPEN_BANK")
    assert not monitor.record_execute(Stage.BANKER, "CLOSE_BANK")
    assert not monitor.record_execute(Stage.BANKER, "CLOSE_BANK")
    assert monitor.record_execute(Stage.BANKER, "CLOSE_BANK")


def test_zero_threshold_disables_monitor():
    monitor = StallMonitor(stall_threshold=0)
    assert not monitor.enabled
    assert not any(monitor.record_execute(Stage.BANKER, "OPEN_BANK") for _ in range(100))


def test_reset_forgets_stage():
    monitor = StallMonitor(stall_threshold=1)
    monitor.record_execute(Stage.BANKER, "OPEN_BANK")
    assert monitor.record_execute(Stage.BANKER, "OPEN_BANK")
    monitor.reset(Stage.BANKER)
    assert monitor.stall_count(Stage.BANKER) == 0
    assert not monitor.record_execute(Stage.BANKER, "OPEN_BANK")
