import pytest

from islandrun.config import RunnerConfig
from islandrun.core.events import EventKind
from islandrun.core.executor import TutorialExecutor
from islandrun.core.macro_state import Stage
from islandrun.stages.gielinor_guide import GUIDE_ID, GuideSubstate
from islandrun.world import ScriptedWorld, Tile


class ExplodingWorld(ScriptedWorld):
    """Every query except the dialog raises, like a client mid-crash."""

    def find_entity(self, kind, *, ids=(), names=()):
        raise RuntimeError("client disconnected")

    def ui_element(self, locator):
        raise RuntimeError("widget cache corrupt")

    def inventory_items(self):
        raise RuntimeError("inventory unavailable")

    def hint_arrow_npc(self):
        raise RuntimeError("hint arrow unavailable")


def substates(executor):
    return [workflow.substate for workflow in executor.workflows]


def test_construction_makes_no_world_calls(world):
    executor = TutorialExecutor(world)
    assert world.queries == 0
    assert world.commands == []
    assert executor.stage is Stage.GIELINOR_GUIDE
    assert executor.tick_count == 0


def test_at_most_one_workflow_validates_per_stage(world, make_executor):
    executor = make_executor(world)
    for stage in Stage:
        executor.advance(stage)
        valid = [workflow for workflow in executor.workflows if workflow.validate()]
        assert len(valid) == (0 if stage is Stage.COMPLETE else 1)
        if valid:
            assert valid[0].stage is stage


def test_idle_ticks_change_nothing(world, make_executor):
    executor = make_executor(world, stage="COMPLETE")
    before = substates(executor)
    delays = [executor.tick() for _ in range(1000)]
    assert set(delays) == {600}
    assert executor.stage is Stage.COMPLETE
    assert substates(executor) == before
    assert world.commands == []
    assert executor.total_ticks == 1000


def test_tick_executes_only_authoritative_workflow(world, make_executor):
    world.add_npc(GUIDE_ID, "Gielinor Guide", Tile(3101, 3100, 0))
    executor = make_executor(world)
    executor.tick()
    assert world.commands == [("interact", GUIDE_ID, "Talk-to")]
    assert executor.tick_count == 1
    assert executor.active_substate() is GuideSubstate.TALK_GUIDE_1


def test_resumed_run_advances_in_one_tick(world, make_executor):
    world.set_text("You can now proceed to the next area; moving on.")
    executor = make_executor(world)
    executor.tick()
    assert executor.stage is Stage.SURVIVAL_EXPERT
    assert executor.workflow_for(Stage.GIELINOR_GUIDE).last_substate is GuideSubstate.MOVE_ON
    assert executor.is_complete(Stage.GIELINOR_GUIDE)
    assert executor.tick_count == 0


def test_reentered_stage_does_not_replay_its_hand_off(world, make_executor):
    world.set_text("Moving on")
    executor = make_executor(world)
    executor.tick()
    assert executor.stage is Stage.SURVIVAL_EXPERT

    world.set_text("Open your settings with the spanner icon.")
    world.scripted_dialog.show_message()
    executor.advance(Stage.GIELINOR_GUIDE, reason="recovery")
    executor.tick()
    executor.tick()

    assert executor.stage is Stage.GIELINOR_GUIDE
    assert executor.active_substate() is GuideSubstate.TALK_GUIDE_1
    assert world.scripted_dialog.actions == [("continue",), ("continue",)]


def test_advance_to_current_stage_is_a_no_op(world, make_executor):
    executor = make_executor(world, stage="BANKER")
    executor.advance(Stage.BANKER, reason="again")
    assert executor.history() == []


def test_completion_survives_backward_jump(world, make_executor):
    executor = make_executor(world)
    executor.advance(Stage.BANKER)
    assert executor.is_complete(Stage.MASTER_CHEF)
    executor.advance(Stage.SURVIVAL_EXPERT, reason="recovery")
    assert executor.is_complete(Stage.GIELINOR_GUIDE)
    assert executor.is_complete(Stage.MASTER_CHEF)
    assert not executor.is_complete(Stage.BANKER)
    assert executor.stage is Stage.SURVIVAL_EXPERT


def test_advance_resets_tick_counter_and_emits_event(world, make_executor):
    seen = []
    executor = make_executor(world)
    executor.register_event_sink(seen.append)
    executor.tick()
    executor.tick()
    assert executor.tick_count == 2
    executor.advance(Stage.SURVIVAL_EXPERT, reason="manual")
    assert executor.tick_count == 0
    event = seen[-1]
    assert event.kind is EventKind.STAGE_ADVANCED
    assert (event.substate_from, event.substate_to, event.tick) == ("GIELINOR_GUIDE", "SURVIVAL_EXPERT", 2)
    assert executor.history()[-1] == event


def test_infrastructure_failures_degrade_to_waiting(make_executor, caplog):
    world = ExplodingWorld(position=Tile(3100, 3100, 0))
    executor = make_executor(world)
    with caplog.at_level("WARNING"):
        delays = [executor.tick() for _ in range(5)]
    assert all(delay > 0 for delay in delays)
    assert executor.stage is Stage.GIELINOR_GUIDE
    assert world.commands == []
    assert "treating as not found" in caplog.text


def test_stall_watchdog_forces_resync_through_dialog(world, make_executor):
    world.add_npc(GUIDE_ID, "Gielinor Guide", Tile(3101, 3100, 0))
    world.set_text("Moving on")
    world.scripted_dialog.show_message()
    executor = make_executor(world, stall_threshold=3)

    for _ in range(4):
        executor.tick()
    kinds = [event.kind for event in executor.history()]
    assert EventKind.STALLED in kinds
    assert executor.stage is Stage.GIELINOR_GUIDE

    executor.tick()
    assert executor.stage is Stage.SURVIVAL_EXPERT


def test_watchdog_disabled_by_zero_threshold(world, make_executor):
    world.scripted_dialog.show_message()
    world.set_text("Moving on")
    executor = make_executor(world, stall_threshold=0)
    for _ in range(50):
        executor.tick()
    assert executor.stage is Stage.GIELINOR_GUIDE
    assert all(event.kind is not EventKind.STALLED for event in executor.history())


def test_snapshot_reports_diagnostics(world, make_executor):
    executor = make_executor(world, stage="MASTER_CHEF")
    snapshot = executor.snapshot()
    assert snapshot["stage"] == "MASTER_CHEF"
    assert snapshot["workflow"] == "Master Chef"
    assert snapshot["substate"] == "WALK_TO_CHEF"
    assert snapshot["completed"]["SURVIVAL_EXPERT"] is True
    assert snapshot["completed"]["MASTER_CHEF"] is False
    assert "COMPLETE" not in snapshot["completed"]


def test_reset_keeps_workflows(world, make_executor):
    executor = make_executor(world)
    workflows = list(executor.workflows)
    executor.advance(Stage.BANKER)
    executor.reset(Stage.QUEST_GUIDE)
    assert executor.workflows == workflows
    assert executor.stage is Stage.QUEST_GUIDE
    assert not executor.is_complete(Stage.BANKER)
    assert executor.history() == []


def test_start_stage_overrides_config(world):
    executor = TutorialExecutor(world, config=RunnerConfig(start_stage="BANKER"), start_stage="prayer instructor")
    assert executor.stage is Stage.PRAYER_INSTRUCTOR


def test_idle_delay_comes_from_config(world, make_executor):
    executor = make_executor(world, stage="COMPLETE", idle_delay_ms=250)
    assert executor.tick() == 250


def test_unknown_start_stage_is_rejected(world):
    from islandrun.errors import ConfigurationError

    with pytest.raises(ConfigurationError):
        TutorialExecutor(world, start_stage="lumbridge")
