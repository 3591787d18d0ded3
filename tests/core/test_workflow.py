from enum import Enum, auto

import pytest

from islandrun.core.events import EventKind
from islandrun.core.macro_state import Stage
from islandrun.core.timing import GATHER, DelayPolicy
from islandrun.core.tutorial import TutorialWorkflow
from islandrun.core.workflow import InferenceRule, StageDefinition, StageJump, always
from islandrun.errors import ConfigurationError
from islandrun.world import ScriptedWorld, Tile


class Toy(Enum):
    START = auto()
    GATHER = auto()
    USE = auto()
    DONE = auto()


class FakeController:
    def __init__(self, stage=Stage.BANKER):
        self.stage = stage
        self.tick_count = 0
        self.advances = []
        self.events = []

    def advance(self, stage, reason=None):
        self.advances.append((stage, reason))
        self.stage = stage

    def record_tick(self):
        self.tick_count += 1
        return self.tick_count

    def is_complete(self, stage):
        return stage.index < self.stage.index

    def publish(self, event):
        self.events.append(event)


ROCK_ID = 77

RULES = (
    InferenceRule("done text", Toy.DONE, lambda wf: wf.text_has("all done")),
    InferenceRule("ore", Toy.USE, lambda wf: wf.has("Ore")),
    InferenceRule("pickaxe", Toy.GATHER, lambda wf: wf.has("Pickaxe")),
    InferenceRule("fallback", Toy.START, always),
)


def gather(wf):
    rock = wf.scene_object(ROCK_ID)
    if rock is None:
        return wf.wait()
    return wf.interact(rock, "Mine", GATHER)


def use(wf):
    if wf.text_has("used it"):
        wf.transition(Toy.DONE, reason="used")
    return wf.wait()


HANDLERS = {
    Toy.START: lambda wf: wf.wait(),
    Toy.GATHER: gather,
    Toy.USE: use,
}


def make_definition(**overrides):
    params = dict(
        stage=Stage.BANKER,
        substates=Toy,
        terminal=Toy.DONE,
        next_stage=Stage.PRAYER_INSTRUCTOR,
        rules=RULES,
        handlers=HANDLERS,
        flags=("made_it_myself",),
    )
    params.update(overrides)
    return StageDefinition(**params)


def make_workflow(world, controller=None):
    controller = controller or FakeController()
    return TutorialWorkflow(make_definition(), controller, world, DelayPolicy(seed=0)), controller


def make_world():
    world = ScriptedWorld(position=Tile(10, 10, 0))
    world.add_object(ROCK_ID, "Rock", Tile(11, 10, 0))
    return world


def test_definition_requires_handler_for_every_non_terminal_substate():
    with pytest.raises(ConfigurationError):
        make_definition(handlers={Toy.START: HANDLERS[Toy.START]})


def test_definition_requires_rules():
    with pytest.raises(ConfigurationError):
        make_definition(rules=())


def test_definition_rejects_duplicate_flags():
    with pytest.raises(ConfigurationError):
        make_definition(flags=("a", "a"))


def test_construction_does_not_query_world():
    world = make_world()
    workflow, _ = make_workflow(world)
    assert world.queries == 0
    assert workflow.substate is Toy.START


def test_inference_is_idempotent():
    world = make_world()
    world.give(1, "Pickaxe")
    workflow, _ = make_workflow(world)
    assert workflow.infer_substate() is Toy.GATHER
    assert workflow.infer_substate() is Toy.GATHER
    assert workflow.substate is Toy.START


def test_advanced_evidence_wins_over_early_evidence():
    world = make_world()
    world.give(1, "Pickaxe")
    world.give(2, "Ore")
    workflow, _ = make_workflow(world)
    for _ in range(5):
        workflow.execute()
        assert workflow.substate is Toy.USE


def test_execute_adopts_inference_and_publishes_event():
    world = make_world()
    world.give(1, "Pickaxe")
    workflow, controller = make_workflow(world)
    delay = workflow.execute()
    assert workflow.substate is Toy.GATHER
    assert world.commands == [("interact", ROCK_ID, "Mine")]
    assert GATHER.lower_ms <= delay <= GATHER.upper_ms
    inferred = controller.events[0]
    assert inferred.kind is EventKind.SUBSTATE_INFERRED
    assert (inferred.substate_from, inferred.substate_to, inferred.reason) == ("START", "GATHER", "pickaxe")


def test_missing_resource_routes_back():
    world = make_world()
    world.give(1, "Pickaxe")
    workflow, _ = make_workflow(world)
    workflow.substate = Toy.USE
    workflow.execute()
    assert workflow.substate is Toy.GATHER


def test_open_dialog_blocks_inference_until_resync_requested():
    world = make_world()
    world.give(1, "Pickaxe")
    world.scripted_dialog.show_message()
    workflow, _ = make_workflow(world)
    workflow.execute()
    assert workflow.substate is Toy.START
    workflow.request_resync()
    workflow.execute()
    assert workflow.substate is Toy.GATHER


def test_terminal_evidence_advances_in_a_single_execute():
    world = make_world()
    world.set_text("All done here!")
    workflow, controller = make_workflow(world)
    workflow.execute()
    assert controller.advances == [(Stage.PRAYER_INSTRUCTOR, "Banker complete")]


def test_handler_transition_to_terminal_advances_same_call():
    world = make_world()
    world.give(2, "Ore")
    world.set_text("You used it")
    workflow, controller = make_workflow(world)
    workflow.execute()
    assert workflow.last_substate is Toy.DONE
    assert workflow.substate is Toy.START
    assert [stage for stage, _ in controller.advances] == [Stage.PRAYER_INSTRUCTOR]
    kinds = [event.kind for event in controller.events]
    assert kinds == [EventKind.SUBSTATE_INFERRED, EventKind.SUBSTATE_ADVANCED]


def test_hand_off_rewinds_substate_and_flags():
    world = make_world()
    world.set_text("All done here!")
    workflow, controller = make_workflow(world)
    workflow.set_flag("made_it_myself")
    workflow.execute()
    assert workflow.substate is Toy.START
    assert workflow.flag("made_it_myself") is False

    # Re-entered behind an open dialog: no inference, no second hand-off.
    world.scripted_dialog.show_message()
    controller.stage = Stage.BANKER
    workflow.execute()
    assert [stage for stage, _ in controller.advances] == [Stage.PRAYER_INSTRUCTOR]
    assert workflow.last_substate is Toy.START


def test_jump_runs_before_inference():
    world = make_world()
    world.give(2, "Ore")
    definition = make_definition(jumps=(StageJump("teleported", Stage.COMBAT_INSTRUCTOR, lambda wf: True),))
    controller = FakeController()
    workflow = TutorialWorkflow(definition, controller, world, DelayPolicy(seed=0))
    workflow.execute()
    assert controller.advances == [(Stage.COMBAT_INSTRUCTOR, "teleported")]
    assert workflow.substate is Toy.START


def test_validate_reads_only_the_macro_state():
    world = make_world()
    workflow, controller = make_workflow(world)
    assert workflow.validate()
    controller.stage = Stage.MASTER_CHEF
    assert not workflow.validate()
    assert world.queries == 0


def test_flags_must_be_declared():
    workflow, _ = make_workflow(make_world())
    assert workflow.flag("made_it_myself") is False
    workflow.set_flag("made_it_myself")
    assert workflow.flag("made_it_myself") is True
    with pytest.raises(KeyError):
        workflow.set_flag("found_it_on_the_floor")
