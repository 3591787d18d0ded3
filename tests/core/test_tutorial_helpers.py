from enum import Enum, auto

from islandrun.core.macro_state import Stage
from islandrun.core.timing import CLICK, DIALOG_CONTINUE, DIALOG_OPTION, TALK, DelayPolicy
from islandrun.core.tutorial import TutorialWorkflow
from islandrun.core.workflow import InferenceRule, StageDefinition, always
from islandrun.world import GuardedOracle, ScriptedWorld, Tile


class Step(Enum):
    ONLY = auto()
    DONE = auto()


class FakeController:
    stage = Stage.PRAYER_INSTRUCTOR
    tick_count = 0

    def advance(self, stage, reason=None):
        self.stage = stage

    def record_tick(self):
        return 0

    def is_complete(self, stage):
        return False

    def publish(self, event):
        pass


DEFINITION = StageDefinition(
    stage=Stage.PRAYER_INSTRUCTOR,
    substates=Step,
    terminal=Step.DONE,
    next_stage=Stage.MAGIC_INSTRUCTOR,
    rules=(InferenceRule("fallback", Step.ONLY, always),),
    handlers={Step.ONLY: lambda wf: wf.wait()},
)


def make_helper(world):
    return TutorialWorkflow(DEFINITION, FakeController(), GuardedOracle(world), DelayPolicy(seed=3))


def test_drive_dialog_answers_options_before_continuing():
    world = ScriptedWorld()
    world.scripted_dialog.show_options("Tell me more", "I'm ready to move on")
    world.scripted_dialog.continuable = True
    helper = make_helper(world)

    delay = helper.drive_dialog(prefer=("ready to move on",))

    assert world.scripted_dialog.actions == [("choose", 2)]
    assert DIALOG_OPTION.lower_ms <= delay <= DIALOG_OPTION.upper_ms


def test_drive_dialog_prefers_earliest_snippet():
    world = ScriptedWorld()
    world.scripted_dialog.show_options("Yes, I'd like to be an ironman", "No, I'm not planning to do that.")
    helper = make_helper(world)

    helper.drive_dialog(prefer=("not planning", "yes"))

    assert world.scripted_dialog.actions == [("choose", 2)]


def test_drive_dialog_defaults_to_first_option():
    world = ScriptedWorld()
    world.scripted_dialog.show_options("Option A", "Option B")
    helper = make_helper(world)
    helper.drive_dialog(prefer=("nothing matches",))
    assert world.scripted_dialog.actions == [("choose", 1)]


def test_drive_dialog_takes_one_step_per_call():
    world = ScriptedWorld()
    world.scripted_dialog.show_message()
    helper = make_helper(world)

    delay = helper.drive_dialog()

    assert world.scripted_dialog.actions == [("continue",)]
    assert DIALOG_CONTINUE.lower_ms <= delay <= DIALOG_CONTINUE.upper_ms


def test_drive_dialog_ignores_closed_dialog():
    world = ScriptedWorld()
    helper = make_helper(world)
    assert helper.drive_dialog() is None
    assert world.scripted_dialog.actions == []


def test_talk_to_prefers_hint_arrow_target():
    world = ScriptedWorld(position=Tile(0, 0, 0), hint_arrow=5)
    world.add_npc(5, "Far instructor", Tile(9, 9, 0))
    world.add_npc(6, "Near instructor", Tile(1, 1, 0))
    helper = make_helper(world)

    delay = helper.talk_to(5, 6)

    assert world.commands == [("interact", 5, "Talk-to")]
    assert TALK.lower_ms <= delay <= TALK.upper_ms


def test_talk_to_waits_while_busy_or_absent():
    world = ScriptedWorld(busy=True)
    world.add_npc(5, "Instructor", Tile(1, 1, 0))
    helper = make_helper(world)
    assert helper.talk_to(5) is None
    world.busy = False
    assert helper.talk_to(6) is None
    assert world.commands == []


def test_click_then_only_transitions_when_widget_visible():
    world = ScriptedWorld()
    helper = make_helper(world)
    helper.substate = Step.ONLY
    helper.click_then((164, 57), Step.DONE)
    assert helper.substate is Step.ONLY

    element = world.set_widget((164, 57))
    delay = helper.click_then((164, 57), Step.DONE)
    assert element.clicks == 1
    assert helper.substate is Step.DONE
    assert CLICK.lower_ms <= delay <= CLICK.upper_ms


def test_text_has_is_case_insensitive_and_empty_when_hidden():
    world = ScriptedWorld()
    helper = make_helper(world)
    world.set_text("Open your Settings menu")
    assert helper.text_has("open your settings")
    world.set_widget((263, 1, 0), "Open your settings", visible=False)
    assert not helper.text_has("open your settings")


def test_owns_covers_inventory_and_equipment():
    world = ScriptedWorld()
    helper = make_helper(world)
    world.equip(1205, "Bronze dagger")
    assert helper.owns(1205)
    assert helper.wearing(1205)
    assert not helper.has(1205)
    assert helper.wield(1205) is None
