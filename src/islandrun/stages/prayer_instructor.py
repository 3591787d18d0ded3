"""
Prayer Instructor: prayer tab and friends tab in the chapel.
"""

from __future__ import annotations

from enum import Enum, auto

from ..core.macro_state import Stage
from ..core.tutorial import TutorialWorkflow
from ..core.workflow import InferenceRule, StageDefinition, always
from ..world.oracle import Tile

INSTRUCTOR_ID = 3319
CHAPEL_TILE = Tile(3123, 3106, 0)
CHAPEL_RADIUS = 2
PRAYER_TAB = (164, 57)
FRIENDS_TAB = (164, 40)

MOVE_ON_TEXT = ("your final instructor",)
FRIENDS_OPENED_TEXT = ("this is your friends list",)
FRIENDS_PROMPT_TEXT = ("friends and ignore",)
PRAYER_OPENED_TEXT = ("your prayer list",)
PRAYER_PROMPT_TEXT = ("prayer menu",)
FINAL_OPTION = ("ready to move on",)


class PrayerSubstate(Enum):
    WALK_TO_CHAPEL = auto()
    TALK_INSTRUCTOR_1 = auto()
    OPEN_PRAYER_TAB = auto()
    TALK_INSTRUCTOR_2 = auto()
    OPEN_FRIENDS_TAB = auto()
    FINAL_DIALOGUE = auto()
    MOVE_ON = auto()


RULES = (
    InferenceRule("move-on text", PrayerSubstate.MOVE_ON, lambda wf: wf.text_has(*MOVE_ON_TEXT)),
    InferenceRule("friends list open", PrayerSubstate.FINAL_DIALOGUE, lambda wf: wf.text_has(*FRIENDS_OPENED_TEXT)),
    InferenceRule("friends prompt", PrayerSubstate.OPEN_FRIENDS_TAB, lambda wf: wf.text_has(*FRIENDS_PROMPT_TEXT)),
    InferenceRule("prayer list open", PrayerSubstate.TALK_INSTRUCTOR_2, lambda wf: wf.text_has(*PRAYER_OPENED_TEXT)),
    InferenceRule("prayer prompt", PrayerSubstate.OPEN_PRAYER_TAB, lambda wf: wf.text_has(*PRAYER_PROMPT_TEXT)),
    InferenceRule("in chapel", PrayerSubstate.TALK_INSTRUCTOR_1, lambda wf: wf.near(CHAPEL_TILE, CHAPEL_RADIUS)),
    InferenceRule("fallback", PrayerSubstate.WALK_TO_CHAPEL, always),
)


def walk_to_chapel(wf: TutorialWorkflow) -> int:
    if not wf.near(CHAPEL_TILE, CHAPEL_RADIUS):
        return wf.walk_to(CHAPEL_TILE)
    wf.transition(PrayerSubstate.TALK_INSTRUCTOR_1, reason="arrived")
    return wf.wait()


def _talk_until(prompt, next_substate: PrayerSubstate, prefer=()):
    def handler(wf: TutorialWorkflow) -> int:
        step = wf.drive_dialog(prefer)
        if step is not None:
            return step
        if wf.text_has(*prompt):
            wf.transition(next_substate, reason=prompt[0])
            return wf.wait()
        return wf.talk_to(INSTRUCTOR_ID) or wf.wait()

    return handler


def open_prayer_tab(wf: TutorialWorkflow) -> int:
    return wf.click_then(PRAYER_TAB, PrayerSubstate.TALK_INSTRUCTOR_2)


def open_friends_tab(wf: TutorialWorkflow) -> int:
    return wf.click_then(FRIENDS_TAB, PrayerSubstate.FINAL_DIALOGUE)


DEFINITION = StageDefinition(
    stage=Stage.PRAYER_INSTRUCTOR,
    substates=PrayerSubstate,
    terminal=PrayerSubstate.MOVE_ON,
    next_stage=Stage.MAGIC_INSTRUCTOR,
    rules=RULES,
    handlers={
        PrayerSubstate.WALK_TO_CHAPEL: walk_to_chapel,
        PrayerSubstate.TALK_INSTRUCTOR_1: _talk_until(PRAYER_PROMPT_TEXT, PrayerSubstate.OPEN_PRAYER_TAB),
        PrayerSubstate.OPEN_PRAYER_TAB: open_prayer_tab,
        PrayerSubstate.TALK_INSTRUCTOR_2: _talk_until(FRIENDS_PROMPT_TEXT, PrayerSubstate.OPEN_FRIENDS_TAB),
        PrayerSubstate.OPEN_FRIENDS_TAB: open_friends_tab,
        PrayerSubstate.FINAL_DIALOGUE: _talk_until(MOVE_ON_TEXT, PrayerSubstate.MOVE_ON, prefer=FINAL_OPTION),
    },
    description="Open the prayer and friends tabs between talks with Brother Brace.",
)

__all__ = ["DEFINITION", "PrayerSubstate", "RULES"]
