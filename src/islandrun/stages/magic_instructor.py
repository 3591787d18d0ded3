"""
Magic Instructor: spellbook, Wind Strike on a chicken, and the trip to the mainland.
"""

from __future__ import annotations

from enum import Enum, auto

from ..core.macro_state import Stage
from ..core.timing import ATTACK
from ..core.tutorial import TutorialWorkflow
from ..core.workflow import InferenceRule, StageDefinition, always
from ..world.oracle import Tile

INSTRUCTOR_ID = 3309
CHICKEN_ID = 3316
ADVENTURER_JONH_ID = 9244
INSTRUCTOR_TILE = Tile(3142, 3085, 0)
INSTRUCTOR_RADIUS = 7
LUMBRIDGE_TILE = Tile(3222, 3218, 0)
LUMBRIDGE_RADIUS = 3
SPELLBOOK_TAB = (164, 58)

AIR_RUNE_ID = 556
MIND_RUNE_ID = 558
WIND_STRIKE = "Wind Strike"

MAINLAND_TEXT = ("welcome to lumbridge",)
FINAL_TEXT = ("almost completed the tutorial", "congratulations, you have completed")
CAST_TEXT = ("cast wind strike",)
SPELLBOOK_OPENED_TEXT = ("this is your magic interface",)
SPELLBOOK_PROMPT_TEXT = ("magic menu", "final menu")
# Decline the ironman question, then accept the trip to the mainland.
FINAL_OPTIONS = ("not planning", "yes")


class MagicSubstate(Enum):
    WALK_TO_INSTRUCTOR = auto()
    TALK_INSTRUCTOR_1 = auto()
    OPEN_SPELLBOOK = auto()
    TALK_INSTRUCTOR_2 = auto()
    CAST_WIND_STRIKE = auto()
    FINAL_DIALOGUE = auto()
    MOVE_ON = auto()


def _on_mainland(wf: TutorialWorkflow) -> bool:
    return (
        wf.npc(ADVENTURER_JONH_ID) is not None
        or wf.near(LUMBRIDGE_TILE, LUMBRIDGE_RADIUS)
        or wf.text_has(*MAINLAND_TEXT)
    )


def _has_runes(wf: TutorialWorkflow) -> bool:
    return wf.has_all(AIR_RUNE_ID, MIND_RUNE_ID)


def _spellbook_opened(wf: TutorialWorkflow) -> bool:
    return wf.element_visible(SPELLBOOK_TAB) and wf.text_has(*SPELLBOOK_OPENED_TEXT)


RULES = (
    InferenceRule("on mainland", MagicSubstate.MOVE_ON, _on_mainland),
    InferenceRule("final text", MagicSubstate.FINAL_DIALOGUE, lambda wf: wf.text_has(*FINAL_TEXT)),
    InferenceRule("runes", MagicSubstate.CAST_WIND_STRIKE, lambda wf: _has_runes(wf) or wf.text_has(*CAST_TEXT)),
    InferenceRule("spellbook open", MagicSubstate.TALK_INSTRUCTOR_2, _spellbook_opened),
    InferenceRule("spellbook prompt", MagicSubstate.OPEN_SPELLBOOK, lambda wf: wf.text_has(*SPELLBOOK_PROMPT_TEXT)),
    InferenceRule(
        "at instructor",
        MagicSubstate.TALK_INSTRUCTOR_1,
        lambda wf: wf.near(INSTRUCTOR_TILE, INSTRUCTOR_RADIUS),
    ),
    InferenceRule("fallback", MagicSubstate.WALK_TO_INSTRUCTOR, always),
)


def walk_to_instructor(wf: TutorialWorkflow) -> int:
    if not wf.near(INSTRUCTOR_TILE, INSTRUCTOR_RADIUS):
        return wf.walk_to(INSTRUCTOR_TILE)
    wf.transition(MagicSubstate.TALK_INSTRUCTOR_1, reason="arrived")
    return wf.wait()


def talk_instructor_1(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.text_has(*SPELLBOOK_PROMPT_TEXT):
        wf.transition(MagicSubstate.OPEN_SPELLBOOK, reason="spellbook prompt")
        return wf.wait()
    return wf.talk_to(INSTRUCTOR_ID) or wf.wait()


def open_spellbook(wf: TutorialWorkflow) -> int:
    return wf.click_then(SPELLBOOK_TAB, MagicSubstate.TALK_INSTRUCTOR_2)


def talk_instructor_2(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if _has_runes(wf):
        wf.transition(MagicSubstate.CAST_WIND_STRIKE, reason="received runes")
        return wf.wait()
    return wf.talk_to(INSTRUCTOR_ID) or wf.wait()


def cast_wind_strike(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.text_has(*FINAL_TEXT):
        wf.transition(MagicSubstate.FINAL_DIALOGUE, reason="spell cast")
        return wf.wait()
    if wf.world.is_player_busy():
        return wf.wait()
    if not _has_runes(wf) and not wf.world.can_cast(WIND_STRIKE):
        # Out of runes: the instructor hands out more.
        return wf.talk_to(INSTRUCTOR_ID) or wf.wait()
    chicken = wf.npc(CHICKEN_ID)
    if chicken is None or chicken.interacting:
        return wf.wait()
    wf.world.cast_spell(WIND_STRIKE, chicken)
    return wf.delay(ATTACK)


def final_dialogue(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog(prefer=FINAL_OPTIONS)
    if step is not None:
        return step
    return wf.talk_to(INSTRUCTOR_ID) or wf.wait()


DEFINITION = StageDefinition(
    stage=Stage.MAGIC_INSTRUCTOR,
    substates=MagicSubstate,
    terminal=MagicSubstate.MOVE_ON,
    next_stage=Stage.COMPLETE,
    rules=RULES,
    handlers={
        MagicSubstate.WALK_TO_INSTRUCTOR: walk_to_instructor,
        MagicSubstate.TALK_INSTRUCTOR_1: talk_instructor_1,
        MagicSubstate.OPEN_SPELLBOOK: open_spellbook,
        MagicSubstate.TALK_INSTRUCTOR_2: talk_instructor_2,
        MagicSubstate.CAST_WIND_STRIKE: cast_wind_strike,
        MagicSubstate.FINAL_DIALOGUE: final_dialogue,
    },
    description="Cast Wind Strike on a chicken, then accept the trip to the mainland.",
)

__all__ = ["DEFINITION", "MagicSubstate", "RULES"]
