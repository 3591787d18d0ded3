"""
Gielinor Guide: opening conversation and the settings tab.
"""

from __future__ import annotations

from enum import Enum, auto

from ..core.macro_state import Stage
from ..core.tutorial import TutorialWorkflow
from ..core.workflow import InferenceRule, StageDefinition, always

GUIDE_ID = 3308
SURVIVAL_EXPERT_ID = 8503
SETTINGS_TAB = (164, 41)

MOVE_ON_TEXT = ("moving on", "catch some shrimp", "proceed")
SETTINGS_PROMPT_TEXT = ("open your settings", "spanner icon")
SETTINGS_OPENED_TEXT = ("options menu", "variety of options")

# The guide stays in his house; being this far away means we already left it.
LEFT_HOUSE_DISTANCE = 10


class GuideSubstate(Enum):
    TALK_GUIDE_1 = auto()
    OPEN_SETTINGS = auto()
    TALK_GUIDE_2 = auto()
    MOVE_ON = auto()


def _arrow_on_survival_expert(wf: TutorialWorkflow) -> bool:
    arrow = wf.world.hint_arrow_npc()
    return arrow is not None and arrow.id == SURVIVAL_EXPERT_ID


def _left_guide_house(wf: TutorialWorkflow) -> bool:
    guide = wf.npc(GUIDE_ID)
    return guide is not None and not wf.near(guide, LEFT_HOUSE_DISTANCE)


RULES = (
    InferenceRule("move-on text", GuideSubstate.MOVE_ON, lambda wf: wf.text_has(*MOVE_ON_TEXT)),
    InferenceRule("arrow on survival expert", GuideSubstate.MOVE_ON, _arrow_on_survival_expert),
    InferenceRule("left guide house", GuideSubstate.MOVE_ON, _left_guide_house),
    InferenceRule("settings opened", GuideSubstate.TALK_GUIDE_2, lambda wf: wf.text_has(*SETTINGS_OPENED_TEXT)),
    InferenceRule("settings prompt", GuideSubstate.OPEN_SETTINGS, lambda wf: wf.text_has(*SETTINGS_PROMPT_TEXT)),
    InferenceRule("fallback", GuideSubstate.TALK_GUIDE_1, always),
)


def talk_guide_1(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.text_has(*SETTINGS_PROMPT_TEXT):
        wf.transition(GuideSubstate.OPEN_SETTINGS, reason="settings prompt")
        return wf.wait()
    return wf.talk_to(GUIDE_ID) or wf.wait()


def open_settings(wf: TutorialWorkflow) -> int:
    return wf.click_then(SETTINGS_TAB, GuideSubstate.TALK_GUIDE_2)


def talk_guide_2(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.text_has(*MOVE_ON_TEXT):
        wf.transition(GuideSubstate.MOVE_ON, reason="move-on text")
        return wf.wait()
    return wf.talk_to(GUIDE_ID) or wf.wait()


DEFINITION = StageDefinition(
    stage=Stage.GIELINOR_GUIDE,
    substates=GuideSubstate,
    terminal=GuideSubstate.MOVE_ON,
    next_stage=Stage.SURVIVAL_EXPERT,
    rules=RULES,
    handlers={
        GuideSubstate.TALK_GUIDE_1: talk_guide_1,
        GuideSubstate.OPEN_SETTINGS: open_settings,
        GuideSubstate.TALK_GUIDE_2: talk_guide_2,
    },
    description="Talk to the Gielinor Guide, open the settings tab, talk again.",
)

__all__ = ["DEFINITION", "GuideSubstate", "RULES"]
