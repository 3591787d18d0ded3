"""
Quest Guide: quest journal tab, then down the ladder into the mining cave.
"""

from __future__ import annotations

from enum import Enum, auto

from ..core.macro_state import Stage
from ..core.timing import TALK
from ..core.tutorial import TutorialWorkflow
from ..core.workflow import InferenceRule, StageDefinition, StageJump, always
from ..world.oracle import Tile

GUIDE_ID = 3312
DOOR_ID = 9721
LADDER_ID = 9726
GUIDE_TILE = Tile(3088, 3124, 0)
QUEST_TAB = (164, 54)
QUEST_JOURNAL = (399, 7)

# Underground areas are mapped above this y coordinate.
CAVE_MIN_Y = 9000
GUIDE_RADIUS = 2
DOOR_RADIUS = 3

CAVE_TEXT = ("mining and smithing",)
LADDER_TEXT = ("moving on", "ladder")
JOURNAL_TEXT = ("your quest journal",)
QUEST_TAB_PROMPT_TEXT = ("quest list", "flashing icon")


class QuestSubstate(Enum):
    WALK_TO_GUIDE = auto()
    TALK_GUIDE_1 = auto()
    OPEN_QUESTS_TAB = auto()
    TALK_GUIDE_2 = auto()
    CLIMB_LADDER = auto()
    MOVE_ON = auto()


def in_mining_cave(wf: TutorialWorkflow) -> bool:
    position = wf.position()
    return position is not None and position.y > CAVE_MIN_Y


def _journal_open(wf: TutorialWorkflow) -> bool:
    return wf.element_visible(QUEST_JOURNAL) or wf.text_has(*JOURNAL_TEXT)


def _quest_tab_prompt(wf: TutorialWorkflow) -> bool:
    return wf.element_visible(QUEST_TAB) and wf.text_has(*QUEST_TAB_PROMPT_TEXT)


def _at_guide(wf: TutorialWorkflow) -> bool:
    guide = wf.npc(GUIDE_ID)
    return wf.near(guide if guide is not None else GUIDE_TILE, GUIDE_RADIUS)


RULES = (
    InferenceRule("cave text", QuestSubstate.MOVE_ON, lambda wf: wf.text_has(*CAVE_TEXT)),
    InferenceRule("ladder text", QuestSubstate.CLIMB_LADDER, lambda wf: wf.text_has(*LADDER_TEXT)),
    InferenceRule("journal open", QuestSubstate.TALK_GUIDE_2, _journal_open),
    InferenceRule("quest tab prompt", QuestSubstate.OPEN_QUESTS_TAB, _quest_tab_prompt),
    InferenceRule("at guide", QuestSubstate.TALK_GUIDE_1, _at_guide),
    InferenceRule("fallback", QuestSubstate.WALK_TO_GUIDE, always),
)

JUMPS = (StageJump("already in mining cave", Stage.MINING_INSTRUCTOR, in_mining_cave),)


def walk_to_guide(wf: TutorialWorkflow) -> int:
    door = wf.scene_object(DOOR_ID)
    if door is not None and wf.near(door, DOOR_RADIUS) and not wf.near(GUIDE_TILE, DOOR_RADIUS):
        return wf.interact(door, "Open", TALK)
    guide = wf.npc(GUIDE_ID)
    target = guide if guide is not None else GUIDE_TILE
    if not wf.near(target, GUIDE_RADIUS):
        return wf.walk_to(target)
    wf.transition(QuestSubstate.TALK_GUIDE_1, reason="arrived")
    return wf.wait()


def talk_guide_1(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if _quest_tab_prompt(wf):
        wf.transition(QuestSubstate.OPEN_QUESTS_TAB, reason="quest tab prompt")
        return wf.wait()
    return wf.talk_to(GUIDE_ID) or wf.wait()


def open_quests_tab(wf: TutorialWorkflow) -> int:
    return wf.click_then(QUEST_TAB, QuestSubstate.TALK_GUIDE_2)


def talk_guide_2(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.text_has(*LADDER_TEXT):
        wf.transition(QuestSubstate.CLIMB_LADDER, reason="ladder text")
        return wf.wait()
    if _at_guide(wf):
        return wf.talk_to(GUIDE_ID) or wf.wait()
    guide = wf.npc(GUIDE_ID)
    return wf.walk_to(guide if guide is not None else GUIDE_TILE)


def climb_ladder(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if in_mining_cave(wf):
        wf.transition(QuestSubstate.MOVE_ON, reason="entered cave")
        return wf.wait()
    if wf.world.is_player_busy():
        return wf.wait()
    ladder = wf.scene_object(LADDER_ID)
    if ladder is None:
        return wf.walk_to(GUIDE_TILE)
    return wf.interact(ladder, "Climb-down", TALK)


DEFINITION = StageDefinition(
    stage=Stage.QUEST_GUIDE,
    substates=QuestSubstate,
    terminal=QuestSubstate.MOVE_ON,
    next_stage=Stage.MINING_INSTRUCTOR,
    rules=RULES,
    handlers={
        QuestSubstate.WALK_TO_GUIDE: walk_to_guide,
        QuestSubstate.TALK_GUIDE_1: talk_guide_1,
        QuestSubstate.OPEN_QUESTS_TAB: open_quests_tab,
        QuestSubstate.TALK_GUIDE_2: talk_guide_2,
        QuestSubstate.CLIMB_LADDER: climb_ladder,
    },
    jumps=JUMPS,
    description="Open the quest journal, talk again, climb down into the cave.",
)

__all__ = ["DEFINITION", "JUMPS", "QuestSubstate", "RULES", "in_mining_cave"]
