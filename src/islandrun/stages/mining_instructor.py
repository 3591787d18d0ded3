"""
Mining Instructor: mine tin and copper, smelt a bronze bar, smith a dagger.
"""

from __future__ import annotations

from enum import Enum, auto

from ..core.macro_state import Stage
from ..core.timing import CLICK, GATHER, INTERACT
from ..core.tutorial import TutorialWorkflow
from ..core.workflow import InferenceRule, StageDefinition, always
from ..world.oracle import Tile

INSTRUCTOR_ID = 3311
TIN_ROCK_ID = 10080
COPPER_ROCK_ID = 10079
FURNACE_ID = 10082
ANVIL_ID = 2097
INSTRUCTOR_TILE = Tile(3081, 9506, 0)
SMITH_DAGGER_WIDGET = (312, 9, 2)
INSTRUCTOR_RADIUS = 2

PICKAXE_ID = 1265
HAMMER_ID = 2347
TIN_ORE_ID = 438
COPPER_ORE_ID = 436
BRONZE_BAR_ID = 2349
BRONZE_DAGGER_ID = 1205

MOVE_ON_TEXT = ("congratulations, you've made your first weapon", "combat instructor")


class MiningSubstate(Enum):
    WALK_TO_INSTRUCTOR = auto()
    TALK_INSTRUCTOR_1 = auto()
    MINE_TIN = auto()
    MINE_COPPER = auto()
    SMELT_BAR = auto()
    TALK_INSTRUCTOR_2 = auto()
    SMITH_DAGGER = auto()
    MOVE_ON = auto()


def _made_dagger(wf: TutorialWorkflow) -> bool:
    return wf.owns(BRONZE_DAGGER_ID) or wf.text_has(*MOVE_ON_TEXT)


def _at_instructor(wf: TutorialWorkflow) -> bool:
    instructor = wf.npc(INSTRUCTOR_ID)
    return wf.near(instructor if instructor is not None else INSTRUCTOR_TILE, INSTRUCTOR_RADIUS)


RULES = (
    InferenceRule("dagger", MiningSubstate.MOVE_ON, _made_dagger),
    InferenceRule("hammer and bar", MiningSubstate.SMITH_DAGGER, lambda wf: wf.has_all(HAMMER_ID, BRONZE_BAR_ID)),
    InferenceRule("bar", MiningSubstate.TALK_INSTRUCTOR_2, lambda wf: wf.has(BRONZE_BAR_ID)),
    InferenceRule("both ores", MiningSubstate.SMELT_BAR, lambda wf: wf.has_all(TIN_ORE_ID, COPPER_ORE_ID)),
    InferenceRule("tin ore", MiningSubstate.MINE_COPPER, lambda wf: wf.has_all(PICKAXE_ID, TIN_ORE_ID)),
    InferenceRule("pickaxe", MiningSubstate.MINE_TIN, lambda wf: wf.has(PICKAXE_ID)),
    InferenceRule("at instructor", MiningSubstate.TALK_INSTRUCTOR_1, _at_instructor),
    InferenceRule("fallback", MiningSubstate.WALK_TO_INSTRUCTOR, always),
)


def walk_to_instructor(wf: TutorialWorkflow) -> int:
    instructor = wf.npc(INSTRUCTOR_ID)
    target = instructor if instructor is not None else INSTRUCTOR_TILE
    if not wf.near(target, INSTRUCTOR_RADIUS):
        return wf.walk_to(target)
    wf.transition(MiningSubstate.TALK_INSTRUCTOR_1, reason="arrived")
    return wf.wait()


def talk_instructor_1(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.has(PICKAXE_ID):
        wf.transition(MiningSubstate.MINE_TIN, reason="received pickaxe")
        return wf.wait()
    return wf.talk_to(INSTRUCTOR_ID) or wf.wait()


def _mine(wf: TutorialWorkflow, rock_id: int, ore_id: int, next_substate: MiningSubstate) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.has(ore_id):
        wf.transition(next_substate, reason=f"mined ore {ore_id}")
        return wf.wait()
    if wf.world.is_player_busy():
        return wf.wait()
    rock = wf.scene_object(rock_id)
    if rock is None:
        return wf.wait()
    return wf.interact(rock, "Mine", GATHER)


def mine_tin(wf: TutorialWorkflow) -> int:
    return _mine(wf, TIN_ROCK_ID, TIN_ORE_ID, MiningSubstate.MINE_COPPER)


def mine_copper(wf: TutorialWorkflow) -> int:
    return _mine(wf, COPPER_ROCK_ID, COPPER_ORE_ID, MiningSubstate.SMELT_BAR)


def smelt_bar(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.has(BRONZE_BAR_ID):
        wf.transition(MiningSubstate.TALK_INSTRUCTOR_2, reason="smelted bar")
        return wf.wait()
    if wf.world.is_player_busy():
        return wf.wait()
    ore = wf.world.inventory_first(TIN_ORE_ID)
    furnace = wf.scene_object(FURNACE_ID)
    if ore is None or furnace is None:
        return wf.wait()
    return wf.use_on(ore, furnace, INTERACT)


def talk_instructor_2(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.has(HAMMER_ID):
        wf.transition(MiningSubstate.SMITH_DAGGER, reason="received hammer")
        return wf.wait()
    if _at_instructor(wf):
        return wf.talk_to(INSTRUCTOR_ID) or wf.wait()
    instructor = wf.npc(INSTRUCTOR_ID)
    return wf.walk_to(instructor if instructor is not None else INSTRUCTOR_TILE)


def smith_dagger(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.has(BRONZE_DAGGER_ID):
        wf.transition(MiningSubstate.MOVE_ON, reason="smithed dagger")
        return wf.wait()
    if wf.click(SMITH_DAGGER_WIDGET):
        return wf.delay(GATHER)
    if wf.world.is_player_busy():
        return wf.wait()
    bar = wf.world.inventory_first(BRONZE_BAR_ID)
    anvil = wf.scene_object(ANVIL_ID)
    if bar is None or anvil is None:
        return wf.wait()
    return wf.use_on(bar, anvil, CLICK)


DEFINITION = StageDefinition(
    stage=Stage.MINING_INSTRUCTOR,
    substates=MiningSubstate,
    terminal=MiningSubstate.MOVE_ON,
    next_stage=Stage.COMBAT_INSTRUCTOR,
    rules=RULES,
    handlers={
        MiningSubstate.WALK_TO_INSTRUCTOR: walk_to_instructor,
        MiningSubstate.TALK_INSTRUCTOR_1: talk_instructor_1,
        MiningSubstate.MINE_TIN: mine_tin,
        MiningSubstate.MINE_COPPER: mine_copper,
        MiningSubstate.SMELT_BAR: smelt_bar,
        MiningSubstate.TALK_INSTRUCTOR_2: talk_instructor_2,
        MiningSubstate.SMITH_DAGGER: smith_dagger,
    },
    description="Mine tin and copper, smelt a bronze bar and smith a dagger.",
)

__all__ = ["DEFINITION", "MiningSubstate", "RULES"]
