"""
Master Chef: make bread dough and bake it on the range.
"""

from __future__ import annotations

from enum import Enum, auto

from ..core.macro_state import Stage
from ..core.timing import INTERACT
from ..core.tutorial import TutorialWorkflow
from ..core.workflow import InferenceRule, StageDefinition, always
from ..world.oracle import Tile

CHEF_ID = 3305
RANGE_ID = 9736
CHEF_TILE = Tile(3075, 3085, 0)
CHEF_RADIUS = 2

FLOUR = "Pot of flour"
WATER = "Bucket of water"
DOUGH = "Bread dough"
BREAD = "Bread"

BAKED_TEXT = ("baked your first",)


class ChefSubstate(Enum):
    WALK_TO_CHEF = auto()
    TALK_CHEF = auto()
    GET_INGREDIENTS = auto()
    MIX_DOUGH = auto()
    BAKE_BREAD = auto()
    MOVE_ON = auto()


def _has_ingredients(wf: TutorialWorkflow) -> bool:
    return wf.has_all(FLOUR, WATER)


def _partial_ingredients(wf: TutorialWorkflow) -> bool:
    return wf.has(FLOUR) != wf.has(WATER)


def _at_chef(wf: TutorialWorkflow) -> bool:
    chef = wf.npc(CHEF_ID)
    return wf.near(chef if chef is not None else CHEF_TILE, CHEF_RADIUS)


RULES = (
    InferenceRule("bread", ChefSubstate.MOVE_ON, lambda wf: wf.has(BREAD) or wf.text_has(*BAKED_TEXT)),
    InferenceRule("dough", ChefSubstate.BAKE_BREAD, lambda wf: wf.has(DOUGH)),
    InferenceRule("flour and water", ChefSubstate.MIX_DOUGH, _has_ingredients),
    InferenceRule("one ingredient", ChefSubstate.GET_INGREDIENTS, _partial_ingredients),
    InferenceRule("at chef", ChefSubstate.TALK_CHEF, _at_chef),
    InferenceRule("fallback", ChefSubstate.WALK_TO_CHEF, always),
)


def walk_to_chef(wf: TutorialWorkflow) -> int:
    chef = wf.npc(CHEF_ID)
    target = chef if chef is not None else CHEF_TILE
    if not wf.near(target, CHEF_RADIUS):
        return wf.walk_to(target)
    wf.transition(ChefSubstate.TALK_CHEF, reason="arrived")
    return wf.wait()


def talk_chef(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if _has_ingredients(wf):
        wf.transition(ChefSubstate.MIX_DOUGH, reason="received ingredients")
        return wf.wait()
    return wf.talk_to(CHEF_ID) or wf.wait()


def get_ingredients(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if _has_ingredients(wf):
        wf.transition(ChefSubstate.MIX_DOUGH, reason="ingredients complete")
        return wf.wait()
    chef = wf.npc(CHEF_ID)
    if chef is not None and wf.near(chef, CHEF_RADIUS):
        return wf.talk_to(CHEF_ID) or wf.wait()
    return wf.walk_to(chef if chef is not None else CHEF_TILE)


def mix_dough(wf: TutorialWorkflow) -> int:
    if wf.has(DOUGH):
        wf.transition(ChefSubstate.BAKE_BREAD, reason="mixed dough")
        return wf.wait()
    flour = wf.world.inventory_first(FLOUR)
    water = wf.world.inventory_first(WATER)
    if flour is None or water is None:
        wf.transition(ChefSubstate.GET_INGREDIENTS, reason="ingredient missing")
        return wf.wait()
    return wf.use_on(flour, water, INTERACT)


def bake_bread(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.has(BREAD):
        wf.transition(ChefSubstate.MOVE_ON, reason="baked bread")
        return wf.wait()
    dough = wf.world.inventory_first(DOUGH)
    if dough is None:
        wf.transition(ChefSubstate.GET_INGREDIENTS, reason="dough missing")
        return wf.wait()
    if wf.world.is_player_busy():
        return wf.wait()
    stove = wf.scene_object(RANGE_ID)
    if stove is None:
        return wf.wait()
    return wf.use_on(dough, stove, INTERACT)


DEFINITION = StageDefinition(
    stage=Stage.MASTER_CHEF,
    substates=ChefSubstate,
    terminal=ChefSubstate.MOVE_ON,
    next_stage=Stage.QUEST_GUIDE,
    rules=RULES,
    handlers={
        ChefSubstate.WALK_TO_CHEF: walk_to_chef,
        ChefSubstate.TALK_CHEF: talk_chef,
        ChefSubstate.GET_INGREDIENTS: get_ingredients,
        ChefSubstate.MIX_DOUGH: mix_dough,
        ChefSubstate.BAKE_BREAD: bake_bread,
    },
    description="Collect flour and water, mix dough, bake bread.",
)

__all__ = ["ChefSubstate", "DEFINITION", "RULES"]
