"""
Survival Expert: fishing, woodcutting, firemaking and cooking.

Provenance flag
---------------
``chopped_tree_for_logs``
    Set when this workflow issues the chop command with no logs in the
    inventory, and cleared once the logs are burned or progress is routed
    back before woodcutting. The inventory alone cannot tell logs we chopped
    from logs obtained any other way, so logs already present when woodcutting
    starts are dropped before the chop. The fire step is reachable only while
    the flag is set.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

from ..core.macro_state import Stage
from ..core.timing import GATHER, INTERACT
from ..core.tutorial import TutorialWorkflow
from ..core.workflow import InferenceRule, StageDefinition, always

logger = logging.getLogger(__name__)

GUIDE_ID = 3308
EXPERT_ID = 8503
START_DOOR_ID = 9398
FISHING_SPOT_ID = 3317
TREE_ID = 9730
INVENTORY_TAB = (164, 55)
SKILLS_TAB = (164, 53)
FIRE_NAMES = ("Fire",)

NET = "Small fishing net"
RAW_SHRIMP = ("Raw shrimps", "Raw shrimp")
COOKED_SHRIMP = ("Shrimps", "Shrimp")
LOGS = "Logs"
AXE = "Bronze axe"
TINDERBOX = "Tinderbox"

CHOPPED_TREE = "chopped_tree_for_logs"

COOKED_TEXT = ("cooked your first",)
INVENTORY_PROMPT_TEXT = ("you've been given an item", "open your inventory")
SKILLS_OPENED_TEXT = ("on this menu you can view your skills",)

EXPERT_RADIUS = 2
# The guide house door only blocks us while the guide is still this close.
DOOR_GUIDE_RADIUS = 6
FIRE_RADIUS = 3


class SurvivalSubstate(Enum):
    WALK_TO_EXPERT = auto()
    TALK_EXPERT_1 = auto()
    OPEN_INVENTORY = auto()
    FISH = auto()
    OPEN_SKILLS = auto()
    TALK_EXPERT_2 = auto()
    CHOP_TREE = auto()
    LIGHT_FIRE = auto()
    COOK_SHRIMP = auto()
    MOVE_ON = auto()


def _has_tools(wf: TutorialWorkflow) -> bool:
    return wf.has_all(AXE, TINDERBOX)


def _has_raw_shrimp(wf: TutorialWorkflow) -> bool:
    return wf.has(*RAW_SHRIMP)


def _fire_nearby(wf: TutorialWorkflow) -> bool:
    return wf.near(wf.scene_object(names=FIRE_NAMES), FIRE_RADIUS)


def _cooked(wf: TutorialWorkflow) -> bool:
    return wf.has(*COOKED_SHRIMP) or wf.text_has(*COOKED_TEXT)


def _ready_to_cook(wf: TutorialWorkflow) -> bool:
    return _fire_nearby(wf) and _has_raw_shrimp(wf) and _has_tools(wf)


def _own_logs(wf: TutorialWorkflow) -> bool:
    return wf.flag(CHOPPED_TREE) and wf.has(LOGS) and _has_tools(wf) and _has_raw_shrimp(wf)


RULES = (
    InferenceRule("cooked shrimp", SurvivalSubstate.MOVE_ON, _cooked),
    InferenceRule("fire lit", SurvivalSubstate.COOK_SHRIMP, _ready_to_cook),
    InferenceRule("own logs", SurvivalSubstate.LIGHT_FIRE, _own_logs),
    InferenceRule("tools", SurvivalSubstate.CHOP_TREE, lambda wf: _has_tools(wf) and _has_raw_shrimp(wf)),
    InferenceRule(
        "skills viewed",
        SurvivalSubstate.TALK_EXPERT_2,
        lambda wf: _has_raw_shrimp(wf) and wf.text_has(*SKILLS_OPENED_TEXT),
    ),
    InferenceRule("raw shrimp", SurvivalSubstate.OPEN_SKILLS, _has_raw_shrimp),
    InferenceRule("inventory prompt", SurvivalSubstate.OPEN_INVENTORY, lambda wf: wf.text_has(*INVENTORY_PROMPT_TEXT)),
    InferenceRule("fishing net", SurvivalSubstate.FISH, lambda wf: wf.has(NET)),
    InferenceRule("at expert", SurvivalSubstate.TALK_EXPERT_1, lambda wf: wf.near(wf.npc(EXPERT_ID), EXPERT_RADIUS)),
    InferenceRule("fallback", SurvivalSubstate.WALK_TO_EXPERT, always),
)


def walk_to_expert(wf: TutorialWorkflow) -> int:
    if wf.near(wf.npc(GUIDE_ID), DOOR_GUIDE_RADIUS):
        door = wf.scene_object(START_DOOR_ID)
        if door is not None and not wf.world.is_player_busy():
            return wf.interact(door, "Open", INTERACT)
    expert = wf.npc(EXPERT_ID)
    if expert is None:
        return wf.wait()
    if not wf.near(expert, EXPERT_RADIUS):
        return wf.walk_to(expert)
    wf.transition(SurvivalSubstate.TALK_EXPERT_1, reason="arrived")
    return wf.wait()


def talk_expert_1(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.text_has(*INVENTORY_PROMPT_TEXT):
        wf.transition(SurvivalSubstate.OPEN_INVENTORY, reason="inventory prompt")
        return wf.wait()
    return wf.talk_to(EXPERT_ID) or wf.wait()


def open_inventory(wf: TutorialWorkflow) -> int:
    return wf.click_then(INVENTORY_TAB, SurvivalSubstate.FISH)


def fish(wf: TutorialWorkflow) -> int:
    wf.set_flag(CHOPPED_TREE, False)
    step = wf.drive_dialog()
    if step is not None:
        return step
    if _has_raw_shrimp(wf):
        wf.transition(SurvivalSubstate.OPEN_SKILLS, reason="caught shrimp")
        return wf.wait()
    if wf.world.is_player_busy():
        return wf.wait()
    spot = wf.npc(FISHING_SPOT_ID)
    if spot is None:
        return wf.wait()
    return wf.interact(spot, "Net", GATHER)


def open_skills(wf: TutorialWorkflow) -> int:
    return wf.click_then(SKILLS_TAB, SurvivalSubstate.TALK_EXPERT_2)


def talk_expert_2(wf: TutorialWorkflow) -> int:
    wf.set_flag(CHOPPED_TREE, False)
    step = wf.drive_dialog()
    if step is not None:
        return step
    if _has_tools(wf):
        wf.transition(SurvivalSubstate.CHOP_TREE, reason="received tools")
        return wf.wait()
    return wf.talk_to(EXPERT_ID) or wf.wait()


def chop_tree(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.flag(CHOPPED_TREE) and wf.has(LOGS):
        wf.transition(SurvivalSubstate.LIGHT_FIRE, reason="chopped logs")
        return wf.wait()
    if wf.world.is_player_busy():
        return wf.wait()
    if wf.has(LOGS):
        logger.info("%s: logs not from our chop; dropping them first", wf.name)
        return wf.drop(LOGS) or wf.wait()
    tree = wf.scene_object(TREE_ID)
    if tree is None:
        return wf.wait()
    wf.set_flag(CHOPPED_TREE)
    return wf.interact(tree, "Chop down", GATHER)


def light_fire(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if _fire_nearby(wf):
        wf.transition(SurvivalSubstate.COOK_SHRIMP, reason="fire lit")
        return wf.wait()
    if wf.world.is_player_busy():
        return wf.wait()
    tinderbox = wf.world.inventory_first(TINDERBOX)
    logs = wf.world.inventory_first(LOGS)
    if tinderbox is None or logs is None:
        wf.set_flag(CHOPPED_TREE, False)
        wf.transition(SurvivalSubstate.CHOP_TREE, reason="logs missing")
        return wf.wait()
    wf.set_flag(CHOPPED_TREE, False)
    return wf.use_on(tinderbox, logs, INTERACT)


def cook_shrimp(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.has(*COOKED_SHRIMP):
        wf.transition(SurvivalSubstate.MOVE_ON, reason="cooked shrimp")
        return wf.wait()
    if wf.world.is_player_busy():
        return wf.wait()
    fire = wf.scene_object(names=FIRE_NAMES)
    shrimp = wf.world.inventory_first(*RAW_SHRIMP)
    if fire is None or not wf.near(fire, FIRE_RADIUS):
        wf.transition(SurvivalSubstate.LIGHT_FIRE, reason="fire gone")
        return wf.wait()
    if shrimp is None:
        return wf.wait()
    return wf.use_on(shrimp, fire, INTERACT)


DEFINITION = StageDefinition(
    stage=Stage.SURVIVAL_EXPERT,
    substates=SurvivalSubstate,
    terminal=SurvivalSubstate.MOVE_ON,
    next_stage=Stage.MASTER_CHEF,
    rules=RULES,
    handlers={
        SurvivalSubstate.WALK_TO_EXPERT: walk_to_expert,
        SurvivalSubstate.TALK_EXPERT_1: talk_expert_1,
        SurvivalSubstate.OPEN_INVENTORY: open_inventory,
        SurvivalSubstate.FISH: fish,
        SurvivalSubstate.OPEN_SKILLS: open_skills,
        SurvivalSubstate.TALK_EXPERT_2: talk_expert_2,
        SurvivalSubstate.CHOP_TREE: chop_tree,
        SurvivalSubstate.LIGHT_FIRE: light_fire,
        SurvivalSubstate.COOK_SHRIMP: cook_shrimp,
    },
    flags=(CHOPPED_TREE,),
    description="Fish shrimp, chop a tree, light a fire and cook the shrimp.",
)

__all__ = ["CHOPPED_TREE", "DEFINITION", "RULES", "SurvivalSubstate"]
