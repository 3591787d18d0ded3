"""
Combat Instructor: equipment screens, melee and ranged rat kills.

The kill message is replaced by the next instruction long before the bow
and arrows are handed out, so the ``made_melee_kill`` flag keeps inference
from falling back to the melee steps in between.
"""

from __future__ import annotations

from enum import Enum, auto

from ..core.macro_state import Stage
from ..core.timing import ATTACK, TALK
from ..core.tutorial import TutorialWorkflow
from ..core.workflow import InferenceRule, StageDefinition, always
from ..world.oracle import Tile

INSTRUCTOR_ID = 3307
RAT_ID = 3313
RAT_GATE_ID = 9720
INSTRUCTOR_TILE = Tile(3105, 9507, 0)
RAT_PEN_TILE = Tile(3104, 9518, 0)
RANGED_TILE = Tile(3106, 9510, 0)
INSTRUCTOR_RADIUS = 2

EQUIPMENT_TAB = (164, 63)
EQUIPMENT_STATS_BUTTON = (387, 1)
EQUIPMENT_STATS_INTERFACE = (84, 1)
COMBAT_STYLES_TAB = (164, 52)

DAGGER_ID = 1205
SWORD_ID = 1277
SHIELD_ID = 1171
BOW_ID = 841
ARROWS_ID = 882

MOVE_ON_TEXT = ("moving on", "you have completed the tasks here")
MELEE_KILL_TEXT = ("well done, you've made your first kill",)
ATTACK_PROMPT_TEXT = ("slay some rats",)
UNREACHABLE_TEXT = ("i can't reach that",)

MADE_MELEE_KILL = "made_melee_kill"


class CombatSubstate(Enum):
    WALK_TO_INSTRUCTOR = auto()
    TALK_INSTRUCTOR_1 = auto()
    OPEN_EQUIPMENT = auto()
    OPEN_EQUIP_STATS = auto()
    EQUIP_DAGGER = auto()
    TALK_INSTRUCTOR_2 = auto()
    EQUIP_SWORD_SHIELD = auto()
    OPEN_COMBAT_STYLES = auto()
    KILL_MELEE_RAT = auto()
    TALK_INSTRUCTOR_3 = auto()
    EQUIP_BOW_ARROWS = auto()
    KILL_RANGE_RAT = auto()
    MOVE_ON = auto()


def _owns_all(wf: TutorialWorkflow, *item_ids: int) -> bool:
    return all(wf.owns(item_id) for item_id in item_ids)


def _dagger_carried(wf: TutorialWorkflow) -> bool:
    return wf.has(DAGGER_ID) and not wf.wearing(DAGGER_ID)


def _at_instructor(wf: TutorialWorkflow) -> bool:
    instructor = wf.npc(INSTRUCTOR_ID)
    return wf.near(instructor if instructor is not None else INSTRUCTOR_TILE, INSTRUCTOR_RADIUS)


def _made_melee_kill(wf: TutorialWorkflow) -> bool:
    return wf.flag(MADE_MELEE_KILL) or wf.text_has(*MELEE_KILL_TEXT)


RULES = (
    InferenceRule("move-on text", CombatSubstate.MOVE_ON, lambda wf: wf.text_has(*MOVE_ON_TEXT)),
    InferenceRule("ranged gear worn", CombatSubstate.KILL_RANGE_RAT, lambda wf: wf.wearing(BOW_ID, ARROWS_ID)),
    InferenceRule("ranged gear owned", CombatSubstate.EQUIP_BOW_ARROWS, lambda wf: _owns_all(wf, BOW_ID, ARROWS_ID)),
    InferenceRule("melee kill", CombatSubstate.TALK_INSTRUCTOR_3, _made_melee_kill),
    InferenceRule(
        "attack prompt",
        CombatSubstate.KILL_MELEE_RAT,
        lambda wf: wf.wearing(SWORD_ID, SHIELD_ID) and wf.text_has(*ATTACK_PROMPT_TEXT),
    ),
    InferenceRule("melee gear worn", CombatSubstate.OPEN_COMBAT_STYLES, lambda wf: wf.wearing(SWORD_ID, SHIELD_ID)),
    InferenceRule("melee gear owned", CombatSubstate.EQUIP_SWORD_SHIELD, lambda wf: _owns_all(wf, SWORD_ID, SHIELD_ID)),
    InferenceRule("dagger worn", CombatSubstate.TALK_INSTRUCTOR_2, lambda wf: wf.wearing(DAGGER_ID)),
    InferenceRule(
        "stats open",
        CombatSubstate.EQUIP_DAGGER,
        lambda wf: _dagger_carried(wf) and wf.element_visible(EQUIPMENT_STATS_INTERFACE),
    ),
    InferenceRule(
        "equipment open",
        CombatSubstate.OPEN_EQUIP_STATS,
        lambda wf: _dagger_carried(wf) and wf.element_visible(EQUIPMENT_STATS_BUTTON),
    ),
    InferenceRule("dagger carried", CombatSubstate.OPEN_EQUIPMENT, _dagger_carried),
    InferenceRule("at instructor", CombatSubstate.TALK_INSTRUCTOR_1, _at_instructor),
    InferenceRule("fallback", CombatSubstate.WALK_TO_INSTRUCTOR, always),
)


def _walk_to_instructor_tile(wf: TutorialWorkflow) -> int:
    instructor = wf.npc(INSTRUCTOR_ID)
    return wf.walk_to(instructor if instructor is not None else INSTRUCTOR_TILE)


def walk_to_instructor(wf: TutorialWorkflow) -> int:
    if not _at_instructor(wf):
        return _walk_to_instructor_tile(wf)
    wf.transition(CombatSubstate.TALK_INSTRUCTOR_1, reason="arrived")
    return wf.wait()


def _talk(wf: TutorialWorkflow, done: bool, next_substate: CombatSubstate, reason: str) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if done:
        wf.transition(next_substate, reason=reason)
        return wf.wait()
    if _at_instructor(wf):
        return wf.talk_to(INSTRUCTOR_ID) or wf.wait()
    return _walk_to_instructor_tile(wf)


def talk_instructor_1(wf: TutorialWorkflow) -> int:
    return _talk(wf, wf.has(DAGGER_ID), CombatSubstate.OPEN_EQUIPMENT, "equipping items")


def open_equipment(wf: TutorialWorkflow) -> int:
    return wf.click_then(EQUIPMENT_TAB, CombatSubstate.OPEN_EQUIP_STATS)


def open_equip_stats(wf: TutorialWorkflow) -> int:
    return wf.click_then(EQUIPMENT_STATS_BUTTON, CombatSubstate.EQUIP_DAGGER)


def equip_dagger(wf: TutorialWorkflow) -> int:
    if wf.wearing(DAGGER_ID):
        wf.transition(CombatSubstate.TALK_INSTRUCTOR_2, reason="dagger worn")
        return wf.wait()
    return wf.wield(DAGGER_ID) or wf.wait()


def talk_instructor_2(wf: TutorialWorkflow) -> int:
    done = _owns_all(wf, SWORD_ID, SHIELD_ID)
    return _talk(wf, done, CombatSubstate.EQUIP_SWORD_SHIELD, "received sword and shield")


def equip_sword_shield(wf: TutorialWorkflow) -> int:
    if wf.wearing(SWORD_ID, SHIELD_ID):
        wf.transition(CombatSubstate.OPEN_COMBAT_STYLES, reason="melee gear worn")
        return wf.wait()
    for item_id in (SWORD_ID, SHIELD_ID):
        if not wf.wearing(item_id):
            step = wf.wield(item_id)
            if step is not None:
                return step
    return wf.wait()


def open_combat_styles(wf: TutorialWorkflow) -> int:
    return wf.click_then(COMBAT_STYLES_TAB, CombatSubstate.KILL_MELEE_RAT)


def _attack_rat(wf: TutorialWorkflow, approach: Tile, *, open_gate: bool) -> int:
    if wf.world.is_player_busy():
        return wf.delay(TALK)
    if wf.text_has(*UNREACHABLE_TEXT):
        return wf.walk_to(approach)
    rat = wf.npc(RAT_ID)
    if rat is not None and not rat.interacting:
        return wf.interact(rat, "Attack", ATTACK)
    if open_gate:
        gate = wf.scene_object(RAT_GATE_ID)
        if gate is not None and rat is None:
            return wf.interact(gate, "Open", TALK)
    return wf.walk_to(approach)


def kill_melee_rat(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.text_has(*MELEE_KILL_TEXT):
        wf.set_flag(MADE_MELEE_KILL)
        wf.transition(CombatSubstate.TALK_INSTRUCTOR_3, reason="melee kill")
        return wf.wait()
    return _attack_rat(wf, RAT_PEN_TILE, open_gate=True)


def talk_instructor_3(wf: TutorialWorkflow) -> int:
    wf.set_flag(MADE_MELEE_KILL)
    done = _owns_all(wf, BOW_ID, ARROWS_ID)
    return _talk(wf, done, CombatSubstate.EQUIP_BOW_ARROWS, "received bow and arrows")


def equip_bow_arrows(wf: TutorialWorkflow) -> int:
    if wf.wearing(BOW_ID, ARROWS_ID):
        wf.transition(CombatSubstate.KILL_RANGE_RAT, reason="ranged gear worn")
        return wf.wait()
    for item_id in (BOW_ID, ARROWS_ID):
        if not wf.wearing(item_id):
            step = wf.wield(item_id)
            if step is not None:
                return step
    return wf.wait()


def kill_range_rat(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.text_has(*MOVE_ON_TEXT):
        wf.transition(CombatSubstate.MOVE_ON, reason="ranged kill")
        return wf.wait()
    return _attack_rat(wf, RANGED_TILE, open_gate=False)


DEFINITION = StageDefinition(
    stage=Stage.COMBAT_INSTRUCTOR,
    substates=CombatSubstate,
    terminal=CombatSubstate.MOVE_ON,
    next_stage=Stage.BANKER,
    rules=RULES,
    handlers={
        CombatSubstate.WALK_TO_INSTRUCTOR: walk_to_instructor,
        CombatSubstate.TALK_INSTRUCTOR_1: talk_instructor_1,
        CombatSubstate.OPEN_EQUIPMENT: open_equipment,
        CombatSubstate.OPEN_EQUIP_STATS: open_equip_stats,
        CombatSubstate.EQUIP_DAGGER: equip_dagger,
        CombatSubstate.TALK_INSTRUCTOR_2: talk_instructor_2,
        CombatSubstate.EQUIP_SWORD_SHIELD: equip_sword_shield,
        CombatSubstate.OPEN_COMBAT_STYLES: open_combat_styles,
        CombatSubstate.KILL_MELEE_RAT: kill_melee_rat,
        CombatSubstate.TALK_INSTRUCTOR_3: talk_instructor_3,
        CombatSubstate.EQUIP_BOW_ARROWS: equip_bow_arrows,
        CombatSubstate.KILL_RANGE_RAT: kill_range_rat,
    },
    flags=(MADE_MELEE_KILL,),
    description="Wield the dagger, then sword and shield, kill a rat in melee and one at range.",
)

__all__ = ["CombatSubstate", "DEFINITION", "MADE_MELEE_KILL", "RULES"]
