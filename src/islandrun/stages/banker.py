"""
Banker: bank booth, poll booth and the Account Guide.

Every step here is confirmed by the tutorial text, so the rules lean on it
more than on inventory evidence.
"""

from __future__ import annotations

from enum import Enum, auto

from ..core.macro_state import Stage
from ..core.timing import CLICK, TALK
from ..core.tutorial import TutorialWorkflow
from ..core.workflow import InferenceRule, StageDefinition, always
from ..world.oracle import Tile

BANK_BOOTH_ID = 10083
POLL_BOOTH_ID = 26815
ACCOUNT_GUIDE_ID = 3310
BANK_TILE = Tile(3122, 3123, 0)
POLL_TILE = Tile(3120, 3121, 0)
ACCOUNT_GUIDE_TILE = Tile(3125, 3124, 0)
ARRIVAL_RADIUS = 2

ACCOUNT_MANAGEMENT_TAB = (164, 39)
BANK_INTERFACE = (12, 0)
BANK_CLOSE = (12, 11)
POLL_INTERFACE = (310, 2)
POLL_CLOSE = (310, 7)

MOVE_ON_TEXT = ("continue through the",)
ACCOUNT_OPENED_TEXT = ("this is your account management",)
ACCOUNT_PROMPT_TEXT = ("open your account management",)
ACCOUNT_GUIDE_TEXT = ("account guide",)
POLL_TEXT = ("poll booth",)


class BankerSubstate(Enum):
    WALK_TO_BANK = auto()
    OPEN_BANK = auto()
    CLOSE_BANK = auto()
    WALK_TO_POLL_BOOTH = auto()
    OPEN_POLL_BOOTH = auto()
    CLOSE_POLL = auto()
    WALK_TO_ACCOUNT_GUIDE = auto()
    TALK_ACCOUNT_GUIDE = auto()
    OPEN_ACCOUNT_MANAGEMENT = auto()
    FINAL_DIALOGUE = auto()
    MOVE_ON = auto()


def _at(tile: Tile):
    return lambda wf: wf.near(tile, ARRIVAL_RADIUS)


RULES = (
    InferenceRule("move-on text", BankerSubstate.MOVE_ON, lambda wf: wf.text_has(*MOVE_ON_TEXT)),
    InferenceRule("bank open", BankerSubstate.CLOSE_BANK, lambda wf: wf.element_visible(BANK_INTERFACE)),
    InferenceRule("poll open", BankerSubstate.CLOSE_POLL, lambda wf: wf.element_visible(POLL_INTERFACE)),
    InferenceRule("account menu open", BankerSubstate.FINAL_DIALOGUE, lambda wf: wf.text_has(*ACCOUNT_OPENED_TEXT)),
    InferenceRule(
        "account menu prompt",
        BankerSubstate.OPEN_ACCOUNT_MANAGEMENT,
        lambda wf: wf.text_has(*ACCOUNT_PROMPT_TEXT),
    ),
    InferenceRule(
        "at account guide",
        BankerSubstate.TALK_ACCOUNT_GUIDE,
        lambda wf: wf.text_has(*ACCOUNT_GUIDE_TEXT) and _at(ACCOUNT_GUIDE_TILE)(wf),
    ),
    InferenceRule("account guide text", BankerSubstate.WALK_TO_ACCOUNT_GUIDE, lambda wf: wf.text_has(*ACCOUNT_GUIDE_TEXT)),
    InferenceRule(
        "at poll booth",
        BankerSubstate.OPEN_POLL_BOOTH,
        lambda wf: wf.text_has(*POLL_TEXT) and _at(POLL_TILE)(wf),
    ),
    InferenceRule("poll text", BankerSubstate.WALK_TO_POLL_BOOTH, lambda wf: wf.text_has(*POLL_TEXT)),
    InferenceRule("at bank", BankerSubstate.OPEN_BANK, _at(BANK_TILE)),
    InferenceRule("fallback", BankerSubstate.WALK_TO_BANK, always),
)


def _walk(tile: Tile, arrived: BankerSubstate):
    def handler(wf: TutorialWorkflow) -> int:
        if not wf.near(tile, ARRIVAL_RADIUS):
            return wf.walk_to(tile)
        wf.transition(arrived, reason="arrived")
        return wf.wait()

    return handler


def _open_booth(booth_id: int, action: str, interface, opened: BankerSubstate):
    def handler(wf: TutorialWorkflow) -> int:
        step = wf.drive_dialog()
        if step is not None:
            return step
        if wf.element_visible(interface):
            wf.transition(opened, reason="interface open")
            return wf.wait()
        if wf.world.is_player_busy():
            return wf.wait()
        booth = wf.scene_object(booth_id)
        if booth is None:
            return wf.wait()
        return wf.interact(booth, action, TALK)

    return handler


def _close(interface, close_button, next_substate: BankerSubstate):
    def handler(wf: TutorialWorkflow) -> int:
        if not wf.element_visible(interface):
            wf.transition(next_substate, reason="interface closed")
            return wf.wait()
        if wf.click(close_button):
            wf.transition(next_substate, reason="closed interface")
            return wf.delay(CLICK)
        return wf.wait()

    return handler


def talk_account_guide(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.text_has(*ACCOUNT_PROMPT_TEXT):
        wf.transition(BankerSubstate.OPEN_ACCOUNT_MANAGEMENT, reason="account menu prompt")
        return wf.wait()
    return wf.talk_to(ACCOUNT_GUIDE_ID) or wf.wait()


def open_account_management(wf: TutorialWorkflow) -> int:
    return wf.click_then(ACCOUNT_MANAGEMENT_TAB, BankerSubstate.FINAL_DIALOGUE)


def final_dialogue(wf: TutorialWorkflow) -> int:
    step = wf.drive_dialog()
    if step is not None:
        return step
    if wf.text_has(*MOVE_ON_TEXT):
        wf.transition(BankerSubstate.MOVE_ON, reason="move-on text")
        return wf.wait()
    guide = wf.npc(ACCOUNT_GUIDE_ID)
    if guide is not None and wf.near(guide, ARRIVAL_RADIUS):
        return wf.talk_to(ACCOUNT_GUIDE_ID) or wf.wait()
    return wf.walk_to(ACCOUNT_GUIDE_TILE)


DEFINITION = StageDefinition(
    stage=Stage.BANKER,
    substates=BankerSubstate,
    terminal=BankerSubstate.MOVE_ON,
    next_stage=Stage.PRAYER_INSTRUCTOR,
    rules=RULES,
    handlers={
        BankerSubstate.WALK_TO_BANK: _walk(BANK_TILE, BankerSubstate.OPEN_BANK),
        BankerSubstate.OPEN_BANK: _open_booth(BANK_BOOTH_ID, "Bank", BANK_INTERFACE, BankerSubstate.CLOSE_BANK),
        BankerSubstate.CLOSE_BANK: _close(BANK_INTERFACE, BANK_CLOSE, BankerSubstate.WALK_TO_POLL_BOOTH),
        BankerSubstate.WALK_TO_POLL_BOOTH: _walk(POLL_TILE, BankerSubstate.OPEN_POLL_BOOTH),
        BankerSubstate.OPEN_POLL_BOOTH: _open_booth(POLL_BOOTH_ID, "Use", POLL_INTERFACE, BankerSubstate.CLOSE_POLL),
        BankerSubstate.CLOSE_POLL: _close(POLL_INTERFACE, POLL_CLOSE, BankerSubstate.WALK_TO_ACCOUNT_GUIDE),
        BankerSubstate.WALK_TO_ACCOUNT_GUIDE: _walk(ACCOUNT_GUIDE_TILE, BankerSubstate.TALK_ACCOUNT_GUIDE),
        BankerSubstate.TALK_ACCOUNT_GUIDE: talk_account_guide,
        BankerSubstate.OPEN_ACCOUNT_MANAGEMENT: open_account_management,
        BankerSubstate.FINAL_DIALOGUE: final_dialogue,
    },
    description="Open and close the bank and poll booth, then visit the Account Guide.",
)

__all__ = ["BankerSubstate", "DEFINITION", "RULES"]
