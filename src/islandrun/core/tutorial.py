"""
Tutorial-island helpers layered on top of :class:`SubstateWorkflow`.

Stage handlers receive a :class:`TutorialWorkflow` and use these helpers so
each handler reads as "one observation, at most one command, one delay".
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..world.oracle import TEXT_BOX, Entity, EntityKind, Item, ItemRef, Target, Tile, WidgetLocator
from .timing import CLICK, DIALOG_CONTINUE, DIALOG_OPTION, IDLE, TALK, WALK, Timing
from .workflow import S, SubstateWorkflow

logger = logging.getLogger(__name__)


class TutorialWorkflow(SubstateWorkflow[S]):
    """Substate workflow with the observations and commands every stage shares."""

    # ------------------------------------------------------------------ #
    # Observations
    # ------------------------------------------------------------------ #

    def tutorial_text(self) -> str:
        """Lower-cased text of the tutorial instruction box ("" when hidden)."""

        element = self.world.ui_element(TEXT_BOX)
        if element is None or not element.visible:
            return ""
        return (element.text or "").lower()

    def text_has(self, *snippets: str) -> bool:
        text = self.tutorial_text()
        return bool(text) and any(snippet.lower() in text for snippet in snippets)

    def element_visible(self, locator: WidgetLocator) -> bool:
        element = self.world.ui_element(locator)
        return element is not None and element.visible

    def element_text(self, locator: WidgetLocator) -> str:
        element = self.world.ui_element(locator)
        if element is None or not element.visible:
            return ""
        return (element.text or "").lower()

    def has(self, *refs: ItemRef) -> bool:
        """Inventory holds at least one of ``refs``."""

        return self.world.inventory_contains(*refs)

    def has_all(self, *refs: ItemRef) -> bool:
        return all(self.world.inventory_contains(ref) for ref in refs)

    def owns(self, ref: ItemRef) -> bool:
        """``ref`` is either carried or worn."""

        return self.world.inventory_contains(ref) or self.world.equipment_contains(ref)

    def wearing(self, *refs: ItemRef) -> bool:
        return all(self.world.equipment_contains(ref) for ref in refs)

    def npc(self, *ids: int, names: Sequence[str] = ()) -> Optional[Entity]:
        return self.world.find_entity(EntityKind.NPC, ids=ids, names=names)

    def scene_object(self, *ids: int, names: Sequence[str] = ()) -> Optional[Entity]:
        return self.world.find_entity(EntityKind.OBJECT, ids=ids, names=names)

    def near(self, target: Optional[Target], radius: int) -> bool:
        return target is not None and self.world.is_near(target, radius)

    def position(self) -> Optional[Tile]:
        return self.world.player_position()

    # ------------------------------------------------------------------ #
    # Commands (each issues at most one world command)
    # ------------------------------------------------------------------ #

    def drive_dialog(self, prefer: Sequence[str] = ()) -> Optional[int]:
        """
        Push an open dialog forward by exactly one step.

        Options are answered before continuing. ``prefer`` is in priority
        order: the option containing the earliest matching snippet wins,
        otherwise option 1. Returns ``None`` when no dialog step was taken.
        """

        dialog = self.world.dialog
        if dialog.is_viewing_options():
            index = _preferred_option(dialog.options(), prefer)
            dialog.choose_option(index)
            logger.info("%s: chose dialog option %d", self.name, index)
            return self.delay(DIALOG_OPTION)
        if dialog.is_open() and dialog.can_continue():
            dialog.continue_dialog()
            logger.debug("%s: continued dialog", self.name)
            return self.delay(DIALOG_CONTINUE)
        return None

    def talk_to(self, *ids: int) -> Optional[int]:
        """Start talking to one of ``ids``, preferring the NPC under the hint arrow."""

        if self.world.is_player_busy():
            return None
        arrow = self.world.hint_arrow_npc()
        target = arrow if arrow is not None and arrow.id in ids else self.npc(*ids)
        if target is None:
            return None
        self.world.interact(target, "Talk-to")
        logger.info("%s: talking to %s", self.name, target.name or target.id)
        return self.delay(TALK)

    def click(self, locator: WidgetLocator) -> bool:
        element = self.world.ui_element(locator)
        if element is None or not element.visible:
            return False
        element.click()
        logger.info("%s: clicked widget %s", self.name, locator)
        return True

    def walk_to(self, target: Target, timing: Timing = WALK) -> int:
        self.world.move_to(target)
        logger.debug("%s: walking to %s", self.name, target)
        return self.delay(timing)

    def interact(self, entity: Entity, action: str, timing: Timing) -> int:
        self.world.interact(entity, action)
        logger.info("%s: %s %s", self.name, action, entity.name or entity.id)
        return self.delay(timing)

    def use_on(self, item: Item, target, timing: Timing) -> int:
        self.world.item_use_on(item, target)
        logger.info("%s: using %s on %s", self.name, item.name, getattr(target, "name", target))
        return self.delay(timing)

    def wield(self, ref: ItemRef) -> Optional[int]:
        item = self.world.inventory_first(ref)
        if item is None:
            return None
        self.world.item_interact(item, "Wield")
        logger.info("%s: wielding %s", self.name, item.name)
        return self.delay(CLICK)

    def drop(self, ref: ItemRef) -> Optional[int]:
        item = self.world.inventory_first(ref)
        if item is None:
            return None
        self.world.item_interact(item, "Drop")
        logger.info("%s: dropping %s", self.name, item.name)
        return self.delay(CLICK)

    def click_then(self, locator: WidgetLocator, substate: S) -> int:
        """Click a tab or button and move on to ``substate`` once the click went out."""

        if self.click(locator):
            self.transition(substate, reason=f"clicked {locator}")
            return self.delay(CLICK)
        return self.wait()

    def wait(self) -> int:
        return self.delay(IDLE)


def _preferred_option(options: Sequence[str], prefer: Sequence[str]) -> int:
    lowered = [text.lower() for text in options]
    for snippet in prefer:
        for position, text in enumerate(lowered, start=1):
            if snippet.lower() in text:
                return position
    return 1


__all__ = ["TEXT_BOX", "TutorialWorkflow"]
