"""
Fail-soft boundary around a World Oracle.

Infrastructure failures raised by the wrapped oracle are logged and turned
into the same answers the oracle gives for "not found", so a workflow never
has to distinguish a crashed query from an absent entity.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, TypeVar, Union

from .oracle import (
    Dialog,
    Entity,
    EntityKind,
    Item,
    ItemRef,
    Target,
    Tile,
    UIElement,
    WidgetLocator,
    WorldOracle,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _guard(call: str, default: T, fn: Callable[..., T], *args, **kwargs) -> T:
    try:
        return fn(*args, **kwargs)
    except Exception as exc:  # noqa: BLE001 - downgraded to "not found"
        logger.warning("World call %s failed (%s: %s); treating as not found", call, type(exc).__name__, exc)
        return default


class GuardedElement(UIElement):
    def __init__(self, inner: UIElement, locator: WidgetLocator) -> None:
        self._inner = inner
        self._locator = locator

    @property
    def visible(self) -> bool:
        return bool(_guard(f"ui_element{self._locator}.visible", False, lambda: self._inner.visible))

    @property
    def text(self) -> str:
        return _guard(f"ui_element{self._locator}.text", "", lambda: self._inner.text) or ""

    def click(self) -> bool:
        return bool(_guard(f"ui_element{self._locator}.click", False, self._inner.click))


class GuardedDialog(Dialog):
    """Resolves the wrapped oracle's dialog on every call."""

    def __init__(self, source: Callable[[], Dialog]) -> None:
        self._source = source

    def _call(self, name: str, default: T, *args) -> T:
        def invoke():
            return getattr(self._source(), name)(*args)

        return _guard(f"dialog.{name}", default, invoke)

    def is_open(self) -> bool:
        return bool(self._call("is_open", False))

    def is_viewing_options(self) -> bool:
        return bool(self._call("is_viewing_options", False))

    def can_continue(self) -> bool:
        return bool(self._call("can_continue", False))

    def choose_option(self, index: int) -> bool:
        return bool(self._call("choose_option", False, index))

    def continue_dialog(self) -> bool:
        return bool(self._call("continue_dialog", False))

    def options(self) -> Sequence[str]:
        return tuple(self._call("options", ()) or ())


class GuardedOracle(WorldOracle):
    """
    Wraps ``inner`` so that every query and command is fail-soft.

    Parameters
    ----------
    inner:
        Oracle bridging to the game. Wrapping an already guarded oracle
        returns a wrapper around its inner oracle, so guarding is idempotent.
    """

    def __init__(self, inner: WorldOracle) -> None:
        if isinstance(inner, GuardedOracle):
            inner = inner.inner
        self.inner = inner
        self._dialog = GuardedDialog(lambda: self.inner.dialog)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def find_entity(
        self,
        kind: EntityKind,
        *,
        ids: Sequence[int] = (),
        names: Sequence[str] = (),
    ) -> Optional[Entity]:
        return _guard("find_entity", None, self.inner.find_entity, kind, ids=ids, names=names)

    def player_position(self) -> Optional[Tile]:
        return _guard("player_position", None, self.inner.player_position)

    def is_player_busy(self) -> bool:
        return bool(_guard("is_player_busy", False, self.inner.is_player_busy))

    def inventory_items(self) -> Sequence[Item]:
        return tuple(_guard("inventory_items", (), self.inner.inventory_items) or ())

    def equipment_items(self) -> Sequence[Item]:
        return tuple(_guard("equipment_items", (), self.inner.equipment_items) or ())

    def ui_element(self, locator: WidgetLocator) -> Optional[UIElement]:
        element = _guard("ui_element", None, self.inner.ui_element, locator)
        if element is None:
            return None
        return GuardedElement(element, locator)

    @property
    def dialog(self) -> Dialog:
        return self._dialog

    def hint_arrow_npc(self) -> Optional[Entity]:
        return _guard("hint_arrow_npc", None, self.inner.hint_arrow_npc)

    def player_animation(self) -> int:
        return _guard("player_animation", -1, self.inner.player_animation)

    def is_near(self, target: Target, radius: int) -> bool:
        return bool(_guard("is_near", False, self.inner.is_near, target, radius))

    def inventory_contains(self, *refs: ItemRef) -> bool:
        return bool(_guard("inventory_contains", False, self.inner.inventory_contains, *refs))

    def inventory_first(self, *refs: ItemRef) -> Optional[Item]:
        return _guard("inventory_first", None, self.inner.inventory_first, *refs)

    def equipment_contains(self, *refs: ItemRef) -> bool:
        return bool(_guard("equipment_contains", False, self.inner.equipment_contains, *refs))

    def can_cast(self, spell: str) -> bool:
        return bool(_guard("can_cast", False, self.inner.can_cast, spell))

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def move_to(self, target: Target) -> bool:
        return bool(_guard("move_to", False, self.inner.move_to, target))

    def interact(self, entity: Entity, action: str) -> bool:
        return bool(_guard("interact", False, self.inner.interact, entity, action))

    def item_use_on(self, item: Item, target: Union[Item, Entity]) -> bool:
        return bool(_guard("item_use_on", False, self.inner.item_use_on, item, target))

    def item_interact(self, item: Item, action: str) -> bool:
        return bool(_guard("item_interact", False, self.inner.item_interact, item, action))

    def cast_spell(self, spell: str, target: Entity) -> bool:
        return bool(_guard("cast_spell", False, self.inner.cast_spell, spell, target))


__all__ = ["GuardedDialog", "GuardedElement", "GuardedOracle"]
