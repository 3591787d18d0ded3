"""
Deterministic in-memory World Oracle.

``ScriptedWorld`` holds a mutable snapshot of everything the workflows can
observe and records every command it receives instead of acting on a game
client. Tests mutate the snapshot between ticks; the dry-run script loads one
from JSON.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .oracle import (
    Dialog,
    Entity,
    EntityKind,
    Item,
    ItemRef,
    TEXT_BOX,
    Target,
    Tile,
    UIElement,
    WidgetLocator,
    WorldOracle,
    target_tile,
)

Command = Tuple[Any, ...]
Reaction = Callable[["ScriptedWorld", Command], None]


class ScriptedElement(UIElement):
    def __init__(self, text: str = "", visible: bool = True) -> None:
        self._text = text
        self._visible = visible
        self.clicks = 0
        self.on_click: Optional[Callable[[], None]] = None

    @property
    def visible(self) -> bool:
        return self._visible

    @visible.setter
    def visible(self, value: bool) -> None:
        self._visible = bool(value)

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        self._text = value

    def click(self) -> bool:
        self.clicks += 1
        if self.on_click is not None:
            self.on_click()
        return True


class ScriptedDialog(Dialog):
    """
    Dialog whose state is set by the test.

    ``actions`` records ``("choose", n)`` and ``("continue",)`` entries in
    the order the runner issued them.
    """

    def __init__(
        self,
        *,
        open_: bool = False,
        options: Sequence[str] = (),
        can_continue: bool = False,
    ) -> None:
        self.open = open_
        self.option_texts: List[str] = list(options)
        self.continuable = can_continue
        self.actions: List[Tuple[Any, ...]] = []

    def show_options(self, *options: str) -> None:
        self.open = True
        self.option_texts = list(options)
        self.continuable = False

    def show_message(self) -> None:
        self.open = True
        self.option_texts = []
        self.continuable = True

    def close(self) -> None:
        self.open = False
        self.option_texts = []
        self.continuable = False

    def is_open(self) -> bool:
        return self.open

    def is_viewing_options(self) -> bool:
        return self.open and bool(self.option_texts)

    def can_continue(self) -> bool:
        return self.open and self.continuable

    def options(self) -> Sequence[str]:
        return tuple(self.option_texts)

    def choose_option(self, index: int) -> bool:
        self.actions.append(("choose", index))
        return self.is_viewing_options()

    def continue_dialog(self) -> bool:
        self.actions.append(("continue",))
        return self.can_continue()


class ScriptedWorld(WorldOracle):
    """
    Mutable world snapshot implementing :class:`WorldOracle`.

    Attributes
    ----------
    commands:
        Every command received, as tuples such as ``("interact", 3308, "Talk-to")``.
    queries:
        Number of query calls served; construction code is expected to leave
        this at zero.
    """

    def __init__(
        self,
        *,
        position: Optional[Tile] = None,
        npcs: Iterable[Entity] = (),
        objects: Iterable[Entity] = (),
        inventory: Iterable[Item] = (),
        equipment: Iterable[Item] = (),
        busy: bool = False,
        animation: int = -1,
        hint_arrow: Optional[int] = None,
        spells: Iterable[str] = (),
    ) -> None:
        self.position = position
        self.npcs: List[Entity] = list(npcs)
        self.objects: List[Entity] = list(objects)
        self.inventory: List[Item] = list(inventory)
        self.equipment: List[Item] = list(equipment)
        self.busy = busy
        self.animation = animation
        self.hint_arrow = hint_arrow
        self.spells = {spell.lower() for spell in spells}
        self.widgets: Dict[WidgetLocator, ScriptedElement] = {}
        self.scripted_dialog = ScriptedDialog()
        self.commands: List[Command] = []
        self.queries = 0
        self._reactions: Dict[str, List[Reaction]] = {}

    # ------------------------------------------------------------------ #
    # Snapshot editing helpers
    # ------------------------------------------------------------------ #

    def set_text(self, text: str) -> None:
        self.set_widget(TEXT_BOX, text)

    def set_widget(self, locator: WidgetLocator, text: str = "", *, visible: bool = True) -> ScriptedElement:
        element = self.widgets.get(tuple(locator))
        if element is None:
            element = ScriptedElement(text, visible)
            self.widgets[tuple(locator)] = element
        else:
            element.text = text
            element.visible = visible
        return element

    def hide_widget(self, locator: WidgetLocator) -> None:
        self.widgets.pop(tuple(locator), None)

    def add_npc(self, npc_id: int, name: str, position: Tile, **kwargs: bool) -> Entity:
        entity = Entity(EntityKind.NPC, npc_id, name, position, **kwargs)
        self.npcs.append(entity)
        return entity

    def add_object(self, object_id: int, name: str, position: Tile) -> Entity:
        entity = Entity(EntityKind.OBJECT, object_id, name, position)
        self.objects.append(entity)
        return entity

    def remove_entities(self, *ids: int) -> None:
        self.npcs = [npc for npc in self.npcs if npc.id not in ids]
        self.objects = [obj for obj in self.objects if obj.id not in ids]

    def give(self, item_id: int, name: str, quantity: int = 1) -> Item:
        item = Item(item_id, name, quantity)
        self.inventory.append(item)
        return item

    def take(self, ref: ItemRef) -> None:
        self.inventory = [item for item in self.inventory if not item.matches(ref)]

    def equip(self, item_id: int, name: str) -> Item:
        item = Item(item_id, name)
        self.take(item_id)
        self.equipment.append(item)
        return item

    def on(self, command: str, reaction: Reaction) -> None:
        """Register ``reaction`` to run after every ``command`` of that name."""

        self._reactions.setdefault(command, []).append(reaction)

    def command_names(self) -> List[str]:
        return [str(command[0]) for command in self.commands]

    # ------------------------------------------------------------------ #
    # WorldOracle queries
    # ------------------------------------------------------------------ #

    def find_entity(
        self,
        kind: EntityKind,
        *,
        ids: Sequence[int] = (),
        names: Sequence[str] = (),
    ) -> Optional[Entity]:
        self.queries += 1
        pool = self.npcs if kind is EntityKind.NPC else self.objects
        matches = [entity for entity in pool if entity.matches(ids, names) and not entity.dead]
        if not matches:
            return None
        if self.position is None:
            return matches[0]
        origin = self.position
        return min(matches, key=lambda entity: origin.distance_to(entity.position))

    def player_position(self) -> Optional[Tile]:
        self.queries += 1
        return self.position

    def is_player_busy(self) -> bool:
        self.queries += 1
        return self.busy

    def inventory_items(self) -> Sequence[Item]:
        self.queries += 1
        return tuple(self.inventory)

    def equipment_items(self) -> Sequence[Item]:
        self.queries += 1
        return tuple(self.equipment)

    def ui_element(self, locator: WidgetLocator) -> Optional[UIElement]:
        self.queries += 1
        return self.widgets.get(tuple(locator))

    @property
    def dialog(self) -> Dialog:
        self.queries += 1
        return self.scripted_dialog

    def hint_arrow_npc(self) -> Optional[Entity]:
        self.queries += 1
        if self.hint_arrow is None:
            return None
        return next((npc for npc in self.npcs if npc.id == self.hint_arrow), None)

    def player_animation(self) -> int:
        self.queries += 1
        return self.animation

    def can_cast(self, spell: str) -> bool:
        self.queries += 1
        return spell.lower() in self.spells

    # ------------------------------------------------------------------ #
    # WorldOracle commands
    # ------------------------------------------------------------------ #

    def _record(self, *command: Any) -> bool:
        self.commands.append(tuple(command))
        for reaction in self._reactions.get(str(command[0]), ()):
            reaction(self, tuple(command))
        return True

    def move_to(self, target: Target) -> bool:
        return self._record("move_to", target_tile(target))

    def interact(self, entity: Entity, action: str) -> bool:
        return self._record("interact", entity.id, action)

    def item_use_on(self, item: Item, target: Union[Item, Entity]) -> bool:
        return self._record("use", item.id, target.id)

    def item_interact(self, item: Item, action: str) -> bool:
        return self._record("item", item.id, action)

    def cast_spell(self, spell: str, target: Entity) -> bool:
        return self._record("cast", spell, target.id)

    # ------------------------------------------------------------------ #
    # Snapshots
    # ------------------------------------------------------------------ #

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Any]) -> "ScriptedWorld":
        """
        Build a world from a JSON-compatible mapping.

        Recognised keys: ``position`` (``[x, y, plane]``), ``busy``,
        ``animation``, ``hint_arrow``, ``spells``, ``npcs``, ``objects``
        (lists of ``{"id", "name", "position", "dead", "interacting"}``),
        ``inventory``, ``equipment`` (lists of ``{"id", "name", "quantity"}``),
        ``text`` (tutorial text box), ``widgets`` (``{"164,41": {"text",
        "visible"}}``) and ``dialog`` (``{"open", "options", "can_continue"}``).
        """

        world = cls(
            position=_tile(data.get("position")),
            busy=bool(data.get("busy", False)),
            animation=int(data.get("animation", -1)),
            hint_arrow=data.get("hint_arrow"),
            spells=data.get("spells", ()),
        )
        for raw in data.get("npcs", ()):
            world.npcs.append(_entity(EntityKind.NPC, raw))
        for raw in data.get("objects", ()):
            world.objects.append(_entity(EntityKind.OBJECT, raw))
        for raw in data.get("inventory", ()):
            world.inventory.append(Item(int(raw["id"]), str(raw["name"]), int(raw.get("quantity", 1))))
        for raw in data.get("equipment", ()):
            world.equipment.append(Item(int(raw["id"]), str(raw["name"]), int(raw.get("quantity", 1))))
        if data.get("text") is not None:
            world.set_text(str(data["text"]))
        for key, raw in (data.get("widgets") or {}).items():
            locator = tuple(int(part) for part in str(key).split(","))
            world.set_widget(locator, str(raw.get("text", "")), visible=bool(raw.get("visible", True)))
        dialog = data.get("dialog") or {}
        world.scripted_dialog = ScriptedDialog(
            open_=bool(dialog.get("open", False)),
            options=dialog.get("options", ()),
            can_continue=bool(dialog.get("can_continue", False)),
        )
        return world

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ScriptedWorld":
        with Path(path).open("r", encoding="utf-8") as handle:
            return cls.from_snapshot(json.load(handle))


def _tile(raw: Optional[Sequence[int]]) -> Optional[Tile]:
    if raw is None:
        return None
    values = [int(value) for value in raw]
    return Tile(*values[:3])


def _entity(kind: EntityKind, raw: Mapping[str, Any]) -> Entity:
    position = _tile(raw.get("position")) or Tile(0, 0)
    return Entity(
        kind,
        int(raw["id"]),
        str(raw.get("name", "")),
        position,
        dead=bool(raw.get("dead", False)),
        interacting=bool(raw.get("interacting", False)),
    )


__all__ = ["ScriptedDialog", "ScriptedElement", "ScriptedWorld", "TEXT_BOX"]
