"""
World Oracle interface consumed by the tutorial workflows.

Every query returns a point-in-time snapshot that may already be stale by the
time the next command is issued. "Not found" is an ordinary answer (``None``
or ``False``), never an exception.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple, Union

WidgetLocator = Tuple[int, ...]
ItemRef = Union[int, str]

# Tutorial instruction box shown at the bottom of the game screen.
TEXT_BOX: WidgetLocator = (263, 1, 0)

# Distance reported between tiles on different planes.
UNREACHABLE = 1 << 30


class EntityKind(str, Enum):
    NPC = "npc"
    OBJECT = "object"


@dataclass(frozen=True)
class Tile:
    """World coordinate (``plane`` 0 is the surface)."""

    x: int
    y: int
    plane: int = 0

    def distance_to(self, other: "Tile") -> int:
        """Chebyshev distance in tiles; :data:`UNREACHABLE` across planes."""

        if self.plane != other.plane:
            return UNREACHABLE
        return max(abs(self.x - other.x), abs(self.y - other.y))

    def offset(self, dx: int = 0, dy: int = 0) -> "Tile":
        return Tile(self.x + dx, self.y + dy, self.plane)

    def as_list(self) -> list[int]:
        return [self.x, self.y, self.plane]


@dataclass(frozen=True)
class Entity:
    """
    Snapshot of an NPC or scene object.

    Attributes
    ----------
    kind:
        NPC or scene object.
    id:
        Numeric identifier used by the game.
    name:
        Display name.
    position:
        Tile the entity occupied when the snapshot was taken.
    dead:
        ``True`` for NPCs playing their death animation.
    interacting:
        ``True`` when the NPC is already engaged (e.g. in combat with someone).
    """

    kind: EntityKind
    id: int
    name: str
    position: Tile
    dead: bool = False
    interacting: bool = False

    def matches(self, ids: Iterable[int] = (), names: Iterable[str] = ()) -> bool:
        id_set = set(ids)
        name_set = {name.lower() for name in names}
        if not id_set and not name_set:
            return True
        return self.id in id_set or self.name.lower() in name_set


@dataclass(frozen=True)
class Item:
    """Inventory or equipment item."""

    id: int
    name: str
    quantity: int = 1

    def matches(self, ref: ItemRef) -> bool:
        if isinstance(ref, str):
            return self.name.lower() == ref.lower()
        return self.id == ref


Target = Union[Tile, Entity]


def target_tile(target: Target) -> Tile:
    return target.position if isinstance(target, Entity) else target


class UIElement(ABC):
    """A widget on screen, addressed by a :data:`WidgetLocator`."""

    @property
    @abstractmethod
    def visible(self) -> bool:
        """Return ``True`` when the widget is currently rendered."""

    @property
    @abstractmethod
    def text(self) -> str:
        """Return the widget text (empty string when it has none)."""

    @abstractmethod
    def click(self) -> bool:
        """Click the widget; return ``True`` when the click was dispatched."""


class Dialog(ABC):
    """Modal NPC dialog subsystem."""

    @abstractmethod
    def is_open(self) -> bool:
        ...

    @abstractmethod
    def is_viewing_options(self) -> bool:
        ...

    @abstractmethod
    def can_continue(self) -> bool:
        ...

    @abstractmethod
    def choose_option(self, index: int) -> bool:
        """Choose the 1-based option ``index``."""

    @abstractmethod
    def continue_dialog(self) -> bool:
        ...

    def options(self) -> Sequence[str]:
        """Return the texts of the options currently shown, if the backend exposes them."""

        return ()


class WorldOracle(ABC):
    """
    Point-in-time queries and commands against the game world.

    A concrete implementation bridges to a game client. Implementations may
    raise on genuine infrastructure failure; the runner always wraps them in
    :class:`islandrun.world.guarded.GuardedOracle`, which downgrades such
    failures to "not found".
    """

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @abstractmethod
    def find_entity(
        self,
        kind: EntityKind,
        *,
        ids: Sequence[int] = (),
        names: Sequence[str] = (),
    ) -> Optional[Entity]:
        """Return the nearest live entity matching any of ``ids``/``names``."""

    @abstractmethod
    def player_position(self) -> Optional[Tile]:
        ...

    @abstractmethod
    def is_player_busy(self) -> bool:
        """Return ``True`` while the player is interacting or animating."""

    @abstractmethod
    def inventory_items(self) -> Sequence[Item]:
        ...

    @abstractmethod
    def equipment_items(self) -> Sequence[Item]:
        ...

    @abstractmethod
    def ui_element(self, locator: WidgetLocator) -> Optional[UIElement]:
        ...

    @property
    @abstractmethod
    def dialog(self) -> Dialog:
        ...

    def hint_arrow_npc(self) -> Optional[Entity]:
        """Return the NPC the tutorial hint arrow points at, if any."""

        return None

    def player_animation(self) -> int:
        return -1

    def is_near(self, target: Target, radius: int) -> bool:
        position = self.player_position()
        if position is None:
            return False
        return position.distance_to(target_tile(target)) <= radius

    def inventory_contains(self, *refs: ItemRef) -> bool:
        return self.inventory_first(*refs) is not None

    def inventory_first(self, *refs: ItemRef) -> Optional[Item]:
        for item in self.inventory_items():
            if any(item.matches(ref) for ref in refs):
                return item
        return None

    def equipment_contains(self, *refs: ItemRef) -> bool:
        return any(item.matches(ref) for item in self.equipment_items() for ref in refs)

    def can_cast(self, spell: str) -> bool:
        return False

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    @abstractmethod
    def move_to(self, target: Target) -> bool:
        ...

    @abstractmethod
    def interact(self, entity: Entity, action: str) -> bool:
        ...

    @abstractmethod
    def item_use_on(self, item: Item, target: Union[Item, Entity]) -> bool:
        ...

    @abstractmethod
    def item_interact(self, item: Item, action: str) -> bool:
        """Run an inventory action such as ``Wield`` on ``item``."""

    def cast_spell(self, spell: str, target: Entity) -> bool:
        return False


__all__ = [
    "Dialog",
    "Entity",
    "EntityKind",
    "Item",
    "ItemRef",
    "TEXT_BOX",
    "Target",
    "Tile",
    "UIElement",
    "UNREACHABLE",
    "WidgetLocator",
    "WorldOracle",
    "target_tile",
]
