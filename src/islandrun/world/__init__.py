"""
World Oracle interface and the implementations shipped with the runner.
"""

from .oracle import (  # noqa: F401
    Dialog,
    Entity,
    EntityKind,
    Item,
    ItemRef,
    Tile,
    UIElement,
    WidgetLocator,
    WorldOracle,
)
from .guarded import GuardedOracle  # noqa: F401
from .scripted import ScriptedDialog, ScriptedElement, ScriptedWorld, TEXT_BOX  # noqa: F401

__all__ = [
    "Dialog",
    "Entity",
    "EntityKind",
    "GuardedOracle",
    "Item",
    "ItemRef",
    "ScriptedDialog",
    "ScriptedElement",
    "ScriptedWorld",
    "TEXT_BOX",
    "Tile",
    "UIElement",
    "WidgetLocator",
    "WorldOracle",
]
