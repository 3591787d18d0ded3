"""
Macro-State: the ordered tutorial stages and the controller capability
through which workflows hand control to one another.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol

from ..errors import ConfigurationError

if TYPE_CHECKING:  # pragma: no cover
    from .events import StageEvent


class Stage(str, Enum):
    """Tutorial stages in the order the island is played through."""

    GIELINOR_GUIDE = "GIELINOR_GUIDE"
    SURVIVAL_EXPERT = "SURVIVAL_EXPERT"
    MASTER_CHEF = "MASTER_CHEF"
    QUEST_GUIDE = "QUEST_GUIDE"
    MINING_INSTRUCTOR = "MINING_INSTRUCTOR"
    COMBAT_INSTRUCTOR = "COMBAT_INSTRUCTOR"
    BANKER = "BANKER"
    PRAYER_INSTRUCTOR = "PRAYER_INSTRUCTOR"
    MAGIC_INSTRUCTOR = "MAGIC_INSTRUCTOR"
    COMPLETE = "COMPLETE"

    @property
    def index(self) -> int:
        return list(Stage).index(self)

    def next(self) -> "Stage":
        members = list(Stage)
        return members[min(self.index + 1, len(members) - 1)]

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def parse(cls, value: "str | Stage") -> "Stage":
        if isinstance(value, Stage):
            return value
        key = str(value).strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError as exc:
            raise ConfigurationError(f"Unknown stage {value!r}") from exc


class StageController(Protocol):
    """Narrow capability handed to workflows instead of the executor itself."""

    @property
    def stage(self) -> Stage:
        ...

    @property
    def tick_count(self) -> int:
        ...

    def advance(self, stage: Stage, reason: Optional[str] = None) -> None:
        ...

    def record_tick(self) -> int:
        ...

    def is_complete(self, stage: Stage) -> bool:
        ...

    def publish(self, event: "StageEvent") -> None:
        ...


__all__ = ["Stage", "StageController"]
