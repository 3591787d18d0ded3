"""
Event primitives emitted by the executor and workflows.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .macro_state import Stage


class EventKind(str, Enum):
    SUBSTATE_INFERRED = "SUBSTATE_INFERRED"
    SUBSTATE_ADVANCED = "SUBSTATE_ADVANCED"
    STAGE_ADVANCED = "STAGE_ADVANCED"
    STALLED = "STALLED"


@dataclass(frozen=True)
class StageEvent:
    """
    Snapshot describing a change of believed progress.

    Attributes
    ----------
    kind:
        What happened (inference resync, handler transition, stage advance or stall).
    stage:
        Stage that was authoritative when the event fired.
    substate_from:
        Previous substate name (or previous stage name for ``STAGE_ADVANCED``).
    substate_to:
        New substate name (or new stage name for ``STAGE_ADVANCED``).
    tick:
        Per-stage tick counter value when the event fired.
    reason:
        Rule, handler or jump name responsible for the change.
    """

    kind: EventKind
    stage: Stage
    substate_from: Optional[str]
    substate_to: Optional[str]
    tick: int
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind.value,
            "stage": self.stage.value,
            "from": self.substate_from,
            "to": self.substate_to,
            "tick": self.tick,
            "reason": self.reason,
        }


__all__ = ["EventKind", "StageEvent"]
