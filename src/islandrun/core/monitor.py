"""Stall watchdog for the authoritative workflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .macro_state import Stage


@dataclass
class MonitorRecord:
    last_substate: Optional[str] = None
    executes_without_progress: int = 0
    stalls: int = 0


class StallMonitor:
    """
    Counts consecutive executes that leave a stage's substate unchanged.

    The executor's tick counter stays purely diagnostic; this monitor keeps
    its own counts and only ever asks the workflow to resynchronise.
    ``stall_threshold=0`` disables it.
    """

    def __init__(self, stall_threshold: int = 40) -> None:
        self._records: Dict[Stage, MonitorRecord] = {}
        self._stall_threshold = max(0, int(stall_threshold))

    @property
    def enabled(self) -> bool:
        return self._stall_threshold > 0

    @property
    def stall_threshold(self) -> int:
        return self._stall_threshold

    def reset(self, stage: Optional[Stage] = None) -> None:
        if stage is None:
            self._records.clear()
        else:
            self._records.pop(stage, None)

    def record_execute(self, stage: Stage, substate: str) -> bool:
        """Return ``True`` when ``stage`` has just crossed the stall threshold."""

        if not self.enabled:
            return False
        record = self._records.setdefault(stage, MonitorRecord())
        if record.last_substate != substate:
            record.last_substate = substate
            record.executes_without_progress = 0
            return False
        record.executes_without_progress += 1
        if record.executes_without_progress >= self._stall_threshold:
            record.executes_without_progress = 0
            record.stalls += 1
            return True
        return False

    def stall_count(self, stage: Stage) -> int:
        record = self._records.get(stage)
        return record.stalls if record else 0


__all__ = ["MonitorRecord", "StallMonitor"]
