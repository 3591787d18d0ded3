"""
Trace analytics for run summaries.

The helpers aggregate over normalised tick entries (see
``islandrun.telemetry.parsing``).
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional

JsonDict = Dict[str, object]


def summarize_entries(
    entries: Iterable[Mapping[str, object]],
    *,
    stage: Optional[str] = None,
) -> JsonDict:
    """
    Aggregate tick metrics across trace entries.

    Parameters
    ----------
    entries:
        Iterable of tick payloads produced by
        :func:`islandrun.telemetry.parsing.iter_entries` or compatible objects.
    stage:
        Optional stage filter. When omitted, all entries contribute.
    """

    total_ticks = 0
    idle_ticks = 0
    delay_sum = 0.0
    stage_counts = Counter[str]()
    substate_counts: Dict[str, Counter[str]] = {}
    event_counts = Counter[str]()
    stalls = Counter[str]()
    advances: List[JsonDict] = []

    for entry in entries:
        entry_stage = str(entry.get("stage", "unknown"))
        if stage is not None and entry_stage != stage:
            continue

        total_ticks += 1
        stage_counts[entry_stage] += 1
        delay_sum += _safe_float(entry.get("delay_ms"))
        if entry.get("status") == "IDLE":
            idle_ticks += 1

        substate = entry.get("substate")
        if isinstance(substate, str) and substate:
            substate_counts.setdefault(entry_stage, Counter())[substate] += 1

        events = entry.get("events")
        if not isinstance(events, list):
            continue
        for event in events:
            if not isinstance(event, Mapping):
                continue
            kind = str(event.get("kind", "unknown"))
            event_counts[kind] += 1
            if kind == "STALLED":
                stalls[str(event.get("stage", entry_stage))] += 1
            elif kind == "STAGE_ADVANCED":
                advances.append(
                    {
                        "tick": entry.get("tick"),
                        "from": event.get("from"),
                        "to": event.get("to"),
                        "reason": event.get("reason"),
                    }
                )

    if total_ticks == 0:
        return {
            "total_ticks": 0,
            "stages": {},
            "events": {},
        }

    return {
        "total_ticks": total_ticks,
        "idle_ticks": idle_ticks,
        "idle_rate": idle_ticks / total_ticks,
        "avg_delay_ms": delay_sum / total_ticks,
        "stages": dict(stage_counts),
        "substates": {name: dict(counts) for name, counts in substate_counts.items()},
        "events": dict(event_counts),
        "stalls": dict(stalls),
        "advances": advances,
    }


def _safe_float(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


__all__ = ["summarize_entries"]
