"""
Readers for tick trace logs.

Each line of a trace is one executor tick::

    {
        "source": "executor",
        "tick": 12,
        "stage_tick": 4,
        "stage": "SURVIVAL_EXPERT",
        "workflow": "Survival Expert",
        "substate": "FISH",
        "delay_ms": 1987,
        "status": "EXECUTED",
        "events": [{"kind": "SUBSTATE_INFERRED", ...}],
        "timestamp": 1700000000.0,
    }

Hand-edited or truncated traces may omit optional fields; :func:`normalize_entry`
fills them in so downstream analytics can rely on a stable shape.
"""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Dict, Iterator, Mapping

JsonDict = Dict[str, object]


def iter_entries(path: Path | str) -> Iterator[JsonDict]:
    """
    Yield normalised tick entries from a JSONL file.

    Parameters
    ----------
    path:
        Path to a JSON Lines file written by :class:`TickTraceRecorder`.
    """

    file_path = Path(path)
    with file_path.open("r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if not line:
                continue
            raw = json.loads(line)
            yield normalize_entry(raw)


def load_entries(path: Path | str) -> list[JsonDict]:
    """Return a list of normalised tick entries from ``path``."""

    return list(iter_entries(path))


def normalize_entry(entry: Mapping[str, object]) -> JsonDict:
    """Fill defaults for optional fields; reject payloads that are not tick entries."""

    if not isinstance(entry, Mapping) or "tick" not in entry or "stage" not in entry:
        raise ValueError("Unrecognised trace payload shape")
    normalised = deepcopy(dict(entry))
    normalised.setdefault("source", "unknown")
    normalised.setdefault("stage_tick", 0)
    normalised.setdefault("workflow", None)
    normalised.setdefault("substate", None)
    normalised.setdefault("status", "EXECUTED" if normalised.get("workflow") else "IDLE")
    normalised.setdefault("delay_ms", 0)
    events = normalised.setdefault("events", [])
    if not isinstance(events, list):
        raise ValueError("Invalid events payload")
    return normalised


__all__ = ["iter_entries", "load_entries", "normalize_entry"]
