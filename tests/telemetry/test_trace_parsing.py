from __future__ import annotations

import json
from pathlib import Path

import pytest

from islandrun.telemetry import iter_entries, load_entries, normalize_entry


def test_normalize_fills_optional_fields() -> None:
    entry = normalize_entry({"tick": 3, "stage": "BANKER", "workflow": "Banker"})
    assert entry["source"] == "unknown"
    assert entry["stage_tick"] == 0
    assert entry["substate"] is None
    assert entry["status"] == "EXECUTED"
    assert entry["events"] == []


def test_normalize_marks_workflowless_entries_idle() -> None:
    entry = normalize_entry({"tick": 1, "stage": "COMPLETE"})
    assert entry["status"] == "IDLE"


def test_normalize_does_not_mutate_input() -> None:
    raw = {"tick": 1, "stage": "BANKER", "events": [{"kind": "STALLED"}]}
    entry = normalize_entry(raw)
    entry["events"].append({"kind": "STAGE_ADVANCED"})
    assert raw["events"] == [{"kind": "STALLED"}]


@pytest.mark.parametrize(
    "payload",
    [
        {"stage": "BANKER"},
        {"tick": 1},
        {"tick": 1, "stage": "BANKER", "events": "oops"},
    ],
)
def test_normalize_rejects_foreign_payloads(payload) -> None:
    with pytest.raises(ValueError):
        normalize_entry(payload)


def test_load_entries_skips_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "trace.jsonl"
    lines = [
        json.dumps({"tick": 1, "stage": "GIELINOR_GUIDE", "workflow": "Gielinor Guide"}),
        "",
        json.dumps({"tick": 2, "stage": "GIELINOR_GUIDE", "workflow": "Gielinor Guide"}),
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    entries = load_entries(path)

    assert [entry["tick"] for entry in entries] == [1, 2]
    assert list(iter_entries(str(path))) == entries
