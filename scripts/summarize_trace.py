#!/usr/bin/env python3
"""
Summarise tick trace JSONL logs written by ``run_tutorial.py``.

Example:
    python scripts/summarize_trace.py --input runs/quest_guide.jsonl --stage QUEST_GUIDE
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Sequence

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from islandrun.telemetry import iter_entries, summarize_entries

LOGGER = logging.getLogger("summarize_trace")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize islandrun tick traces.")
    parser.add_argument(
        "--input",
        required=True,
        nargs="+",
        help="One or more trace JSONL files or directories containing them.",
    )
    parser.add_argument(
        "--stage",
        help="Only summarise ticks recorded in this stage.",
    )
    return parser.parse_args()


def resolve_inputs(paths: Sequence[str]) -> List[Path]:
    files: List[Path] = []
    for item in paths:
        path = Path(item)
        if not path.exists():
            LOGGER.warning("Input path not found: %s", path)
            continue
        if path.is_dir():
            files.extend(sorted(path.glob("*.jsonl")))
        else:
            files.append(path)
    return files


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    inputs = resolve_inputs(args.input)
    if not inputs:
        LOGGER.error("No trace files found for inputs: %s", args.input)
        return 1

    LOGGER.info("Processing %d trace file(s).", len(inputs))
    entries = [entry for path in inputs for entry in iter_entries(path)]
    summary = summarize_entries(entries, stage=args.stage.upper() if args.stage else None)
    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
