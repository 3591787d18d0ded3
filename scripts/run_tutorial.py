#!/usr/bin/env python3
"""
Dry-run the tutorial executor against a scripted world snapshot.

The script plays the outer loop: call ``tick()``, optionally sleep for the
returned delay, repeat. The scripted world never changes on its own, so a
dry run shows which substates the snapshot resolves to and which commands
the workflows would issue.

Examples:
    python scripts/run_tutorial.py --world configs/worlds/survival_fishing.json --start-stage SURVIVAL_EXPERT --ticks 20

    python scripts/run_tutorial.py \
        --world configs/worlds/resumed_quest_guide.json \
        --start-stage QUEST_GUIDE \
        --config configs/runner.yaml \
        --trace-out runs/quest_guide.jsonl
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from islandrun.config import load_config
from islandrun.core.executor import TutorialExecutor
from islandrun.errors import IslandRunError
from islandrun.telemetry import TickTraceRecorder
from islandrun.world import ScriptedWorld

LOGGER = logging.getLogger("run_tutorial")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Drive the tutorial executor against a scripted world.")
    parser.add_argument(
        "--world",
        type=Path,
        required=True,
        help="ScriptedWorld JSON snapshot.",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=50,
        help="Number of executor ticks to run.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the jitter generator (overrides the config file).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional runner YAML config.",
    )
    parser.add_argument(
        "--trace-out",
        type=Path,
        help="Write one JSONL record per tick to this path (overrides the config file).",
    )
    parser.add_argument(
        "--start-stage",
        help="Macro-State to start from, e.g. QUEST_GUIDE (overrides the config file).",
    )
    parser.add_argument(
        "--sleep",
        action="store_true",
        help="Sleep for the returned delay between ticks instead of ticking back to back.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        if args.seed is not None:
            config.seed = args.seed
        if args.trace_out is not None:
            config.trace_path = args.trace_out
        world = ScriptedWorld.load(args.world)
        executor = TutorialExecutor(world, config=config, start_stage=args.start_stage)
    except (IslandRunError, OSError, ValueError) as exc:
        LOGGER.error("Unable to start run: %s", exc)
        return 1

    recorder = TickTraceRecorder(config.trace_path) if config.trace_path else None
    if recorder is not None:
        executor.register_trace_recorder(recorder)

    try:
        for _ in range(max(0, args.ticks)):
            delay_ms = executor.tick()
            if args.sleep:
                time.sleep(delay_ms / 1000.0)
    finally:
        if recorder is not None:
            recorder.close()
            LOGGER.info("Wrote %d trace records to %s", recorder.records_written, recorder.path)

    LOGGER.info("Issued %d world commands", len(world.commands))
    print(json.dumps(executor.snapshot(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
