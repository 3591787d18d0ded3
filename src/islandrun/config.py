"""
Runner configuration loaded from YAML.

Example ``configs/runner.yaml``::

    seed: 7
    stall_threshold: 40
    start_stage: GIELINOR_GUIDE
    timing_overrides:
      WALK: [1200, 150]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

from .core.macro_state import Stage
from .core.timing import DEFAULT_JITTER_MS, DelayPolicy, Timing, make_timing
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_IDLE_DELAY_MS = 600
DEFAULT_STALL_THRESHOLD = 40


@dataclass
class RunnerConfig:
    """
    Settings for one executor run.

    Attributes
    ----------
    idle_delay_ms:
        Fixed delay returned when no workflow validates.
    jitter_ms:
        Jitter applied to overrides given as a bare base value.
    seed:
        Seed for the jitter generator; ``None`` draws fresh entropy.
    stall_threshold:
        Unchanged executes before the stall watchdog forces a resync. ``0``
        disables the watchdog.
    start_stage:
        Macro-State the run starts in.
    trace_path:
        Optional JSONL trace destination.
    timing_overrides:
        Preset name to ``(base_ms, jitter_ms)``.
    """

    idle_delay_ms: int = DEFAULT_IDLE_DELAY_MS
    jitter_ms: int = DEFAULT_JITTER_MS
    seed: Optional[int] = None
    stall_threshold: int = DEFAULT_STALL_THRESHOLD
    start_stage: Stage = Stage.GIELINOR_GUIDE
    trace_path: Optional[Path] = None
    timing_overrides: Dict[str, Tuple[int, int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if int(self.idle_delay_ms) <= 0:
            raise ConfigurationError(f"idle_delay_ms must be positive, got {self.idle_delay_ms}")
        if int(self.jitter_ms) < 0:
            raise ConfigurationError(f"jitter_ms must be non-negative, got {self.jitter_ms}")
        if int(self.stall_threshold) < 0:
            raise ConfigurationError(f"stall_threshold must be non-negative, got {self.stall_threshold}")
        self.idle_delay_ms = int(self.idle_delay_ms)
        self.jitter_ms = int(self.jitter_ms)
        self.stall_threshold = int(self.stall_threshold)
        self.start_stage = Stage.parse(self.start_stage)
        if self.trace_path is not None:
            self.trace_path = Path(self.trace_path)
        self.timing_overrides = {
            str(name): _timing_pair(name, value, self.jitter_ms) for name, value in self.timing_overrides.items()
        }
        # Fail at load time rather than on the first delay.
        self.timings()

    def timings(self) -> Dict[str, Timing]:
        return {name: make_timing(name, base, jitter) for name, (base, jitter) in self.timing_overrides.items()}

    def build_policy(self) -> DelayPolicy:
        return DelayPolicy(self.seed, overrides=self.timings())

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> "RunnerConfig":
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(payload) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(payload))  # type: ignore[arg-type]


def _timing_pair(name: object, value: object, default_jitter: int) -> Tuple[int, int]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value), default_jitter
    if isinstance(value, Mapping):
        return int(value.get("base_ms", 0)), int(value.get("jitter_ms", default_jitter))
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return int(value[0]), int(value[1])
    raise ConfigurationError(f"Timing override {name!r} must be a base, a [base, jitter] pair or a mapping")


def load_config(path: Optional[Path | str] = None) -> RunnerConfig:
    """
    Read a :class:`RunnerConfig` from YAML.

    A missing ``path`` (or a path that does not exist) yields the defaults.
    """

    if path is None:
        return RunnerConfig()
    config_path = Path(path)
    if not config_path.exists():
        logger.info("Config %s not found; using defaults", config_path)
        return RunnerConfig()
    with config_path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    config = RunnerConfig.from_mapping(payload)
    logger.info("Loaded runner config from %s", config_path)
    return config


__all__ = ["DEFAULT_IDLE_DELAY_MS", "DEFAULT_STALL_THRESHOLD", "RunnerConfig", "load_config"]
