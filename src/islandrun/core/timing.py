"""
Delay timing attached to workflow transitions.

Each handler returns ``base + U(-jitter, +jitter)`` milliseconds so polling is
never perfectly periodic. The jitter source is a seeded numpy ``Generator``
so runs can be replayed exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional

import numpy as np

from ..errors import ConfigurationError

DEFAULT_JITTER_MS = 100


@dataclass(frozen=True)
class Timing:
    """
    ``(base_ms, jitter_ms)`` pair describing the wait after a transition.

    Attributes
    ----------
    base_ms:
        Centre of the delay distribution.
    jitter_ms:
        Half-width of the uniform jitter window. ``base_ms - jitter_ms`` must
        stay positive so no sampled delay is ever zero or negative.
    name:
        Preset name used to look up configuration overrides.
    """

    base_ms: int
    jitter_ms: int = DEFAULT_JITTER_MS
    name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.jitter_ms < 0:
            raise ConfigurationError(f"jitter_ms must be non-negative, got {self.jitter_ms}")
        if self.base_ms - self.jitter_ms <= 0:
            raise ConfigurationError(
                f"Timing {self.name or ''}({self.base_ms}, {self.jitter_ms}) could produce a non-positive delay"
            )

    @property
    def lower_ms(self) -> int:
        return self.base_ms - self.jitter_ms

    @property
    def upper_ms(self) -> int:
        return self.base_ms + self.jitter_ms


DIALOG_CONTINUE = Timing(200, name="DIALOG_CONTINUE")
DIALOG_OPTION = Timing(400, name="DIALOG_OPTION")
IDLE = Timing(600, name="IDLE")
CLICK = Timing(800, name="CLICK")
WALK = Timing(1000, name="WALK")
TALK = Timing(1200, name="TALK")
INTERACT = Timing(1500, name="INTERACT")
ATTACK = Timing(1800, name="ATTACK")
GATHER = Timing(2000, name="GATHER")

PRESETS: Dict[str, Timing] = {
    timing.name: timing  # type: ignore[misc]
    for timing in (DIALOG_CONTINUE, DIALOG_OPTION, IDLE, CLICK, WALK, TALK, INTERACT, ATTACK, GATHER)
}


def make_timing(name: str, base_ms: int, jitter_ms: int = DEFAULT_JITTER_MS) -> Timing:
    if name not in PRESETS:
        raise ConfigurationError(f"Unknown timing preset {name!r}; expected one of {sorted(PRESETS)}")
    return Timing(int(base_ms), int(jitter_ms), name=name)


class DelayPolicy:
    """
    Samples jittered delays for :class:`Timing` values.

    Parameters
    ----------
    seed:
        Seed for the numpy random generator. ``None`` draws fresh entropy.
    overrides:
        Replacement timings keyed by preset name.
    rng:
        Pre-built generator; takes precedence over ``seed``.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        overrides: Optional[Mapping[str, Timing]] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._overrides: Dict[str, Timing] = {}
        for name, timing in (overrides or {}).items():
            self._overrides[name] = replace(timing, name=name)

    def resolve(self, timing: Timing) -> Timing:
        if timing.name is not None and timing.name in self._overrides:
            return self._overrides[timing.name]
        return timing

    def sample(self, timing: Timing) -> int:
        resolved = self.resolve(timing)
        if resolved.jitter_ms == 0:
            return resolved.base_ms
        offset = int(self._rng.integers(-resolved.jitter_ms, resolved.jitter_ms, endpoint=True))
        return max(1, resolved.base_ms + offset)


__all__ = [
    "ATTACK",
    "CLICK",
    "DEFAULT_JITTER_MS",
    "DIALOG_CONTINUE",
    "DIALOG_OPTION",
    "DelayPolicy",
    "GATHER",
    "IDLE",
    "INTERACT",
    "PRESETS",
    "TALK",
    "Timing",
    "WALK",
    "make_timing",
]
