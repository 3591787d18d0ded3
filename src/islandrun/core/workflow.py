"""
Generic self-healing substate workflow.

A stage is described as data (:class:`StageDefinition`): a substate enum, an
ordered list of inference rules and a handler per substate. A single
:class:`SubstateWorkflow` class drives any such definition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Generic, Mapping, Optional, Tuple, Type, TypeVar

from ..errors import ConfigurationError
from ..world.oracle import WorldOracle
from .events import EventKind, StageEvent
from .macro_state import Stage, StageController
from .timing import IDLE, DelayPolicy, Timing

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Enum)

Predicate = Callable[["SubstateWorkflow"], bool]
Handler = Callable[["SubstateWorkflow"], int]


@dataclass(frozen=True)
class InferenceRule(Generic[S]):
    """Observation predicate that, when it holds, places the stage at ``substate``."""

    name: str
    substate: S
    predicate: Predicate


@dataclass(frozen=True)
class StageJump:
    """Observation predicate that hands control straight to ``target``."""

    name: str
    target: Stage
    predicate: Predicate


def always(_workflow: "SubstateWorkflow") -> bool:
    return True


@dataclass(frozen=True)
class StageDefinition(Generic[S]):
    """
    Table describing one tutorial stage.

    Attributes
    ----------
    stage:
        Macro-State value this definition is authoritative for.
    substates:
        Enum of stage-local substates; the first member is the initial one
        unless ``initial`` is given.
    terminal:
        Substate that hands control to ``next_stage`` instead of being handled.
    next_stage:
        Macro-State value advanced to on reaching ``terminal``.
    rules:
        Inference rules ordered from most advanced evidence to the fallback.
        The first rule whose predicate holds wins.
    handlers:
        One handler per non-terminal substate.
    flags:
        Names of workflow-local provenance flags (all start ``False``).
    jumps:
        Recovery jumps checked before inference on every execute.
    """

    stage: Stage
    substates: Type[S]
    terminal: S
    next_stage: Stage
    rules: Tuple[InferenceRule[S], ...]
    handlers: Mapping[S, Handler]
    flags: Tuple[str, ...] = ()
    jumps: Tuple[StageJump, ...] = ()
    initial: Optional[S] = None
    description: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        members = list(self.substates)
        if self.terminal not in members:
            raise ConfigurationError(f"{self.stage.value}: terminal {self.terminal!r} is not a substate")
        if not self.rules:
            raise ConfigurationError(f"{self.stage.value}: at least one inference rule is required")
        missing = [s.name for s in members if s is not self.terminal and s not in self.handlers]
        if missing:
            raise ConfigurationError(f"{self.stage.value}: no handler for {', '.join(missing)}")
        for rule in self.rules:
            if rule.substate not in members:
                raise ConfigurationError(f"{self.stage.value}: rule {rule.name} targets foreign substate")
        if len(set(self.flags)) != len(self.flags):
            raise ConfigurationError(f"{self.stage.value}: duplicate provenance flags")

    @property
    def initial_substate(self) -> S:
        return self.initial if self.initial is not None else next(iter(self.substates))


class SubstateWorkflow(Generic[S]):
    """
    Persistent state machine for one stage.

    Construction never touches the world: the initial substate is the stage's
    earliest one and inference only happens inside :meth:`execute`.

    Attributes
    ----------
    substate:
        Believed progress within the stage. Frozen (but readable) while the
        workflow is not authoritative.
    flags:
        Provenance flags recording facts the world cannot express, such as
        "this workflow produced the logs in the inventory". They are part of
        the believed state and survive inactive periods like ``substate``.
    last_substate:
        Substate the most recent execute ended in, before any hand-off rewound
        the workflow. Traces report this value.
    """

    def __init__(
        self,
        definition: StageDefinition[S],
        controller: StageController,
        world: WorldOracle,
        policy: DelayPolicy,
    ) -> None:
        self.definition = definition
        self.controller = controller
        self.world = world
        self.policy = policy
        self.substate: S = definition.initial_substate
        self.flags: Dict[str, bool] = {name: False for name in definition.flags}
        self.last_substate: S = self.substate
        self._resync_requested = False

    # ------------------------------------------------------------------ #
    # Workflow contract
    # ------------------------------------------------------------------ #

    @property
    def stage(self) -> Stage:
        return self.definition.stage

    @property
    def name(self) -> str:
        return self.definition.stage.label

    def validate(self) -> bool:
        active = self.controller.stage is self.stage
        logger.debug("validate %s -> %s", self.name, active)
        return active

    def is_complete(self) -> bool:
        return self.controller.is_complete(self.stage)

    def infer_substate(self) -> S:
        """Return the substate named by the first matching rule; no side effects."""

        rule = self.matching_rule()
        return rule.substate if rule is not None else self.substate

    def matching_rule(self) -> Optional[InferenceRule[S]]:
        for rule in self.definition.rules:
            if rule.predicate(self):
                return rule
        return None

    def execute(self) -> int:
        self.controller.record_tick()

        for jump in self.definition.jumps:
            if jump.predicate(self):
                logger.info("%s: recovery jump %s -> %s", self.name, jump.name, jump.target.value)
                self.last_substate = self.substate
                self.controller.advance(jump.target, reason=jump.name)
                return self.delay(IDLE)

        if self._resync_requested or not self.is_blocked():
            self._resync_requested = False
            self._adopt_inferred()

        if self.substate is self.definition.terminal:
            return self._finish()

        handler = self.definition.handlers[self.substate]
        delay = handler(self)
        if self.substate is self.definition.terminal:
            self._finish()
        else:
            self.last_substate = self.substate
        return delay

    # ------------------------------------------------------------------ #
    # Helpers for handlers
    # ------------------------------------------------------------------ #

    def is_blocked(self) -> bool:
        """A modal dialog or an ongoing player action suspends resynchronisation."""

        return self.world.dialog.is_open() or self.world.is_player_busy()

    def transition(self, substate: S, reason: Optional[str] = None) -> None:
        """Forward transition taken by a handler after issuing its command."""

        if substate is self.substate:
            return
        previous = self.substate
        self.substate = substate
        logger.info("%s: %s -> %s (%s)", self.name, previous.name, substate.name, reason or "handler")
        self._publish(EventKind.SUBSTATE_ADVANCED, previous.name, substate.name, reason)

    def delay(self, timing: Timing) -> int:
        return self.policy.sample(timing)

    def flag(self, name: str) -> bool:
        return self.flags[name]

    def set_flag(self, name: str, value: bool = True) -> None:
        if name not in self.flags:
            raise KeyError(f"{self.name} declares no provenance flag {name!r}")
        if self.flags[name] != value:
            logger.debug("%s: flag %s = %s", self.name, name, value)
        self.flags[name] = value

    def request_resync(self) -> None:
        """Force inference on the next execute even if the world reports a blocking interaction."""

        self._resync_requested = True

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _adopt_inferred(self) -> None:
        rule = self.matching_rule()
        if rule is None or rule.substate is self.substate:
            return
        previous = self.substate
        self.substate = rule.substate
        logger.info("%s: resync %s -> %s via %s", self.name, previous.name, rule.substate.name, rule.name)
        self._publish(EventKind.SUBSTATE_INFERRED, previous.name, rule.substate.name, rule.name)

    def _finish(self) -> int:
        self.last_substate = self.substate
        self.controller.advance(self.definition.next_stage, reason=f"{self.name} complete")
        self._rewind()
        return self.delay(IDLE)

    def _rewind(self) -> None:
        """Drop the terminal belief so a later re-entry starts from the initial substate."""

        self.substate = self.definition.initial_substate
        for name in self.flags:
            self.flags[name] = False
        logger.debug("%s: rewound to %s after hand-off", self.name, self.substate.name)

    def _publish(self, kind: EventKind, before: Optional[str], after: Optional[str], reason: Optional[str]) -> None:
        self.controller.publish(
            StageEvent(
                kind=kind,
                stage=self.stage,
                substate_from=before,
                substate_to=after,
                tick=self.controller.tick_count,
                reason=reason,
            )
        )


__all__ = [
    "Handler",
    "InferenceRule",
    "Predicate",
    "StageDefinition",
    "StageJump",
    "SubstateWorkflow",
    "always",
]
