"""
Tick loop that owns the Macro-State and drives exactly one workflow per tick.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from ..config import RunnerConfig
from ..stages import build_workflows
from ..world.guarded import GuardedOracle
from ..world.oracle import WorldOracle
from .events import EventKind, StageEvent
from .macro_state import Stage
from .monitor import StallMonitor
from .timing import DelayPolicy
from .tutorial import TutorialWorkflow
from .workflow import StageDefinition

logger = logging.getLogger(__name__)

TRACE_SOURCE = "executor"


class TutorialExecutor:
    """
    Fixed registry of persistent workflows selected by the Macro-State.

    Workflows never see the executor's internals; they receive it as a
    :class:`~islandrun.core.macro_state.StageController` and can only read the
    stage, count ticks, publish events and call :meth:`advance`.

    Parameters
    ----------
    world:
        World Oracle. It is wrapped in a :class:`GuardedOracle` so that
        infrastructure failures read as "not found".
    definitions:
        Stage tables in registry order. Defaults to every tutorial stage.
    policy:
        Jitter policy; built from ``config`` when omitted.
    config:
        Runner settings (idle delay, seed, stall threshold, start stage).
    monitor:
        Stall watchdog; built from ``config.stall_threshold`` when omitted.
    start_stage:
        Overrides ``config.start_stage``.
    """

    def __init__(
        self,
        world: WorldOracle,
        *,
        definitions: Optional[Sequence[StageDefinition]] = None,
        policy: Optional[DelayPolicy] = None,
        config: Optional[RunnerConfig] = None,
        monitor: Optional[StallMonitor] = None,
        start_stage: Optional[Stage | str] = None,
    ) -> None:
        self.config = config or RunnerConfig()
        self.world = GuardedOracle(world)
        self.policy = policy or self.config.build_policy()
        self.monitor = monitor or StallMonitor(self.config.stall_threshold)
        stage = Stage.parse(start_stage) if start_stage is not None else self.config.start_stage
        self._stage = stage
        self._furthest = stage
        self._tick_count = 0
        self._total_ticks = 0
        self._events: List[StageEvent] = []
        self._tick_events: List[StageEvent] = []
        self._event_sink: Optional[Callable[[StageEvent], None]] = None
        self._trace_recorder = None
        self.workflows: List[TutorialWorkflow] = build_workflows(self, self.world, self.policy, definitions)

    # ------------------------------------------------------------------ #
    # Configuration helpers
    # ------------------------------------------------------------------ #

    def register_event_sink(self, sink: Callable[[StageEvent], None]) -> None:
        """Register a callback invoked every time a stage event fires."""

        self._event_sink = sink

    def register_trace_recorder(self, recorder) -> None:
        """Attach a trace recorder that receives one payload per tick."""

        self._trace_recorder = recorder

    def history(self) -> List[StageEvent]:
        """Return a copy of the emitted stage events."""

        return list(self._events)

    # ------------------------------------------------------------------ #
    # StageController
    # ------------------------------------------------------------------ #

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def tick_count(self) -> int:
        """Executes since the current Macro-State became active."""

        return self._tick_count

    @property
    def total_ticks(self) -> int:
        return self._total_ticks

    def record_tick(self) -> int:
        self._tick_count += 1
        return self._tick_count

    def advance(self, stage: Stage | str, reason: Optional[str] = None) -> None:
        target = Stage.parse(stage)
        if target is self._stage:
            logger.debug("Already at %s; advance ignored (%s)", target.value, reason or "no reason")
            return
        previous = self._stage
        ticks = self._tick_count
        self._stage = target
        self._tick_count = 0
        if target.index > self._furthest.index:
            self._furthest = target
        self.monitor.reset(previous)
        logger.info("Macro-State %s -> %s after %d ticks (%s)", previous.value, target.value, ticks, reason or "advance")
        self.publish(
            StageEvent(
                kind=EventKind.STAGE_ADVANCED,
                stage=previous,
                substate_from=previous.value,
                substate_to=target.value,
                tick=ticks,
                reason=reason,
            )
        )

    def is_complete(self, stage: Stage | str) -> bool:
        """A stage stays complete once the run has moved past it, even after a backward jump."""

        return Stage.parse(stage).index < self._furthest.index

    def publish(self, event: StageEvent) -> None:
        self._events.append(event)
        self._tick_events.append(event)
        if self._event_sink is not None:
            self._event_sink(event)

    # ------------------------------------------------------------------ #
    # Execution loop
    # ------------------------------------------------------------------ #

    def tick(self) -> int:
        """Run the authoritative workflow once and return the delay before the next tick."""

        self._total_ticks += 1
        self._tick_events = []
        workflow = self.active_workflow()
        if workflow is None:
            delay = self.config.idle_delay_ms
            logger.debug("No workflow validates at %s; idling %d ms", self._stage.value, delay)
            self._record_trace(None, self._stage, self._tick_count, delay, "IDLE")
            return delay

        stage_before = self._stage
        delay = workflow.execute()
        stage_tick = self._tick_count if self._stage is stage_before else self._last_stage_tick()
        if self._stage is stage_before:
            self._watch(workflow)
        logger.debug("%s executed in %s; next tick in %d ms", workflow.name, workflow.last_substate.name, delay)
        self._record_trace(workflow, stage_before, stage_tick, delay, "EXECUTED")
        return delay

    def active_workflow(self) -> Optional[TutorialWorkflow]:
        """First workflow in registry order whose ``validate()`` holds."""

        for workflow in self.workflows:
            if workflow.validate():
                return workflow
        return None

    def active_substate(self) -> Optional[Enum]:
        workflow = self.active_workflow()
        return workflow.substate if workflow is not None else None

    def workflow_for(self, stage: Stage | str) -> Optional[TutorialWorkflow]:
        target = Stage.parse(stage)
        for workflow in self.workflows:
            if workflow.stage is target:
                return workflow
        return None

    def reset(self, stage: Stage | str = Stage.GIELINOR_GUIDE) -> None:
        """Restart bookkeeping from ``stage`` without recreating the workflows."""

        target = Stage.parse(stage)
        logger.info("Resetting run at %s", target.value)
        self._stage = target
        self._furthest = target
        self._tick_count = 0
        self._total_ticks = 0
        self._events.clear()
        self._tick_events = []
        self.monitor.reset()

    def snapshot(self) -> Dict[str, object]:
        """Diagnostics view: stage, authoritative substate, counters and completion flags."""

        workflow = self.active_workflow()
        return {
            "stage": self._stage.value,
            "workflow": workflow.name if workflow is not None else None,
            "substate": workflow.substate.name if workflow is not None else None,
            "stage_tick": self._tick_count,
            "total_ticks": self._total_ticks,
            "completed": {stage.value: self.is_complete(stage) for stage in Stage if stage is not Stage.COMPLETE},
        }

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _last_stage_tick(self) -> int:
        for event in reversed(self._tick_events):
            if event.kind is EventKind.STAGE_ADVANCED:
                return event.tick
        return self._tick_count

    def _watch(self, workflow: TutorialWorkflow) -> None:
        if not self.monitor.record_execute(workflow.stage, workflow.substate.name):
            return
        logger.warning(
            "%s stuck in %s for %d executes; forcing resync",
            workflow.name,
            workflow.substate.name,
            self.monitor.stall_threshold,
        )
        self.publish(
            StageEvent(
                kind=EventKind.STALLED,
                stage=workflow.stage,
                substate_from=workflow.substate.name,
                substate_to=workflow.substate.name,
                tick=self._tick_count,
                reason=f"no progress in {self.monitor.stall_threshold} executes",
            )
        )
        workflow.request_resync()

    def _record_trace(
        self,
        workflow: Optional[TutorialWorkflow],
        stage: Stage,
        stage_tick: int,
        delay: int,
        status: str,
    ) -> None:
        if self._trace_recorder is None:
            return
        payload = {
            "source": TRACE_SOURCE,
            "tick": self._total_ticks,
            "stage_tick": stage_tick,
            "stage": stage.value,
            "workflow": workflow.name if workflow is not None else None,
            "substate": workflow.last_substate.name if workflow is not None else None,
            "delay_ms": int(delay),
            "status": status,
            "events": [event.to_dict() for event in self._tick_events],
            "timestamp": time.time(),
        }
        self._trace_recorder.record(payload)


__all__ = ["TRACE_SOURCE", "TutorialExecutor"]
