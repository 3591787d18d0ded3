"""
Macro-State, generic substate workflow and timing primitives.

The executor lives in :mod:`islandrun.core.executor`; it is not re-exported
here because it imports the stage tables, which import this package.
"""

from .events import EventKind, StageEvent  # noqa: F401
from .macro_state import Stage, StageController  # noqa: F401
from .monitor import StallMonitor  # noqa: F401
from .timing import DelayPolicy, Timing  # noqa: F401
from .workflow import InferenceRule, StageDefinition, StageJump, SubstateWorkflow  # noqa: F401

__all__ = [
    "DelayPolicy",
    "EventKind",
    "InferenceRule",
    "Stage",
    "StageController",
    "StageDefinition",
    "StageEvent",
    "StageJump",
    "StallMonitor",
    "SubstateWorkflow",
    "Timing",
]
