"""
Stage tables for every tutorial instructor, in play order.

``STAGE_DEFINITIONS`` is the fixed registry order the executor iterates; it is
also the tie-break when more than one workflow could validate.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..core.macro_state import Stage, StageController
from ..core.timing import DelayPolicy
from ..core.tutorial import TutorialWorkflow
from ..core.workflow import StageDefinition
from ..errors import ConfigurationError
from ..world.oracle import WorldOracle
from . import (
    banker,
    combat_instructor,
    gielinor_guide,
    magic_instructor,
    master_chef,
    mining_instructor,
    prayer_instructor,
    quest_guide,
    survival_expert,
)

STAGE_DEFINITIONS = (
    gielinor_guide.DEFINITION,
    survival_expert.DEFINITION,
    master_chef.DEFINITION,
    quest_guide.DEFINITION,
    mining_instructor.DEFINITION,
    combat_instructor.DEFINITION,
    banker.DEFINITION,
    prayer_instructor.DEFINITION,
    magic_instructor.DEFINITION,
)


def build_workflows(
    controller: StageController,
    world: WorldOracle,
    policy: DelayPolicy,
    definitions: Optional[Sequence[StageDefinition]] = None,
) -> List[TutorialWorkflow]:
    """
    Instantiate one persistent workflow per stage definition.

    Construction does not query ``world``. Two definitions for the same stage
    are rejected because validation must single out one workflow per stage.
    """

    chosen = tuple(definitions) if definitions is not None else STAGE_DEFINITIONS
    seen = set()
    for definition in chosen:
        if definition.stage in seen:
            raise ConfigurationError(f"Duplicate workflow for stage {definition.stage.value}")
        if definition.stage is Stage.COMPLETE:
            raise ConfigurationError("COMPLETE is terminal and cannot own a workflow")
        seen.add(definition.stage)
    return [TutorialWorkflow(definition, controller, world, policy) for definition in chosen]


__all__ = ["STAGE_DEFINITIONS", "build_workflows"]
