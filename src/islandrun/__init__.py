"""
Tick-driven automation of the tutorial island procedure.

The package is organised the same way the runtime is layered:

``islandrun.world``
    World Oracle interface plus the fail-soft and scripted implementations.
``islandrun.core``
    Macro-State, the generic substate workflow, timing policy and executor.
``islandrun.stages``
    One stage table per tutorial instructor.
``islandrun.telemetry``
    Tick trace schema, recorder and trace analytics.
"""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = ["__version__"]
