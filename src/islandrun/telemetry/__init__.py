"""
Tick trace schema, recorder and analytics.
"""

from .analytics import summarize_entries
from .parsing import iter_entries, load_entries, normalize_entry
from .recorder import TickTraceRecorder
from .schema import DEFAULT_SCHEMA_PATH, load_schema, make_validator

__all__ = [
    "DEFAULT_SCHEMA_PATH",
    "TickTraceRecorder",
    "iter_entries",
    "load_entries",
    "load_schema",
    "make_validator",
    "normalize_entry",
    "summarize_entries",
]
