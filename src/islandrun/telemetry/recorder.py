"""
JSONL trace recorder for executor ticks.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Mapping, Optional

from jsonschema import Draft7Validator

from ..errors import TraceValidationError
from .schema import DEFAULT_SCHEMA_PATH, make_validator


class TickTraceRecorder:
    """
    Writes one JSON line per executor tick with optional JSON schema validation.

    Parameters
    ----------
    path:
        Output file path. Parent directories are created on demand.
    schema_path:
        Optional override for the JSON schema file.
    validate:
        When ``True`` (default) each payload is validated before writing.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        schema_path: Optional[Path] = None,
        validate: bool = True,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle: IO[str] = self.path.open("w", encoding="utf-8")
        self._validator: Optional[Draft7Validator] = None
        self.records_written = 0
        if validate:
            self._validator = make_validator(schema_path or DEFAULT_SCHEMA_PATH)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def record(self, payload: Mapping[str, object]) -> None:
        """
        Append a single trace payload to disk.
        """

        if self._validator is not None:
            errors = sorted(self._validator.iter_errors(payload), key=lambda error: list(error.path))
            if errors:
                messages = [error.message for error in errors]
                raise TraceValidationError(f"Invalid trace payload: {messages[0]}", errors=messages)

        json.dump(payload, self._handle, ensure_ascii=False)
        self._handle.write("\n")
        self._handle.flush()
        self.records_written += 1

    def close(self) -> None:
        """Close the underlying file handle."""

        if not self._handle.closed:
            self._handle.close()

    def __enter__(self) -> "TickTraceRecorder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["DEFAULT_SCHEMA_PATH", "TickTraceRecorder"]
