"""
Tick entry schema shipped with the package and the validator built from it.

Every executor tick becomes one JSONL line; the recorder checks each payload
against ``schemas/tick_entry.json`` before it is written.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Union

from jsonschema import Draft7Validator

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "tick_entry.json"


def load_schema(path: Union[str, Path, None] = None) -> Dict[str, Any]:
    """
    Read a tick entry schema, defaulting to the packaged one.

    Parsed schemas are cached per resolved path, so ``"a.json"`` and
    ``Path("a.json")`` share an entry.
    """

    return _read_schema(Path(path or DEFAULT_SCHEMA_PATH).resolve())


@lru_cache(maxsize=4)
def _read_schema(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def make_validator(path: Union[str, Path, None] = None) -> Draft7Validator:
    """Check the schema itself, then return a validator for tick payloads."""

    schema = load_schema(path)
    Draft7Validator.check_schema(schema)
    return Draft7Validator(schema)


__all__ = ["DEFAULT_SCHEMA_PATH", "load_schema", "make_validator"]
