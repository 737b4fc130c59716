"""
Typed store options.

Backend parameters arrive as a flat mapping of strings. Each factory describes
the options it understands as a dataclass; populate_options() fills one from
the mapping, coercing strings to the annotated field types. Unknown keys are
ignored, since the same mapping feeds every store kind of a family.
"""
from __future__ import annotations

import typing
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional

from rasterconfig.stores.base import UNPOPULATED, param_name

_BOOL_TRUE = {"true", "1", "yes", "on"}
_BOOL_FALSE = {"false", "0", "no", "off", ""}


def _unwrap_optional(tp: Any) -> Any:
    if typing.get_origin(tp) is typing.Union:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def coerce_value(raw: str, tp: Any, name: str) -> Any:
    """Convert a parameter string to tp (str, int, float, bool or Optional thereof)."""
    target = _unwrap_optional(tp)
    text = raw.strip() if isinstance(raw, str) else raw
    if target is bool:
        lowered = str(text).lower()
        if lowered in _BOOL_TRUE:
            return True
        if lowered in _BOOL_FALSE:
            return False
        raise ValueError(f"Option '{name}' expects a boolean, got {raw!r}")
    if target is int:
        try:
            return int(text)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Option '{name}' expects an integer, got {raw!r}") from e
    if target is float:
        try:
            return float(text)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Option '{name}' expects a number, got {raw!r}") from e
    return raw


def populate_options(options: Any, params: Mapping[str, str]) -> Any:
    """Return a copy of options with every field found in params filled in.

    Raises:
        KeyError: a required field is absent from params
        ValueError: a value cannot be coerced to the field type
    """
    hints = typing.get_type_hints(type(options))
    values: Dict[str, Any] = {}
    missing = []
    for f in fields(options):
        key = param_name(f)
        if key in params:
            values[f.name] = coerce_value(params[key], hints.get(f.name, str), key)
        elif getattr(options, f.name) is UNPOPULATED:
            missing.append(key)
    if missing:
        raise KeyError(f"Required store options are missing: {', '.join(missing)}")
    return replace(options, **values)


@dataclass
class StoreOptions:
    """Options every built-in family understands."""
    namespace: str = field(default="", metadata={"param": "gwNamespace"})


@dataclass
class MemoryStoreOptions(StoreOptions):
    """Options for the in-process family; everything optional."""
    max_entries: Optional[int] = field(default=None, metadata={"param": "maxEntries"})


@dataclass
class JSONStoreOptions:
    """Options for the JSON file family; the data directory is required."""
    data_dir: str = field(metadata={"param": "dataDir"})
    namespace: str = field(default="", metadata={"param": "gwNamespace"})
    pretty: bool = field(default=True, metadata={"param": "prettyPrint"})
    create_dirs: bool = field(default=True, metadata={"param": "createDirs"})
