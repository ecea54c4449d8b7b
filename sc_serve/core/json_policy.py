"""
JSON encoding policy for payloads served to the client.

Map-like payloads (keyed by cell id, gene, embedding name, ...) are built as
`JsonObject` from creation and always encode as `{...}`, including when empty.
Sequences are `JsonArray` and always encode as `[...]`. The client indexes
map-like payloads by key, so an empty map must never come out as `[]`.
"""

from __future__ import annotations

import json
import math
from typing import Any, Iterable, Mapping, Optional

import numpy as np
import pandas as pd


class JsonObject(dict):
    """Insertion-ordered mapping that always serializes as a JSON object."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"JsonObject({dict.__repr__(self)})"


class JsonArray(list):
    """Sequence that always serializes as a JSON array."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"JsonArray({list.__repr__(self)})"


def json_object(items: Optional[Mapping[str, Any] | Iterable[tuple[str, Any]]] = None) -> JsonObject:
    """Empty-safe object constructor: `{}` when empty, never `[]`."""
    if items is None:
        return JsonObject()
    return JsonObject(items)


def json_array(items: Optional[Iterable[Any]] = None) -> JsonArray:
    """Empty-safe sequence constructor: `[]` when empty."""
    if items is None:
        return JsonArray()
    return JsonArray(items)


def to_native(value: Any) -> Any:
    """
    Recursively convert a payload into plain JSON-compatible Python values.

    - JsonObject / dict  -> dict (keys as str)
    - JsonArray / list / tuple / ndarray -> list
    - numpy scalars -> int / float / bool
    - NaN, +/-inf, pandas NA -> None
    """
    if isinstance(value, Mapping):
        return {str(k): to_native(v) for k, v in value.items()}

    if isinstance(value, np.ndarray):
        return [to_native(v) for v in value.tolist()]

    if isinstance(value, (list, tuple)):
        return [to_native(v) for v in value]

    if isinstance(value, (bool, np.bool_)):
        return bool(value)

    if isinstance(value, np.integer):
        return int(value)

    if isinstance(value, (float, np.floating)):
        f = float(value)
        return f if math.isfinite(f) else None

    if value is None or value is pd.NA or value is pd.NaT:
        return None

    return value


def dumps(payload: Any, **kwargs: Any) -> str:
    """Serialize a payload following the encoding policy (strict JSON, no NaN)."""
    return json.dumps(to_native(payload), allow_nan=False, **kwargs)


def loads(text: str | bytes) -> Any:
    """Decode a payload; JSON objects come back as `JsonObject`, arrays as `JsonArray`."""
    decoded = json.loads(text, object_pairs_hook=JsonObject)
    return _wrap_arrays(decoded)


def _wrap_arrays(value: Any) -> Any:
    if isinstance(value, JsonObject):
        for k, v in value.items():
            value[k] = _wrap_arrays(v)
        return value
    if isinstance(value, list):
        return JsonArray(_wrap_arrays(v) for v in value)
    return value
