"""Default serialize/parse pair and value equality.

Hosts may supply their own pair through EditorConfig; a custom parse function
signals malformed input by raising InvalidJSONError (any ValueError is also
accepted and converted).
"""

from __future__ import annotations

import json
import math
from typing import Any

from json_tree_editor.errors import InvalidJSONError
from json_tree_editor.tree.nodes import ValueKind, classify

__all__ = ["deep_equal", "json_parse", "json_stringify"]


def json_stringify(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _reject_constant(name: str) -> Any:
    raise InvalidJSONError(f"{name} is not valid JSON")


def json_parse(text: str) -> Any:
    """Parse strict JSON text.

    Raises:
        InvalidJSONError: On malformed input, non-string input, or the
            non-standard NaN/Infinity constants.
    """
    if not isinstance(text, str):
        raise InvalidJSONError(f"Expected text, got {type(text).__name__}")
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise InvalidJSONError(str(exc)) from exc


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality with JSON semantics.

    Booleans never equal numbers (Python's True == 1 is not JSON's), while
    ints and floats compare numerically. Object key order is irrelevant.
    """
    kind_a, kind_b = classify(a), classify(b)
    if kind_a is not kind_b:
        return False
    if kind_a is ValueKind.OBJECT:
        return a.keys() == b.keys() and all(deep_equal(a[k], b[k]) for k in a)
    if kind_a is ValueKind.ARRAY:
        return len(a) == len(b) and all(
            deep_equal(x, y) for x, y in zip(a, b, strict=True)
        )
    if kind_a is ValueKind.NUMBER and math.isnan(a) and math.isnan(b):
        return True
    return bool(a == b)
