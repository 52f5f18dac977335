"""Per-field diagnostics for shape validation failures.

Pydantic reports validation failures as a list of error dicts (``loc``,
``type``, ``msg``, ``input``, ``ctx``). The agent surfaces them as
``FieldIssue`` records naming the field path, the expected JSON type and the
JSON type that was actually received, so HTTP callers and error handlers see
more than a boolean.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

# pydantic error type prefix -> JSON type name
_EXPECTED_TYPES: Dict[str, str] = {
    "string": "string",
    "int": "integer",
    "float": "number",
    "decimal": "number",
    "bool": "boolean",
    "list": "array",
    "tuple": "array",
    "set": "array",
    "dict": "object",
    "model": "object",
    "model_attributes": "object",
    "datetime": "date",
    "date": "date",
}


@dataclass(frozen=True)
class FieldIssue:
    """A single validation problem.

    Attributes:
        path: Dotted location of the offending field (empty for the root value).
        expected: What the shape expected (JSON type name or allowed values), if known.
        received: JSON type name of the value that was supplied.
        message: Human-readable rendering, e.g. ``input: Expected string, received number``.
    """

    path: str
    expected: Optional[str]
    received: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "expected": self.expected, "received": self.received, "message": self.message}


def json_type_name(value: Any) -> str:
    """Return the JSON type name for a Python value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _expected_for(error: Dict[str, Any]) -> Optional[str]:
    err_type: str = error.get("type", "")
    ctx = error.get("ctx") or {}
    if "expected" in ctx:
        return str(ctx["expected"])
    if "expected_tags" in ctx:
        return str(ctx["expected_tags"])
    for suffix in ("_type", "_parsing"):
        if err_type.endswith(suffix):
            return _EXPECTED_TYPES.get(err_type[: -len(suffix)])
    return None


def issues_from_pydantic(exc: PydanticValidationError, drop_leading: Iterable[str] = ()) -> List[FieldIssue]:
    """Convert a pydantic ``ValidationError`` into ``FieldIssue`` records.

    Args:
        exc: The pydantic error.
        drop_leading: Location segments to strip when they open a location
            (tagged unions prefix locations with the matched tag).
    """
    issues: List[FieldIssue] = []
    for error in exc.errors():
        loc = list(error.get("loc", ()))
        if loc and loc[0] in drop_leading:
            loc = loc[1:]
        path = ".".join(str(part) for part in loc)
        received = "missing" if error.get("type") == "missing" else json_type_name(error.get("input"))
        expected = _expected_for(error)
        if expected is not None and error.get("type", "").endswith(("_type", "_parsing")):
            detail = f"Expected {expected}, received {received}"
        else:
            detail = str(error.get("msg", "Invalid value"))
        message = f"{path}: {detail}" if path else detail
        issues.append(FieldIssue(path=path, expected=expected, received=received, message=message))
    return issues
