from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Mapping, Tuple

from gobl_validator.evaluator.failure import FailureNode


def render_value(value: Any) -> str:
    """Strings as-is, everything else as canonical JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def join_values(values: Any) -> str:
    return ", ".join(render_value(v) for v in _as_list(values))


# keyword -> (args the template needs, template)
_TEMPLATES: Dict[str, Tuple[Tuple[str, ...], Callable[[Mapping[str, Any]], str]]] = {
    "required": (("missing",), lambda a: f"Missing required property: {join_values(a['missing'])}"),
    "type": (
        ("expected", "used"),
        lambda a: f'Expected type "{render_value(a["expected"])}", got "{render_value(a["used"])}"',
    ),
    "additionalProperties": (
        ("properties",),
        lambda a: f"Unknown properties: {join_values(a['properties'])}",
    ),
    "minLength": (("min",), lambda a: f"Must be at least {render_value(a['min'])} characters"),
    "maxLength": (("max",), lambda a: f"Must be at most {render_value(a['max'])} characters"),
    "minimum": (("min",), lambda a: f"Must be at least {render_value(a['min'])}"),
    "maximum": (("max",), lambda a: f"Must be at most {render_value(a['max'])}"),
    "pattern": ((), lambda a: "Value does not match the required pattern"),
    "format": (("format",), lambda a: f"Value is not a valid {render_value(a['format'])}"),
    "const": (("expected",), lambda a: f"Value must be: {render_value(a['expected'])}"),
    "enum": (("expected",), lambda a: f"Value must be one of: {join_values(a['expected'])}"),
}

# used when the args are missing and the evaluator gave no message either
_DEFAULTS: Dict[str, str] = {
    "required": "Missing required property",
    "type": "Value has the wrong type",
    "additionalProperties": "Additional properties are not allowed",
    "minLength": "Value is too short",
    "maxLength": "Value is too long",
    "minimum": "Value is too small",
    "maximum": "Value is too large",
    "format": "Value format is invalid",
    "const": "Value does not match the required constant",
    "enum": "Value is not in the allowed list",
}


def format_message(node: FailureNode) -> str:
    entry = _TEMPLATES.get(node.keyword)
    if entry is not None:
        needed, template = entry
        if all(name in node.args for name in needed):
            return template(node.args)

    if node.message:
        return node.message
    return _DEFAULTS.get(node.keyword, f'Value violates the "{node.keyword}" rule')
