"""
Turns a failure tree into a compact report: one list of readable messages per
document path.

Two things keep the report short:

* enum-like unions (a oneOf/anyOf whose branches are all `const`) collapse
  into a single message instead of one failure per allowed value;
* "unknown properties" failures at a path with failures further down are
  dropped. Union backtracking makes the evaluator try sibling branches, which
  flags perfectly valid properties as unknown whenever something nested fails.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from gobl_validator.evaluator.failure import FailureNode, format_path
from gobl_validator.report.messages import format_message, render_value

ErrorReport = Dict[str, List[str]]

UNION_KEYWORDS = ("oneOf", "anyOf")
UNKNOWN_PROPERTIES_KEYWORD = "additionalProperties"

# Above this many options, consolidated enum messages stop listing them
MAX_LISTED_OPTIONS = 10


@dataclass(frozen=True)
class Finding:
    keyword: str  # keyword of the node the message came from
    message: str


def consolidate_enum(node: FailureNode) -> Optional[str]:
    if node.keyword not in UNION_KEYWORDS or not node.children:
        return None

    candidates = []
    for child in node.children:
        if child.keyword != "const":
            return None
        if "expected" in child.args:
            candidates.append(child.args["expected"])

    if not candidates:
        return None

    actual = render_value(node.value)
    if len(candidates) > MAX_LISTED_OPTIONS:
        return f'The value "{actual}" is not a valid option'
    allowed = ", ".join(render_value(c) for c in candidates)
    return f'The value "{actual}" is not valid. Allowed values: {allowed}'


def collect(node: FailureNode) -> Dict[str, List[Finding]]:
    findings: Dict[str, List[Finding]] = {}
    # explicit stack: depth is bounded by memory, not the recursion limit
    stack = [node]
    while stack:
        current = stack.pop()
        path = format_path(current.path)

        enum_message = consolidate_enum(current)
        if enum_message is not None:
            findings.setdefault(path, []).append(Finding(current.keyword, enum_message))
            continue

        if current.children:
            stack.extend(reversed(current.children))
            continue

        findings.setdefault(path, []).append(Finding(current.keyword, format_message(current)))
    return findings


def _has_descendant(path: str, paths: List[str]) -> bool:
    for other in paths:
        if other == path:
            continue
        if path == "/":
            if len(other) > 1 and other.startswith("/"):
                return True
        elif other.startswith(path + "/"):
            return True
    return False


def suppress(raw: Dict[str, List[Finding]]) -> Dict[str, List[Finding]]:
    paths = list(raw)
    filtered: Dict[str, List[Finding]] = {}
    for path, items in raw.items():
        if _has_descendant(path, paths):
            items = [f for f in items if f.keyword != UNKNOWN_PROPERTIES_KEYWORD]
        if items:
            filtered[path] = list(items)
    return filtered


def build_report(root: FailureNode) -> ErrorReport:
    return {
        path: [f.message for f in items]
        for path, items in suppress(collect(root)).items()
    }
