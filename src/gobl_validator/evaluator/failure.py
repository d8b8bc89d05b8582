from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple, Union

PathSegment = Union[str, int]


@dataclass(frozen=True)
class FailureNode:
    """One node of the failure tree produced by schema evaluation.

    Nodes with children are combinators (oneOf, anyOf, ...) or delegating
    nodes; leaves are atomic rule failures.
    """

    keyword: str
    path: Tuple[PathSegment, ...] = ()
    args: Mapping[str, Any] = field(default_factory=dict)
    children: Tuple["FailureNode", ...] = ()
    value: Any = None  # document value at `path`
    message: str = ""  # evaluator's own message, used as a fallback

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "path": list(self.path),
            "args": dict(self.args),
            "message": self.message,
            "children": [c.to_dict() for c in self.children],
        }


def format_path(path: Tuple[PathSegment, ...]) -> str:
    if not path:
        return "/"
    return "/" + "/".join(str(p) for p in path)
