from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.exceptions import NoSuchResource
from referencing.jsonschema import DRAFT202012

from gobl_validator.evaluator.failure import FailureNode

logger = logging.getLogger(__name__)

# The synthetic root wraps everything found while following {"$ref": <schema id>}
ROOT_KEYWORD = "$ref"


def json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _unexpected_properties(instance: Dict[str, Any], schema: Dict[str, Any]) -> List[str]:
    properties = schema.get("properties", {})
    patterns = schema.get("patternProperties", {})
    return [
        name
        for name in instance
        if name not in properties and not any(re.search(p, name) for p in patterns)
    ]


def _args_for(error: ValidationError) -> Dict[str, Any]:
    keyword = error.validator
    expected = error.validator_value
    instance = error.instance

    if keyword == "required":
        if isinstance(instance, dict):
            return {"missing": [name for name in expected if name not in instance]}
        return {}
    if keyword == "type":
        return {"expected": expected, "used": json_type_name(instance)}
    if keyword == "additionalProperties":
        if isinstance(instance, dict) and isinstance(error.schema, dict):
            return {"properties": _unexpected_properties(instance, error.schema)}
        return {}
    if keyword in ("minLength", "minimum"):
        return {"min": expected}
    if keyword in ("maxLength", "maximum"):
        return {"max": expected}
    if keyword in ("pattern", "format"):
        return {keyword: expected}
    if keyword in ("const", "enum"):
        return {"expected": expected}
    return {}


def to_failure_node(error: ValidationError) -> FailureNode:
    return FailureNode(
        # a `false` schema fails without a keyword
        keyword=str(error.validator) if error.validator is not None else "false",
        path=tuple(error.absolute_path),
        args=MappingProxyType(_args_for(error)),
        children=to_failure_nodes(error.context or ()),
        value=error.instance,
        message=error.message,
    )


def to_failure_nodes(errors: Iterable[ValidationError]) -> Tuple[FailureNode, ...]:
    nodes: List[FailureNode] = []
    # jsonschema yields one `required` error per missing name; each node
    # already lists every missing name, so keep one per keyword location
    seen_required: Set[Tuple[Any, ...]] = set()
    for error in errors:
        if error.validator == "required":
            key = (tuple(error.absolute_path), tuple(error.absolute_schema_path))
            if key in seen_required:
                continue
            seen_required.add(key)
        nodes.append(to_failure_node(error))
    return tuple(nodes)


class SchemaEvaluator:
    """Evaluates documents against locally stored schemas.

    Identifiers starting with ``schema_prefix`` resolve to
    ``<schemas_path>/<rest of the identifier>.json``.
    """

    def __init__(self, schemas_path: Path, schema_prefix: str):
        self._schemas_path = Path(schemas_path)
        self._prefix = schema_prefix
        self._registry: Registry = Registry(retrieve=lru_cache(maxsize=None)(self._retrieve))

    def schema_file(self, uri: str) -> Optional[Path]:
        uri = uri.split("#", 1)[0]
        if not uri.startswith(self._prefix):
            return None
        rel = uri[len(self._prefix):]
        if not rel or ".." in rel.split("/"):
            return None
        return self._schemas_path / f"{rel}.json"

    def _retrieve(self, uri: str) -> Resource:
        path = self.schema_file(uri)
        if path is None or not path.is_file():
            logger.debug("no local schema for %s", uri)
            raise NoSuchResource(ref=uri)
        logger.debug("loading schema %s from %s", uri, path)
        contents = json.loads(path.read_text(encoding="utf-8"))
        return Resource.from_contents(contents, default_specification=DRAFT202012)

    def evaluate(self, document: Any, schema_id: str) -> Optional[FailureNode]:
        """Return None when `document` is valid, else the root of the failure tree."""
        validator = Draft202012Validator(
            {"$ref": schema_id},
            registry=self._registry,
            format_checker=Draft202012Validator.FORMAT_CHECKER,
        )
        errors = list(validator.iter_errors(document))
        if not errors:
            return None

        logger.debug("%d top-level failures against %s", len(errors), schema_id)
        return FailureNode(
            keyword=ROOT_KEYWORD,
            path=(),
            args=MappingProxyType({"schema": schema_id}),
            children=to_failure_nodes(errors),
            value=document,
            message=f"Validation failed against schema: {schema_id}",
        )
