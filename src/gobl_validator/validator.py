from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Union

from gobl_validator.common.config import ValidatorConfig, load_validator_config
from gobl_validator.common.errors import (
    MalformedInputError,
    MissingSchemaFieldError,
    SchemaViolationError,
    UnsupportedSchemaError,
)
from gobl_validator.evaluator.adapter import SchemaEvaluator

logger = logging.getLogger(__name__)

Document = Union[str, bytes, Mapping[str, Any]]


def _plain(value: Any) -> Any:
    # jsonschema only treats dict as "object" and list as "array"
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def parse_data(data: Document) -> Any:
    if isinstance(data, (str, bytes, bytearray)):
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"Invalid JSON: {e.msg}") from e
        except UnicodeDecodeError as e:
            raise MalformedInputError(f"Invalid JSON: {e.reason}") from e
    if isinstance(data, Mapping):
        return _plain(data)
    raise MalformedInputError(f"Unsupported input type: {type(data).__name__}")


class GoblValidator:
    """Validates GOBL documents against the configured root schemas.

    Every failure is raised as a GoblValidationError subclass; schema
    violations carry the raw failure tree and can render a report through
    ``formatted_errors()``.
    """

    def __init__(self, config: Optional[ValidatorConfig] = None):
        self._config = config or load_validator_config()
        self._evaluator: Optional[SchemaEvaluator] = None

    @property
    def gobl_version(self) -> str:
        return self._config.gobl_version

    @property
    def root_schemas(self) -> Mapping[str, str]:
        return self._config.root_schemas

    def validate(self, data: Document) -> None:
        """Validate against the root schema named by the document's $schema."""
        doc = parse_data(data)

        if not isinstance(doc, Mapping) or "$schema" not in doc:
            raise MissingSchemaFieldError()

        schema_id = doc["$schema"]
        if not isinstance(schema_id, str) or self._config.kind_for(schema_id) is None:
            raise UnsupportedSchemaError(str(schema_id), self.root_schemas.keys())

        self._perform_validation(doc, schema_id)

    def validate_against(self, data: Document, kind: str) -> None:
        if kind not in self.root_schemas:
            raise UnsupportedSchemaError(kind, self.root_schemas.keys())
        self._perform_validation(parse_data(data), self.root_schemas[kind])

    def validate_envelope(self, data: Document) -> None:
        self.validate_against(data, "envelope")

    def _perform_validation(self, doc: Any, schema_id: str) -> None:
        logger.debug("validating document against %s", schema_id)
        failure = self._get_evaluator().evaluate(doc, schema_id)
        if failure is not None:
            logger.info(
                "document failed validation against %s (%d top-level failures)",
                schema_id,
                len(failure.children),
            )
            raise SchemaViolationError(schema_id, failure)

    def _get_evaluator(self) -> SchemaEvaluator:
        if self._evaluator is None:
            self._evaluator = SchemaEvaluator(self._config.schemas_path, self._config.schema_prefix)
        return self._evaluator
