from __future__ import annotations

from typing import Iterable, Optional

from gobl_validator.evaluator.failure import FailureNode
from gobl_validator.report.synthesizer import ErrorReport, build_report


class GoblValidationError(ValueError):
    def __init__(self, message: str, failure: Optional[FailureNode] = None):
        super().__init__(message)
        self.failure = failure

    def formatted_errors(self) -> ErrorReport:
        """Path -> messages, with enum unions consolidated and noise removed."""
        if self.failure is None:
            return {}
        return build_report(self.failure)


class MalformedInputError(GoblValidationError):
    pass


class MissingSchemaFieldError(GoblValidationError):
    def __init__(self) -> None:
        super().__init__("The data does not contain a $schema property.")


class UnsupportedSchemaError(GoblValidationError):
    def __init__(self, identifier: str, supported: Iterable[str]):
        names = ", ".join(supported)
        super().__init__(
            f"The schema '{identifier}' is not a supported GOBL root schema. Supported schemas: {names}."
        )
        self.identifier = identifier


class SchemaViolationError(GoblValidationError):
    def __init__(self, schema_id: str, failure: FailureNode):
        super().__init__(f"Validation failed against schema: {schema_id}", failure)
        self.schema_id = schema_id
