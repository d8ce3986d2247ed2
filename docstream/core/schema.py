"""
Schema validation of document content against model schemas.

Compiled validators are cached per SchemaValidator instance, keyed by model
id. Two threads compiling the same model at once both produce an equivalent
validator; whichever is stored last is kept.
"""

from typing import Any, Dict, List

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError, ValidationError

from ..errors import SchemaValidationError
from ..logging_config import get_logger

logger = get_logger(__name__)


def _pointer(error: ValidationError) -> str:
    parts = []
    for part in error.absolute_path:
        parts.append(str(part).replace("~", "~0").replace("/", "~1"))
    return "".join(f"/{p}" for p in parts)


def describe_error(error: ValidationError) -> str:
    """Render one violation as `data<pointer> [<keyword>] <message>`."""
    return f"data{_pointer(error)} [{error.validator}] {error.message}"


class SchemaValidator:
    """
    Validates content against JSON Schema (draft 2020-12) with format checks.

    Usage:
        validator = SchemaValidator()
        validator.validate(model_id, schema, content)
    """

    def __init__(self) -> None:
        self._cache: Dict[str, Draft202012Validator] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, model_id: str) -> bool:
        return model_id in self._cache

    def compile(self, model_id: str, schema: Dict[str, Any]) -> Draft202012Validator:
        """
        Get the compiled validator for a model, compiling on first use.

        Raises:
            SchemaValidationError: If the schema itself is invalid
        """
        validator = self._cache.get(model_id)
        if validator is not None:
            return validator
        try:
            Draft202012Validator.check_schema(schema)
        except SchemaError as e:
            raise SchemaValidationError(
                f"Invalid schema for Model {model_id}: {e.message}", model_id=model_id
            ) from e
        validator = Draft202012Validator(schema, format_checker=Draft202012Validator.FORMAT_CHECKER)
        self._cache[model_id] = validator
        logger.debug("Compiled schema for model %s", model_id)
        return validator

    def errors(self, model_id: str, schema: Dict[str, Any], content: Any) -> List[str]:
        validator = self.compile(model_id, schema)
        found = sorted(validator.iter_errors(content), key=lambda e: (_pointer(e), str(e.validator), e.message))
        return [describe_error(e) for e in found]

    def validate(self, model_id: str, schema: Dict[str, Any], content: Any) -> None:
        """
        Validate content against the model schema.

        Raises:
            SchemaValidationError: "Validation Error: ..." listing every violation
        """
        errors = self.errors(model_id, schema, content)
        if errors:
            raise SchemaValidationError(
                f"Validation Error: {', '.join(errors)}", model_id=model_id, errors=errors
            )
