"""Model validation error and the field checks shared by the domain models."""

from __future__ import annotations

from nearby_search.core.exceptions import SearchError, ValidationError


class ModelValidationError(ValueError, ValidationError):
    """Raised when a domain model is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        formatted = f"{model}.{field_name}={value!r}: {message}"
        SearchError.__init__(self, formatted)


def check_positive(model: str, field_name: str, value: float | int) -> None:
    """Raise `ModelValidationError` unless *value* is strictly greater than zero."""
    if value <= 0:
        raise ModelValidationError(model, field_name, value, "must be > 0")


def check_non_empty(model: str, field_name: str, value: str) -> None:
    """Raise `ModelValidationError` if *value* is empty or blank."""
    if not value or not value.strip():
        raise ModelValidationError(model, field_name, value, "must not be empty")
