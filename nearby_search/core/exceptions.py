"""Exception hierarchy for the search nearby workflow.

Remote calls fail in three ways that the workflow treats differently:

- ``TransientError``: transport or service trouble; searching again may work.
- ``ContractError``: the service answered, but not in a shape we can read.
- ``ValidationError``: bad local input (configuration or model fields).

The buffer and query clients catch these at their boundary, log
``to_error_dict()`` and turn the failure into an outcome value.
"""

from __future__ import annotations


class SearchError(Exception):
    """Base class for search-nearby errors.

    Attributes:
        message: Human-readable description.
        stage: Step that failed (``"buffer"``, ``"query"``, ``"config"``...).
        code: Stable machine-readable code, e.g. ``"BUFFER_FAILED"``.
        retryable: Whether triggering the search again may succeed.
    """

    default_stage: str = ""
    default_code: str = ""
    default_retryable: bool = False

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool | None = None,
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = self.default_retryable if retryable is None else retryable
        super().__init__(message)

    @property
    def category(self) -> str:
        """``validation``, ``contract`` or ``transient``; else derived from ``retryable``."""
        for cls, name in _CATEGORIES:
            if isinstance(self, cls):
                return name
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Structured form used in log records."""
        return {
            "category": self.category,
            "stage": self.stage,
            "code": self.code,
            "retryable": self.retryable,
            "message": self.message,
        }


class ValidationError(SearchError):
    """Invalid configuration or model input."""


class TransientError(SearchError):
    """Failure that may clear up on the next search."""

    default_retryable = True


class ContractError(SearchError):
    """Remote payload of unexpected shape."""


_CATEGORIES: tuple[tuple[type[SearchError], str], ...] = (
    (ContractError, "contract"),
    (ValidationError, "validation"),
    (TransientError, "transient"),
)
