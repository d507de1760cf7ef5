"""Service configuration loaded from environment variables.

Holds what the host supplies once at startup: the geometry service
endpoint, the HTTP timeout, and the buffer defaults a fresh action
starts from. Per-action search settings (target data source, distance,
unit) are edited through ``models.settings`` instead.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out
    of its valid range, so a bad deployment is caught at startup rather
    than on the first search.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from nearby_search.core.constants import DEFAULT_BUFFER_DISTANCE, DEFAULT_GEOMETRY_SERVICE_URL
from nearby_search.core.exceptions import ValidationError
from nearby_search.models.buffer import LinearUnit


class ConfigValidationError(ValidationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class SearchServiceConfig:
    """Immutable service configuration.

    Attributes:
        geometry_service_url: Base URL of the ArcGIS geometry server.
        http_timeout_s: Per-request HTTP timeout in seconds. ``0`` disables
            the local timeout so a slow service only stalls its own search.
        default_buffer_distance: Buffer distance a new action starts with.
        default_buffer_unit: Unit a new action starts with.
    """

    geometry_service_url: str = DEFAULT_GEOMETRY_SERVICE_URL
    http_timeout_s: float = 0.0
    default_buffer_distance: int = DEFAULT_BUFFER_DISTANCE
    default_buffer_unit: LinearUnit = LinearUnit.KILOMETER

    @property
    def http_timeout(self) -> float | None:
        """Timeout value for ``httpx`` (``None`` when disabled)."""
        return self.http_timeout_s or None

    @classmethod
    def from_env(cls) -> SearchServiceConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range, empty, or
                names an unknown unit.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``NEARBY_DEFAULT_BUFFER_DISTANCE=abc``).
        """
        raw_unit = os.getenv("NEARBY_DEFAULT_BUFFER_UNIT", LinearUnit.KILOMETER.value)
        try:
            unit = LinearUnit.parse(raw_unit)
        except ValueError as exc:
            raise ConfigValidationError(
                "NEARBY_DEFAULT_BUFFER_UNIT",
                raw_unit,
                "must be one of " + ", ".join(u.value for u in LinearUnit),
            ) from exc

        config = cls(
            geometry_service_url=os.getenv(
                "NEARBY_GEOMETRY_SERVICE_URL", DEFAULT_GEOMETRY_SERVICE_URL
            ).rstrip("/"),
            http_timeout_s=float(os.getenv("NEARBY_HTTP_TIMEOUT_S", "0")),
            default_buffer_distance=int(
                os.getenv("NEARBY_DEFAULT_BUFFER_DISTANCE", str(DEFAULT_BUFFER_DISTANCE))
            ),
            default_buffer_unit=unit,
        )
        _validate(config)
        return config


def _validate(config: SearchServiceConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.geometry_service_url:
        raise ConfigValidationError(
            "NEARBY_GEOMETRY_SERVICE_URL",
            config.geometry_service_url,
            "must not be empty",
        )

    if config.http_timeout_s < 0:
        raise ConfigValidationError(
            "NEARBY_HTTP_TIMEOUT_S",
            config.http_timeout_s,
            "must be >= 0 (seconds, 0 disables the timeout)",
        )

    if config.default_buffer_distance <= 0:
        raise ConfigValidationError(
            "NEARBY_DEFAULT_BUFFER_DISTANCE",
            config.default_buffer_distance,
            "must be > 0",
        )
