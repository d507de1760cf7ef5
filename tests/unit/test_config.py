"""Tests for service configuration.

Covers:
- Default values
- Loading from environment variables
- Type coercion (string env vars → numeric fields, unit names → LinearUnit)
- Fail-fast range validation
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from nearby_search.core.config import ConfigValidationError, SearchServiceConfig
from nearby_search.core.constants import DEFAULT_GEOMETRY_SERVICE_URL
from nearby_search.core.exceptions import ValidationError
from nearby_search.models.buffer import LinearUnit


class TestSearchServiceConfigDefaults:
    """Verify default configuration values."""

    def test_default_geometry_service(self) -> None:
        cfg = SearchServiceConfig()
        assert cfg.geometry_service_url == DEFAULT_GEOMETRY_SERVICE_URL

    def test_default_timeout_is_disabled(self) -> None:
        cfg = SearchServiceConfig()
        assert cfg.http_timeout_s == 0.0
        assert cfg.http_timeout is None

    def test_default_buffer(self) -> None:
        cfg = SearchServiceConfig()
        assert cfg.default_buffer_distance == 1
        assert cfg.default_buffer_unit is LinearUnit.KILOMETER

    def test_positive_timeout_is_passed_through(self) -> None:
        assert SearchServiceConfig(http_timeout_s=12.5).http_timeout == 12.5


class TestSearchServiceConfigFromEnv:
    """Verify loading from environment variables."""

    def test_loads_from_environment(self) -> None:
        env = {
            "NEARBY_GEOMETRY_SERVICE_URL": "https://gis.example.com/arcgis/rest/services/Geometry/GeometryServer/",
            "NEARBY_HTTP_TIMEOUT_S": "30",
            "NEARBY_DEFAULT_BUFFER_DISTANCE": "5",
            "NEARBY_DEFAULT_BUFFER_UNIT": "Survey Mile",
        }
        with patch.dict(os.environ, env, clear=False):
            cfg = SearchServiceConfig.from_env()

        assert cfg.geometry_service_url == (
            "https://gis.example.com/arcgis/rest/services/Geometry/GeometryServer"
        )
        assert cfg.http_timeout_s == 30.0
        assert cfg.default_buffer_distance == 5
        assert cfg.default_buffer_unit is LinearUnit.SURVEY_MILE

    def test_defaults_when_env_missing(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            cfg = SearchServiceConfig.from_env()
        assert cfg == SearchServiceConfig()

    def test_frozen(self) -> None:
        cfg = SearchServiceConfig()
        with pytest.raises(AttributeError):
            cfg.default_buffer_distance = 3  # type: ignore[misc]


class TestSearchServiceConfigValidation:
    """Fail-fast range validation in ``from_env``."""

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("NEARBY_HTTP_TIMEOUT_S", "-1"),
            ("NEARBY_DEFAULT_BUFFER_DISTANCE", "0"),
            ("NEARBY_DEFAULT_BUFFER_DISTANCE", "-4"),
            ("NEARBY_DEFAULT_BUFFER_UNIT", "furlong"),
            ("NEARBY_GEOMETRY_SERVICE_URL", ""),
        ],
    )
    def test_out_of_range_values_rejected(self, key: str, value: str) -> None:
        with patch.dict(os.environ, {key: value}, clear=True):
            with pytest.raises(ConfigValidationError) as exc_info:
                SearchServiceConfig.from_env()
        assert exc_info.value.key == key
        assert key in str(exc_info.value)

    def test_unparseable_number_raises_value_error(self) -> None:
        with patch.dict(os.environ, {"NEARBY_DEFAULT_BUFFER_DISTANCE": "abc"}, clear=True):
            with pytest.raises(ValueError):
                SearchServiceConfig.from_env()

    def test_message_format(self) -> None:
        err = ConfigValidationError("NEARBY_HTTP_TIMEOUT_S", -1.0, "must be >= 0")
        assert str(err) == "Invalid configuration NEARBY_HTTP_TIMEOUT_S=-1.0: must be >= 0"
        assert err.value == -1.0

    def test_is_validation_error(self) -> None:
        err = ConfigValidationError("k", "v", "bad")
        assert isinstance(err, ValidationError)
        assert err.category == "validation"
        assert err.stage == "config"
        assert err.retryable is False
