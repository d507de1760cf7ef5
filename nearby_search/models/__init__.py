"""Data models.

- Feature: A spatial record with a mutable selection flag
- SpatialReference: Coordinate reference system by well-known ID
- BufferSpec / BufferResult: Input and outcome of the buffer step
- SpatialQuery / QueryResult: Input and outcome of the query step
- SearchSettings / SettingsForm: Configuration surface
"""

from nearby_search.models.buffer import (
    SUPPORTED_UNITS,
    BufferResult,
    BufferSpec,
    BufferStatus,
    LinearUnit,
)
from nearby_search.models.feature import Feature, extract_object_id
from nearby_search.models.query import QueryResult, SpatialQuery
from nearby_search.models.settings import SearchSettings, SettingsForm
from nearby_search.models.spatial import SpatialReference
from nearby_search.models.validation import ModelValidationError

__all__ = [
    "SUPPORTED_UNITS",
    "BufferResult",
    "BufferSpec",
    "BufferStatus",
    "Feature",
    "LinearUnit",
    "ModelValidationError",
    "QueryResult",
    "SearchSettings",
    "SettingsForm",
    "SpatialQuery",
    "SpatialReference",
    "extract_object_id",
]
