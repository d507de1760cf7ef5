"""Typed models for the spatial query step.

- ``SpatialQuery``: Intersection query against a data source
- ``QueryResult``: Records returned by a data source query
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nearby_search.core.constants import OUT_FIELDS_ALL
from nearby_search.models.feature import extract_object_id
from nearby_search.models.spatial import SpatialReference

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from nearby_search.models.feature import Feature


@dataclass(frozen=True, slots=True)
class SpatialQuery:
    """Select every record whose geometry intersects ``geometry``.

    Attributes:
        geometry: Filter geometry.
        where: Attribute filter; empty means all records.
        return_geometry: Whether returned records carry their geometry.
        out_fields: Attribute fields to return.
        spatial_reference: Reference system of ``geometry`` and of the
            returned geometries.
    """

    geometry: BaseGeometry
    where: str = ""
    return_geometry: bool = True
    out_fields: str = OUT_FIELDS_ALL
    spatial_reference: SpatialReference = field(default_factory=SpatialReference)


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Records returned by a data source query.

    Attributes:
        features: Returned records (distinct from any rendered features).
        canceled: Whether the query was canceled before it completed.
        error: Diagnostic text when the query failed; empty otherwise.
    """

    features: tuple[Feature, ...] = ()
    canceled: bool = False
    error: str = ""

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to select, whatever the reason."""
        return self.canceled or not self.features

    def matched_ids(self, field_name: str) -> frozenset[int]:
        """Identifiers of the returned records, read from *field_name*.

        Canceled and failed queries match nothing. Records whose
        identifier cannot be extracted are skipped.
        """
        if self.is_empty:
            return frozenset()
        ids = (extract_object_id(f, field_name) for f in self.features)
        return frozenset(i for i in ids if i is not None)

    @classmethod
    def empty(cls) -> QueryResult:
        return cls()

    @classmethod
    def failed(cls, error: str) -> QueryResult:
        return cls(error=error)
