"""Coordinate reference system value type."""

from __future__ import annotations

from dataclasses import dataclass

from nearby_search.models.validation import check_positive

WEB_MERCATOR_WKID = 3857
WGS84_WKID = 4326


@dataclass(frozen=True, slots=True)
class SpatialReference:
    """A coordinate reference system identified by its well-known ID.

    Attributes:
        wkid: Well-known ID (e.g. ``3857`` for Web Mercator).
    """

    wkid: int = WEB_MERCATOR_WKID

    def __post_init__(self) -> None:
        check_positive("SpatialReference", "wkid", self.wkid)

    def to_esri(self) -> dict[str, int]:
        """Return the Esri JSON ``spatialReference`` object."""
        return {"wkid": self.wkid}
