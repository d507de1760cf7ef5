"""Data model for a spatial record.

A ``Feature`` is a geometry, an attribute mapping and a mutable
selection flag. Features fetched by a query and features rendered on a
map surface are distinct objects even when they describe the same
record; they are correlated only by identifier value (see
``extract_object_id``), never by object identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry


@dataclass(slots=True, eq=False)
class Feature:
    """A single spatial record.

    Attributes:
        geometry: Shapely geometry, or ``None`` for attribute-only records.
        attributes: Field name to value mapping.
        selected: Whether the feature is currently selected.
    """

    geometry: BaseGeometry | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    selected: bool = False

    def select(self) -> None:
        self.selected = True

    def unselect(self) -> None:
        self.selected = False


def extract_object_id(feature: Feature, field_name: str) -> int | None:
    """Extract an integer identifier from *feature*'s *field_name* attribute.

    Accepts integers, integral floats and strings holding an integer.
    A missing attribute, a ``None`` value, a boolean or anything that
    does not parse as an integer yields ``None``.
    """
    value = feature.attributes.get(field_name)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
