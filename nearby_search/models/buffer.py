"""Typed models for the buffer step.

- ``LinearUnit``: Units a buffer distance may be expressed in
- ``BufferSpec``: Immutable per-run buffer input
- ``BufferStatus`` / ``BufferResult``: Outcome of one buffer request

Design notes:
- Models are frozen dataclasses; ``BufferSpec`` validates its distance
  on construction so a non-positive distance can never reach the service.
- A ``BufferResult`` is an outcome value, not an exception: transport
  failures, empty answers and superseded requests are all reported
  through ``status``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nearby_search.models.spatial import SpatialReference
from nearby_search.models.validation import ModelValidationError, check_positive

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry


class LinearUnit(enum.Enum):
    """Linear units offered for the buffer distance.

    Values are the lower-case names used in configuration; ``esri_code``
    is the unit code the geometry service expects.
    """

    KILOMETER = "kilometer"
    METER = "meter"
    SURVEY_MILE = "survey_mile"
    SURVEY_YARD = "survey_yard"

    @property
    def esri_code(self) -> int:
        """Esri ``esriSRUnitType`` code for this unit."""
        return _ESRI_UNIT_CODES[self]

    @property
    def label(self) -> str:
        """Display label for configuration forms."""
        return self.value.replace("_", " ").title()

    @classmethod
    def parse(cls, raw: str) -> LinearUnit:
        """Resolve a unit from its value, member name or label.

        Matching ignores case, hyphens and spaces
        (``"Survey Mile"``, ``"survey-mile"`` and ``"SURVEY_MILE"`` all match).

        Raises:
            ValueError: If *raw* names no known unit.
        """
        key = raw.strip().lower().replace("-", "_").replace(" ", "_")
        for unit in cls:
            if unit.value == key:
                return unit
        msg = f"Unknown linear unit: {raw!r}. Expected one of: {', '.join(u.value for u in cls)}"
        raise ValueError(msg)


_ESRI_UNIT_CODES: dict[LinearUnit, int] = {
    LinearUnit.KILOMETER: 9036,
    LinearUnit.METER: 9001,
    LinearUnit.SURVEY_MILE: 9035,
    LinearUnit.SURVEY_YARD: 109002,
}

#: Order in which units are offered to the user.
SUPPORTED_UNITS: tuple[LinearUnit, ...] = (
    LinearUnit.KILOMETER,
    LinearUnit.METER,
    LinearUnit.SURVEY_MILE,
    LinearUnit.SURVEY_YARD,
)


@dataclass(frozen=True, slots=True)
class BufferSpec:
    """Input for one buffer request.

    Attributes:
        geometry: Source geometry to expand, in ``spatial_reference``.
        distance: Buffer distance, strictly positive, in ``unit``.
        unit: Linear unit of ``distance``.
        spatial_reference: Reference system used as input, buffer and
            output reference system (the hosting map surface's).
    """

    geometry: BaseGeometry
    distance: float
    unit: LinearUnit = LinearUnit.KILOMETER
    spatial_reference: SpatialReference = field(default_factory=SpatialReference)

    def __post_init__(self) -> None:
        check_positive("BufferSpec", "distance", self.distance)
        if self.geometry is None or self.geometry.is_empty:
            raise ModelValidationError("BufferSpec", "geometry", self.geometry, "must not be empty")


class BufferStatus(enum.Enum):
    """How a buffer request ended.

    Values:
        SUCCEEDED:  The service returned a polygon.
        NO_RESULT:  The service answered with zero or malformed geometries.
        FAILED:     Transport or service failure; ``message`` says why.
        SUPERSEDED: A newer request was issued before this one resolved.
    """

    SUCCEEDED = "succeeded"
    NO_RESULT = "no_result"
    FAILED = "failed"
    SUPERSEDED = "superseded"


@dataclass(frozen=True, slots=True)
class BufferResult:
    """Outcome of a single buffer request.

    Attributes:
        status: How the request ended.
        polygon: The buffered polygon (only when ``SUCCEEDED``).
        message: Diagnostic text for ``FAILED`` and ``NO_RESULT``.
        generation: Generation token the request was issued under.
    """

    status: BufferStatus
    polygon: BaseGeometry | None = None
    message: str = ""
    generation: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status is BufferStatus.SUCCEEDED

    @classmethod
    def success(cls, polygon: BaseGeometry, generation: int = 0) -> BufferResult:
        return cls(BufferStatus.SUCCEEDED, polygon=polygon, generation=generation)

    @classmethod
    def no_result(cls, message: str = "", generation: int = 0) -> BufferResult:
        return cls(BufferStatus.NO_RESULT, message=message, generation=generation)

    @classmethod
    def failure(cls, message: str, generation: int = 0) -> BufferResult:
        return cls(BufferStatus.FAILED, message=message, generation=generation)

    @classmethod
    def superseded(cls, generation: int = 0) -> BufferResult:
        return cls(BufferStatus.SUPERSEDED, generation=generation)
