"""Conversion between shapely geometries and Esri JSON geometries.

ArcGIS REST services exchange geometries as Esri JSON: points as
``x``/``y``, multipoints as ``points``, polylines as ``paths`` and
polygons as a flat list of ``rings``. Polygon rings carry no explicit
nesting; exterior rings run clockwise and holes counter-clockwise.

Only x/y are exchanged. Z and M values are dropped on the way out.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from shapely.errors import ShapelyError
from shapely.geometry import (
    LinearRing,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from shapely.geometry.polygon import orient

from nearby_search.core.constants import (
    GEOMETRY_MULTIPOINT,
    GEOMETRY_POINT,
    GEOMETRY_POLYGON,
    GEOMETRY_POLYLINE,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from shapely.geometry.base import BaseGeometry

    from nearby_search.models.spatial import SpatialReference

logger = logging.getLogger("nearby_search.utils.esri_json")

# Fewest distinct vertices a ring can have.
MIN_RING_VERTICES = 3

_GEOMETRY_TYPES: dict[str, str] = {
    "Point": GEOMETRY_POINT,
    "MultiPoint": GEOMETRY_MULTIPOINT,
    "LineString": GEOMETRY_POLYLINE,
    "MultiLineString": GEOMETRY_POLYLINE,
    "Polygon": GEOMETRY_POLYGON,
    "MultiPolygon": GEOMETRY_POLYGON,
}

#: Errors raised while decoding coordinate content that does not fit its key.
GEOMETRY_DECODE_ERRORS: tuple[type[Exception], ...] = (
    ValueError,
    TypeError,
    IndexError,
    KeyError,
    ShapelyError,
)


def is_supported_geometry(geom: BaseGeometry | None) -> bool:
    """Whether *geom* is non-empty and expressible as Esri JSON."""
    return geom is not None and not geom.is_empty and geom.geom_type in _GEOMETRY_TYPES


def esri_geometry_type(geom: BaseGeometry) -> str:
    """Return the ``esriGeometry*`` type name for *geom*.

    Raises:
        ValueError: For geometry types Esri JSON cannot express
            (e.g. ``GeometryCollection``).
    """
    try:
        return _GEOMETRY_TYPES[geom.geom_type]
    except KeyError:
        msg = f"Unsupported geometry type for Esri JSON: {geom.geom_type}"
        raise ValueError(msg) from None


def to_esri_geometry(
    geom: BaseGeometry,
    spatial_reference: SpatialReference | None = None,
) -> dict[str, Any]:
    """Convert a shapely geometry to an Esri JSON geometry object.

    Polygons are re-oriented so exterior rings run clockwise and holes
    counter-clockwise, as the ArcGIS REST API expects.

    Args:
        geom: Non-empty shapely geometry.
        spatial_reference: Optional reference system to embed.

    Returns:
        An Esri JSON geometry dict.

    Raises:
        ValueError: If *geom* is empty or of an unsupported type.
    """
    if geom is None or geom.is_empty:
        msg = "Cannot convert an empty geometry to Esri JSON"
        raise ValueError(msg)

    kind = geom.geom_type
    result: dict[str, Any]
    if kind == "Point":
        result = {"x": geom.x, "y": geom.y}
    elif kind == "MultiPoint":
        result = {"points": [[p.x, p.y] for p in geom.geoms]}
    elif kind == "LineString":
        result = {"paths": [_xy(geom.coords)]}
    elif kind == "MultiLineString":
        result = {"paths": [_xy(line.coords) for line in geom.geoms]}
    elif kind == "Polygon":
        result = {"rings": _polygon_rings(geom)}
    elif kind == "MultiPolygon":
        result = {"rings": [ring for poly in geom.geoms for ring in _polygon_rings(poly)]}
    else:
        msg = f"Unsupported geometry type for Esri JSON: {kind}"
        raise ValueError(msg)

    if spatial_reference is not None:
        result["spatialReference"] = spatial_reference.to_esri()
    return result


def from_esri_geometry(data: dict[str, Any] | None) -> BaseGeometry | None:
    """Convert an Esri JSON geometry object to a shapely geometry.

    The geometry kind is detected from the keys present, as Esri JSON
    geometries do not name their own type.

    Returns:
        A shapely geometry, or ``None`` when *data* is missing, empty,
        or has no recognisable geometry keys.

    Raises:
        One of ``GEOMETRY_DECODE_ERRORS`` when a recognised key holds
        coordinates of the wrong shape or type.
    """
    if not data:
        return None

    if "x" in data:
        if data.get("x") is None or data.get("y") is None:
            return None
        return Point(float(data["x"]), float(data["y"]))

    if "points" in data:
        points = [(float(p[0]), float(p[1])) for p in data["points"] or []]
        return MultiPoint(points) if points else None

    if "paths" in data:
        paths = [_xy(path) for path in data["paths"] or [] if len(path) >= 2]
        if not paths:
            return None
        if len(paths) == 1:
            return LineString(paths[0])
        return MultiLineString(paths)

    if "rings" in data:
        return _rings_to_polygon(data["rings"] or [])

    logger.debug("Unrecognised Esri geometry | keys=%s", sorted(data))
    return None


# ---------------------------------------------------------------------------
# Helpers (module-private)
# ---------------------------------------------------------------------------


def _xy(coords: Iterable[Sequence[float]]) -> list[list[float]]:
    return [[float(c[0]), float(c[1])] for c in coords]


def _polygon_rings(polygon: Polygon) -> list[list[list[float]]]:
    oriented = orient(polygon, sign=-1.0)
    rings = [_xy(oriented.exterior.coords)]
    rings.extend(_xy(interior.coords) for interior in oriented.interiors)
    return rings


def _open_ring(coords: list[list[float]]) -> LinearRing | None:
    """Build a ring, or ``None`` if it has fewer than three distinct vertices."""
    points = _xy(coords)
    if len(points) > 1 and points[0] == points[-1]:
        points = points[:-1]
    if len(points) < MIN_RING_VERTICES:
        return None
    return LinearRing(points)


def _rings_to_polygon(rings: list[list[list[float]]]) -> BaseGeometry | None:
    """Rebuild polygon nesting from a flat Esri ring list.

    Clockwise rings become shells; counter-clockwise rings become holes
    of the first shell that contains them. If no ring runs clockwise
    (some services ignore the convention), every ring is a shell.
    """
    parsed = [ring for ring in (_open_ring(r) for r in rings) if ring is not None]
    if not parsed:
        return None

    shells = [r for r in parsed if not r.is_ccw]
    holes = [r for r in parsed if r.is_ccw]
    if not shells:
        shells, holes = parsed, []

    shell_holes: list[list[LinearRing]] = [[] for _ in shells]
    for hole in holes:
        point = Polygon(hole).representative_point()
        for index, shell in enumerate(shells):
            if Polygon(shell).contains(point):
                shell_holes[index].append(hole)
                break
        else:
            logger.debug("Dropping orphan hole ring | vertices=%d", len(hole.coords))

    polygons = [Polygon(shell, shell_holes[i]) for i, shell in enumerate(shells)]
    if len(polygons) == 1:
        return polygons[0]
    return MultiPolygon(polygons)
