"""Shared constants: service endpoints and Esri REST keywords."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Geometry service
# ---------------------------------------------------------------------------

DEFAULT_GEOMETRY_SERVICE_URL: str = (
    "https://tasks.arcgisonline.com/ArcGIS/rest/services/Geometry/GeometryServer"
)
"""Public ArcGIS geometry server used when none is configured."""

DEFAULT_BUFFER_DISTANCE: int = 1
"""Buffer distance offered by a fresh configuration form."""

DEFAULT_OBJECT_ID_FIELD: str = "OBJECTID"

# ---------------------------------------------------------------------------
# Esri REST keywords
# ---------------------------------------------------------------------------

RESPONSE_FORMAT_JSON = "json"
SPATIAL_REL_INTERSECTS = "esriSpatialRelIntersects"
WHERE_ALL = "1=1"
OUT_FIELDS_ALL = "*"

GEOMETRY_POINT = "esriGeometryPoint"
GEOMETRY_MULTIPOINT = "esriGeometryMultipoint"
GEOMETRY_POLYLINE = "esriGeometryPolyline"
GEOMETRY_POLYGON = "esriGeometryPolygon"
