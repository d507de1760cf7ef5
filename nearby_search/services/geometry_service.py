"""ArcGIS REST geometry server adapter.

Concrete ``GeometryService`` calling ``GeometryServer/buffer`` with
``httpx``. The request is form-encoded (POST avoids URL length limits
for large source geometries) and the JSON answer is validated with the
``BufferResponse`` pydantic model.

Failure mapping:
    - HTTP status errors, transport errors, and ``error`` objects in the
      body raise ``GeometryServiceError``.
    - A body that is not JSON, fails validation, or carries geometries
      that cannot be decoded raises ``GeometryServiceContractError``.
    - An empty ``geometries`` list is a normal, empty answer.

References:
    ArcGIS REST API, Buffer (Geometry Service):
        https://developers.arcgis.com/rest/services-reference/enterprise/buffer.htm
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import httpx
import pydantic

from nearby_search.core.constants import DEFAULT_GEOMETRY_SERVICE_URL, RESPONSE_FORMAT_JSON
from nearby_search.models.esri import BufferResponse
from nearby_search.services.base import (
    GeometryService,
    GeometryServiceContractError,
    GeometryServiceError,
)
from nearby_search.utils.esri_json import (
    GEOMETRY_DECODE_ERRORS,
    esri_geometry_type,
    from_esri_geometry,
    to_esri_geometry,
)

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from nearby_search.models.buffer import BufferSpec

logger = logging.getLogger("nearby_search.services.geometry_service")


class ArcGISGeometryService(GeometryService):
    """Buffer geometries with an ArcGIS REST geometry server.

    The adapter borrows an ``httpx.AsyncClient`` from the caller so that
    connection pooling and lifetime stay with the host.
    """

    name = "arcgis_geometry"

    def __init__(
        self,
        base_url: str = DEFAULT_GEOMETRY_SERVICE_URL,
        *,
        client: httpx.AsyncClient,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client

    @property
    def buffer_url(self) -> str:
        return f"{self._base_url}/buffer"

    async def buffer(
        self,
        spec: BufferSpec,
        *,
        union_results: bool = True,
    ) -> list[BaseGeometry]:
        """Call ``GeometryServer/buffer`` for one source geometry.

        Raises:
            GeometryServiceError: On HTTP, transport or service errors.
            GeometryServiceContractError: If the source geometry cannot be
                encoded or the response is malformed.
        """
        try:
            params = build_buffer_params(spec, union_results=union_results)
        except ValueError as exc:
            msg = f"Cannot encode source geometry: {exc}"
            raise GeometryServiceContractError(self.name, msg) from exc

        logger.debug(
            "Buffer request | url=%s | distance=%s | unit=%s | wkid=%d",
            self.buffer_url,
            spec.distance,
            spec.unit.value,
            spec.spatial_reference.wkid,
        )

        try:
            response = await self._client.post(self.buffer_url, data=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            msg = f"Buffer request failed with HTTP {exc.response.status_code}"
            raise GeometryServiceError(self.name, msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Buffer request failed: {exc}"
            raise GeometryServiceError(self.name, msg) from exc

        try:
            payload = BufferResponse.model_validate(response.json())
        except (json.JSONDecodeError, pydantic.ValidationError) as exc:
            msg = f"Malformed buffer response: {exc}"
            raise GeometryServiceContractError(self.name, msg) from exc

        if payload.error is not None:
            raise GeometryServiceError(
                self.name,
                payload.error.describe(),
                retryable=payload.error.code >= 500,
            )

        try:
            decoded = [from_esri_geometry(g) for g in payload.geometries]
        except GEOMETRY_DECODE_ERRORS as exc:
            msg = f"Malformed buffer geometry: {exc}"
            raise GeometryServiceContractError(self.name, msg) from exc

        polygons = [g for g in decoded if g is not None]
        logger.debug(
            "Buffer response | returned=%d | usable=%d",
            len(payload.geometries),
            len(polygons),
        )
        return polygons


def build_buffer_params(spec: BufferSpec, *, union_results: bool = True) -> dict[str, str]:
    """Build the form fields of a ``GeometryServer/buffer`` request."""
    wkid = str(spec.spatial_reference.wkid)
    geometries = {
        "geometryType": esri_geometry_type(spec.geometry),
        "geometries": [to_esri_geometry(spec.geometry)],
    }
    return {
        "geometries": json.dumps(geometries),
        "inSR": wkid,
        "outSR": wkid,
        "bufferSR": wkid,
        "distances": _format_distance(spec.distance),
        "unit": str(spec.unit.esri_code),
        "unionResults": "true" if union_results else "false",
        "geodesic": "false",
        "f": RESPONSE_FORMAT_JSON,
    }


def _format_distance(distance: float) -> str:
    return str(int(distance)) if float(distance).is_integer() else repr(float(distance))
