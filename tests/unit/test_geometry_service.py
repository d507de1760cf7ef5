"""Tests for the ArcGISGeometryService adapter.

Requests are served by ``httpx.MockTransport`` so the adapter's real
request building, status handling and payload validation run without
network access.

References:
    ArcGIS REST API, Buffer (Geometry Service)
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from urllib.parse import parse_qs

import httpx
import pytest
from shapely.geometry import GeometryCollection, Point, Polygon

from nearby_search.models.buffer import BufferSpec, LinearUnit
from nearby_search.models.spatial import SpatialReference
from nearby_search.services.base import GeometryServiceContractError, GeometryServiceError
from nearby_search.services.geometry_service import ArcGISGeometryService, build_buffer_params

BASE_URL = "https://geo.example.com/arcgis/rest/services/Utilities/Geometry/GeometryServer"

_RING = [[-5, -5], [-5, 5], [5, 5], [5, -5], [-5, -5]]


def _spec(**kwargs) -> BufferSpec:
    kwargs.setdefault("geometry", Point(100.0, 200.0))
    kwargs.setdefault("distance", 5)
    return BufferSpec(**kwargs)


def _buffer(
    handler: Callable[[httpx.Request], httpx.Response],
    spec: BufferSpec | None = None,
    **kwargs,
):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            service = ArcGISGeometryService(BASE_URL, client=client)
            return await service.buffer(spec or _spec(), **kwargs)

    return asyncio.run(run())


def _form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


class TestBuildBufferParams:
    """Form fields of the buffer request."""

    def test_fields(self) -> None:
        spec = _spec(
            distance=5,
            unit=LinearUnit.SURVEY_MILE,
            spatial_reference=SpatialReference(102100),
        )
        params = build_buffer_params(spec)

        assert params["inSR"] == "102100"
        assert params["outSR"] == "102100"
        assert params["bufferSR"] == "102100"
        assert params["distances"] == "5"
        assert params["unit"] == "9035"
        assert params["unionResults"] == "true"
        assert params["geodesic"] == "false"
        assert params["f"] == "json"

    def test_geometries_payload(self) -> None:
        params = build_buffer_params(_spec())
        assert json.loads(params["geometries"]) == {
            "geometryType": "esriGeometryPoint",
            "geometries": [{"x": 100.0, "y": 200.0}],
        }

    def test_fractional_distance(self) -> None:
        assert build_buffer_params(_spec(distance=2.5))["distances"] == "2.5"

    def test_union_flag(self) -> None:
        assert build_buffer_params(_spec(), union_results=False)["unionResults"] == "false"

    @pytest.mark.parametrize(
        ("unit", "code"),
        [
            (LinearUnit.KILOMETER, "9036"),
            (LinearUnit.METER, "9001"),
            (LinearUnit.SURVEY_YARD, "109002"),
        ],
    )
    def test_unit_codes(self, unit: LinearUnit, code: str) -> None:
        assert build_buffer_params(_spec(unit=unit))["unit"] == code


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TestArcGISGeometryService:
    """HTTP round trips through a mock transport."""

    def test_posts_form_to_buffer_endpoint(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"geometries": [{"rings": [_RING]}]})

        _buffer(handler)

        assert seen[0].method == "POST"
        assert str(seen[0].url) == f"{BASE_URL}/buffer"
        form = _form(seen[0])
        assert form["unit"] == "9036"
        assert form["distances"] == "5"

    def test_trailing_slash_in_base_url(self) -> None:
        service = ArcGISGeometryService(BASE_URL + "/", client=httpx.AsyncClient())
        assert service.buffer_url == f"{BASE_URL}/buffer"

    def test_returns_polygons(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"geometries": [{"rings": [_RING]}]})

        polygons = _buffer(handler)

        assert len(polygons) == 1
        assert polygons[0].equals(Polygon([(-5, -5), (5, -5), (5, 5), (-5, 5)]))

    def test_empty_geometries(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"geometries": []})

        assert _buffer(handler) == []

    def test_unusable_geometries_skipped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"geometries": [{"rings": []}, {"rings": [_RING]}]})

        assert len(_buffer(handler)) == 1

    def test_http_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        with pytest.raises(GeometryServiceError, match="HTTP 503"):
            _buffer(handler)

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GeometryServiceError, match="connection refused"):
            _buffer(handler)

    def test_error_payload(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "error": {
                        "code": 400,
                        "message": "Unable to complete operation.",
                        "details": ["Invalid unit"],
                    }
                },
            )

        with pytest.raises(GeometryServiceError) as exc_info:
            _buffer(handler)
        assert exc_info.value.message == "Unable to complete operation.; Invalid unit"
        assert exc_info.value.retryable is False

    def test_server_side_error_payload_is_retryable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": {"code": 500, "message": "Internal"}})

        with pytest.raises(GeometryServiceError) as exc_info:
            _buffer(handler)
        assert exc_info.value.retryable is True

    def test_non_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>proxy login</html>")

        with pytest.raises(GeometryServiceContractError):
            _buffer(handler)

    def test_malformed_geometries(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"geometries": "nope"})

        with pytest.raises(GeometryServiceContractError):
            _buffer(handler)

    def test_ring_with_one_coordinate_per_vertex(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"geometries": [{"rings": [[[1], [2], [3], [1]]]}]})

        with pytest.raises(GeometryServiceContractError, match="Malformed buffer geometry"):
            _buffer(handler)

    def test_non_numeric_coordinates(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            ring = [["a", "b"], [0, 5], [5, 5], ["a", "b"]]
            return httpx.Response(200, json={"geometries": [{"rings": [ring]}]})

        with pytest.raises(GeometryServiceContractError):
            _buffer(handler)

    def test_unencodable_source_geometry_is_not_sent(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"geometries": []})

        spec = _spec(geometry=GeometryCollection([Point(0, 0)]))
        with pytest.raises(GeometryServiceContractError, match="Cannot encode source geometry"):
            _buffer(handler, spec)
        assert seen == []
