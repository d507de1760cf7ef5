"""In-memory stand-ins for the remote services and the host.

``FakeGeometryService`` buffers with shapely (distance taken as map
units) unless a scripted response is queued. ``FakeDataSource`` answers
intersection queries from its own record list, returning fresh
``Feature`` objects the way a real service would.

Both can hold calls on an ``asyncio.Event`` so tests control when a
remote call resolves.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from shapely.geometry import Point

from nearby_search.host.data_source import DataSource
from nearby_search.host.map_surface import FeatureLayer, MapHost, MapSurface
from nearby_search.models.feature import Feature
from nearby_search.models.query import QueryResult
from nearby_search.models.spatial import SpatialReference
from nearby_search.services.base import GeometryService

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from nearby_search.models.buffer import BufferSpec
    from nearby_search.models.query import SpatialQuery


class FakeGeometryService(GeometryService):
    """Scriptable geometry service.

    Args:
        responses: Queued answers, consumed in order. Each item is a list
            of geometries to return or an exception to raise. When the
            queue is empty the source geometry is buffered with shapely.
        hold: Make every call wait for ``release`` before answering.
    """

    name = "fake_geometry"

    def __init__(self, responses: list[Any] | None = None, *, hold: bool = False) -> None:
        self.responses = list(responses or [])
        self.calls: list[BufferSpec] = []
        self.union_flags: list[bool] = []
        self.cancelled = 0
        self.hold = hold
        self.release = asyncio.Event()

    async def buffer(self, spec: BufferSpec, *, union_results: bool = True) -> list[BaseGeometry]:
        self.calls.append(spec)
        self.union_flags.append(union_results)
        response = self.responses.pop(0) if self.responses else None
        if self.hold:
            try:
                await self.release.wait()
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if isinstance(response, BaseException):
            raise response
        if response is None:
            return [spec.geometry.buffer(spec.distance)]
        return response


class FakeDataSource(DataSource):
    """Data source answering queries from an in-memory record list.

    Args:
        id: Data source identifier.
        records: Server-side records; queries return copies of those
            intersecting the filter geometry.
        result: Fixed result returned instead of filtering ``records``.
        error: Exception raised by every query.
        hold_first: Make only the first query wait for ``release``.
    """

    def __init__(
        self,
        id: str,
        records: list[Feature] | None = None,
        *,
        result: QueryResult | None = None,
        error: BaseException | None = None,
        hold_first: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(id, **kwargs)
        self.records = list(records or [])
        self.result = result
        self.error = error
        self.hold_first = hold_first
        self.release = asyncio.Event()
        self.queries: list[SpatialQuery] = []

    async def execute_query(self, query: SpatialQuery) -> QueryResult:
        self.queries.append(query)
        if self.hold_first and len(self.queries) == 1:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return QueryResult(
            features=tuple(
                Feature(geometry=r.geometry, attributes=dict(r.attributes))
                for r in self.records
                if r.geometry is not None and r.geometry.intersects(query.geometry)
            )
        )


def make_feature(
    object_id: object,
    x: float = 0.0,
    y: float = 0.0,
    *,
    selected: bool = False,
    field_name: str = "OBJECTID",
) -> Feature:
    """Build a point feature carrying *object_id* in *field_name*."""
    return Feature(geometry=Point(x, y), attributes={field_name: object_id}, selected=selected)


class Scene:
    """A host with one map surface rendering a trigger and a target source.

    Target features 1, 2 and 3 sit at (1, 0), (10, 0) and (-2, 0); the
    server-side records mirror them as distinct objects.
    """

    def __init__(self, *, wkid: int = 3857, **target_kwargs: Any) -> None:
        self.positions = {1: (1.0, 0.0), 2: (10.0, 0.0), 3: (-2.0, 0.0)}
        records = [make_feature(oid, *xy) for oid, xy in self.positions.items()]
        target_kwargs.setdefault("records", records)
        self.target = FakeDataSource("target", **target_kwargs)
        self.trigger = FakeDataSource("trigger")
        self.rendered = [make_feature(oid, *xy) for oid, xy in self.positions.items()]
        self.target_layer = FeatureLayer(self.target, self.rendered)
        self.surface = MapSurface(
            "map-1",
            SpatialReference(wkid),
            [FeatureLayer(self.trigger, []), self.target_layer],
        )
        self.notices: list[str] = []
        self.host = MapHost([self.surface], notifier=self.notices.append)

    def selection(self) -> dict[int, bool]:
        return {f.attributes["OBJECTID"]: f.selected for f in self.rendered}
