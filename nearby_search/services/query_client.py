"""Spatial query client.

Queries a target data source for every record intersecting a polygon.
An unset target or an empty polygon short-circuits to an empty result
without touching the data source. Query failures are logged and
reported as an empty ``QueryResult`` carrying the diagnostic, because
the caller treats failed, canceled and empty queries alike.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from nearby_search.models.query import QueryResult, SpatialQuery
from nearby_search.models.spatial import SpatialReference
from nearby_search.services.base import QueryServiceError, ServiceError

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from nearby_search.host.data_source import DataSource

logger = logging.getLogger("nearby_search.services.query_client")


class SpatialQueryClient:
    """Runs intersection queries and never raises on remote failure."""

    async def query(
        self,
        target: DataSource | None,
        polygon: BaseGeometry | None,
        spatial_reference: SpatialReference | None = None,
    ) -> QueryResult:
        """Return the records of *target* intersecting *polygon*.

        Args:
            target: Data source to query.
            polygon: Filter polygon.
            spatial_reference: Reference system of *polygon* and of the
                returned geometries.

        Returns:
            A ``QueryResult``; empty if the preconditions are not met or
            the query failed.
        """
        if target is None or polygon is None or polygon.is_empty:
            logger.debug("Query skipped | target=%s | polygon_empty=True", target)
            return QueryResult.empty()

        query = SpatialQuery(
            geometry=polygon,
            spatial_reference=spatial_reference or SpatialReference(),
        )
        try:
            result = await target.execute_query(query)
        except (ServiceError, httpx.HTTPError) as exc:
            error = exc if isinstance(exc, ServiceError) else QueryServiceError(target.id, str(exc))
            details = error.to_error_dict()
            logger.warning(
                "Query failed | target=%s | code=%s | category=%s | retryable=%s | %s",
                target.id,
                details["code"],
                details["category"],
                details["retryable"],
                error,
            )
            return QueryResult.failed(str(exc))

        if result is None:
            return QueryResult.empty()

        logger.info(
            "Query completed | target=%s | features=%d | canceled=%s",
            target.id,
            len(result.features),
            result.canceled,
        )
        return result
