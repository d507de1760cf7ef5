"""Data source abstraction and the ArcGIS feature layer implementation.

A data source is a named, queryable collection of spatial records owned
by the host. The search action only keeps non-owning references to data
sources and compares them by ``id``.

``FeatureServiceDataSource`` runs intersection queries against an ArcGIS
REST feature layer ``query`` endpoint with ``httpx``.

References:
    ArcGIS REST API, Query (Feature Service/Layer):
        https://developers.arcgis.com/rest/services-reference/enterprise/query-feature-service-layer.htm
"""

from __future__ import annotations

import abc
import json
import logging
from typing import TYPE_CHECKING

import httpx
import pydantic

from nearby_search.core.constants import (
    DEFAULT_OBJECT_ID_FIELD,
    RESPONSE_FORMAT_JSON,
    SPATIAL_REL_INTERSECTS,
    WHERE_ALL,
)
from nearby_search.models.esri import QueryResponse
from nearby_search.models.feature import Feature
from nearby_search.models.query import QueryResult
from nearby_search.models.validation import check_non_empty
from nearby_search.services.base import QueryServiceContractError, QueryServiceError
from nearby_search.utils.esri_json import (
    GEOMETRY_DECODE_ERRORS,
    esri_geometry_type,
    from_esri_geometry,
    to_esri_geometry,
)

if TYPE_CHECKING:
    from nearby_search.models.query import SpatialQuery

logger = logging.getLogger("nearby_search.host.data_source")


class DataSource(abc.ABC):
    """A queryable collection of spatial records.

    Attributes:
        id: Stable identifier; two references to the same source compare
            equal by ``id``.
        name: Display name.
        object_id_field_name: Attribute holding each record's identifier.
        is_selectable: Whether features of this source can be selected.
    """

    def __init__(
        self,
        id: str,
        name: str = "",
        *,
        object_id_field_name: str = DEFAULT_OBJECT_ID_FIELD,
        is_selectable: bool = True,
    ) -> None:
        check_non_empty(type(self).__name__, "id", id)
        self.id = id
        self.name = name or id
        self.object_id_field_name = object_id_field_name
        self.is_selectable = is_selectable

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataSource):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, name={self.name!r})"

    @abc.abstractmethod
    async def execute_query(self, query: SpatialQuery) -> QueryResult:
        """Run *query* against this source.

        Returns:
            The matching records, or a ``QueryResult`` flagged ``canceled``.

        Raises:
            QueryServiceError: On transport or service errors.
            QueryServiceContractError: If the filter geometry cannot be
                encoded or the response is malformed.
        """


class FeatureServiceDataSource(DataSource):
    """Data source backed by an ArcGIS REST feature layer.

    Args:
        id: Data source identifier.
        layer_url: Feature layer URL (``.../FeatureServer/0``).
        client: Shared ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        id: str,
        layer_url: str,
        *,
        client: httpx.AsyncClient,
        name: str = "",
        object_id_field_name: str = DEFAULT_OBJECT_ID_FIELD,
        is_selectable: bool = True,
    ) -> None:
        super().__init__(
            id,
            name,
            object_id_field_name=object_id_field_name,
            is_selectable=is_selectable,
        )
        check_non_empty("FeatureServiceDataSource", "layer_url", layer_url)
        self.layer_url = layer_url.rstrip("/")
        self._client = client

    @property
    def query_url(self) -> str:
        return f"{self.layer_url}/query"

    async def execute_query(self, query: SpatialQuery) -> QueryResult:
        try:
            params = build_query_params(query)
        except ValueError as exc:
            msg = f"Cannot encode filter geometry: {exc}"
            raise QueryServiceContractError(self.id, msg) from exc

        try:
            response = await self._client.post(self.query_url, data=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            msg = f"Query failed with HTTP {exc.response.status_code}"
            raise QueryServiceError(self.id, msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Query failed: {exc}"
            raise QueryServiceError(self.id, msg) from exc

        try:
            payload = QueryResponse.model_validate(response.json())
        except (json.JSONDecodeError, pydantic.ValidationError) as exc:
            msg = f"Malformed query response: {exc}"
            raise QueryServiceContractError(self.id, msg) from exc

        if payload.error is not None:
            raise QueryServiceError(
                self.id,
                payload.error.describe(),
                retryable=payload.error.code >= 500,
            )

        if payload.exceeded_transfer_limit:
            logger.warning(
                "Query result truncated by service | source=%s | returned=%d",
                self.id,
                len(payload.features),
            )

        try:
            features = tuple(
                Feature(geometry=from_esri_geometry(f.geometry), attributes=dict(f.attributes))
                for f in payload.features
            )
        except GEOMETRY_DECODE_ERRORS as exc:
            msg = f"Malformed feature geometry: {exc}"
            raise QueryServiceContractError(self.id, msg) from exc

        return QueryResult(features=features)


def build_query_params(query: SpatialQuery) -> dict[str, str]:
    """Build the form fields of a feature layer ``query`` request."""
    wkid = str(query.spatial_reference.wkid)
    return {
        "where": query.where or WHERE_ALL,
        "geometry": json.dumps(to_esri_geometry(query.geometry, query.spatial_reference)),
        "geometryType": esri_geometry_type(query.geometry),
        "spatialRel": SPATIAL_REL_INTERSECTS,
        "inSR": wkid,
        "outSR": wkid,
        "outFields": query.out_fields,
        "returnGeometry": "true" if query.return_geometry else "false",
        "f": RESPONSE_FORMAT_JSON,
    }
