"""Remote service clients.

- GeometryService: Abstract buffer service
- ArcGISGeometryService: ArcGIS REST geometry server adapter
- GeometryBufferClient: Single in-flight buffer requests with supersession
- SpatialQueryClient: Intersection queries against a data source
"""

from nearby_search.services.base import (
    GeometryService,
    GeometryServiceContractError,
    GeometryServiceError,
    QueryServiceContractError,
    QueryServiceError,
    ServiceError,
)
from nearby_search.services.buffer_client import GeometryBufferClient
from nearby_search.services.geometry_service import ArcGISGeometryService
from nearby_search.services.query_client import SpatialQueryClient

__all__ = [
    "ArcGISGeometryService",
    "GeometryBufferClient",
    "GeometryService",
    "GeometryServiceContractError",
    "GeometryServiceError",
    "QueryServiceContractError",
    "QueryServiceError",
    "ServiceError",
    "SpatialQueryClient",
]
