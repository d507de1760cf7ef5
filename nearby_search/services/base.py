"""GeometryService abstract base class and remote service exceptions.

The buffer client talks exclusively to this interface; it never knows
which concrete service (ArcGIS REST, an in-process fake) is behind it.

Exceptions raised by services and data sources derive from
``ServiceError``. The clients in this package catch them at their
boundary and turn them into outcome values, so none of them ever
escapes a search run.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from nearby_search.core.exceptions import ContractError, SearchError, TransientError

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from nearby_search.models.buffer import BufferSpec


class GeometryService(abc.ABC):
    """Abstract remote geometry service.

    Example usage::

        service = ArcGISGeometryService(url, client=http_client)
        polygons = await service.buffer(spec)
    """

    #: Short service name used in errors and logs.
    name: str = "geometry"

    @abc.abstractmethod
    async def buffer(
        self,
        spec: BufferSpec,
        *,
        union_results: bool = True,
    ) -> list[BaseGeometry]:
        """Buffer ``spec.geometry`` by ``spec.distance`` ``spec.unit``.

        Args:
            spec: Source geometry, distance, unit and reference system.
                The reference system is used as input, buffer and output
                reference system.
            union_results: Ask the service to merge all buffers into one.

        Returns:
            The buffered polygons, possibly empty. Callers use only the first.

        Raises:
            GeometryServiceError: On transport or service errors.
            GeometryServiceContractError: If the response is malformed.
        """


# ---------------------------------------------------------------------------
# Service exceptions
# ---------------------------------------------------------------------------


class ServiceError(SearchError):
    """Base exception for remote service errors.

    Attributes:
        service: Name of the service that raised the error.
        message: Human-readable error description.
        retryable: Whether triggering the search again may succeed.
    """

    default_stage = "service"
    default_code = "SERVICE_ERROR"

    def __init__(
        self,
        service: str,
        message: str,
        *,
        retryable: bool = False,
    ) -> None:
        self.service = service
        super().__init__(
            message,
            retryable=retryable,
            code=self.default_code,
            stage=self.default_stage,
        )

    def __str__(self) -> str:
        return f"[{self.service}] {self.message}"


class GeometryServiceError(ServiceError, TransientError):
    """Transport or service failure while buffering."""

    default_stage = "buffer"
    default_code = "BUFFER_FAILED"

    def __init__(self, service: str, message: str, *, retryable: bool = True) -> None:
        super().__init__(service, message, retryable=retryable)


class GeometryServiceContractError(ServiceError, ContractError):
    """Geometry service answered with a payload of unexpected shape."""

    default_stage = "buffer"
    default_code = "BUFFER_RESPONSE_MALFORMED"


class QueryServiceError(ServiceError, TransientError):
    """Transport or service failure while querying a data source."""

    default_stage = "query"
    default_code = "QUERY_FAILED"

    def __init__(self, service: str, message: str, *, retryable: bool = True) -> None:
        super().__init__(service, message, retryable=retryable)


class QueryServiceContractError(ServiceError, ContractError):
    """Feature service answered with a payload of unexpected shape."""

    default_stage = "query"
    default_code = "QUERY_RESPONSE_MALFORMED"
