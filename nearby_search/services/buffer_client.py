"""Geometry buffer client with single in-flight request semantics.

Each client instance allows one unresolved buffer request at a time.
Issuing a request (or calling ``cancel``) bumps a generation counter and
cancels the previous request's task. Cancellation is advisory towards
the remote service; locally it is authoritative: when a request resolves
its generation is compared with the current one, and a stale request
reports ``SUPERSEDED`` instead of its result.

Every failure is converted to a ``BufferResult``; nothing raised by the
service escapes ``request_buffer``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from nearby_search.models.buffer import BufferResult
from nearby_search.services.base import (
    GeometryServiceContractError,
    GeometryServiceError,
    ServiceError,
)

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from nearby_search.models.buffer import BufferSpec
    from nearby_search.services.base import GeometryService

logger = logging.getLogger("nearby_search.services.buffer_client")


class GeometryBufferClient:
    """Turns buffer specs into ``BufferResult`` outcomes.

    Attributes:
        generation: Token of the most recent request (or cancellation).
    """

    def __init__(self, service: GeometryService) -> None:
        self._service = service
        self._inflight: asyncio.Task[list[BaseGeometry]] | None = None
        self.generation = 0

    @property
    def service(self) -> GeometryService:
        return self._service

    @property
    def busy(self) -> bool:
        """Whether a request is still unresolved."""
        return self._inflight is not None and not self._inflight.done()

    def cancel(self) -> None:
        """Invalidate the in-flight request, if any.

        The pending task is cancelled and the generation advances, so the
        awaiting caller receives ``SUPERSEDED`` even if the service answer
        has already arrived.
        """
        self.generation += 1
        inflight, self._inflight = self._inflight, None
        if inflight is not None and not inflight.done():
            inflight.cancel()
            logger.debug("Buffer request cancelled | generation=%d", self.generation)

    async def request_buffer(self, spec: BufferSpec) -> BufferResult:
        """Buffer ``spec``, superseding any request still in flight.

        Returns:
            A ``BufferResult`` whose status is ``SUCCEEDED`` (first polygon
            returned), ``NO_RESULT``, ``FAILED`` or ``SUPERSEDED``.
        """
        self.cancel()
        generation = self.generation
        task = asyncio.ensure_future(self._service.buffer(spec, union_results=True))
        self._inflight = task

        logger.info(
            "Buffer requested | generation=%d | distance=%s | unit=%s | wkid=%d",
            generation,
            spec.distance,
            spec.unit.value,
            spec.spatial_reference.wkid,
        )

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise

        if generation != self.generation or task.cancelled():
            logger.debug(
                "Discarding superseded buffer result | generation=%d | current=%d",
                generation,
                self.generation,
            )
            return BufferResult.superseded(generation)

        self._inflight = None
        return _to_result(task, generation)


def _to_result(task: asyncio.Task[list[BaseGeometry]], generation: int) -> BufferResult:
    """Convert a finished buffer task into an outcome value."""
    exc = task.exception()
    if isinstance(exc, httpx.HTTPError):
        exc = GeometryServiceError("http", str(exc))
    if isinstance(exc, GeometryServiceContractError):
        _log_failure("Buffer returned malformed result", generation, exc)
        return BufferResult.no_result(exc.message, generation)
    if isinstance(exc, ServiceError):
        _log_failure("Buffer failed", generation, exc)
        return BufferResult.failure(exc.message, generation)
    if exc is not None:
        raise exc

    polygons = task.result()
    if not polygons or polygons[0].is_empty:
        logger.info("Buffer returned no geometry | generation=%d", generation)
        return BufferResult.no_result("buffer service returned no geometry", generation)
    return BufferResult.success(polygons[0], generation)


def _log_failure(event: str, generation: int, exc: ServiceError) -> None:
    error = exc.to_error_dict()
    logger.warning(
        "%s | generation=%d | code=%s | category=%s | retryable=%s | %s",
        event,
        generation,
        error["code"],
        error["category"],
        error["retryable"],
        exc,
    )
