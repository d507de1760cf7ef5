"""Wiring for hosts embedding the search action.

All behaviour lives in the subpackages; this module only builds the
default object graph from ``SearchServiceConfig``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from nearby_search.core.config import SearchServiceConfig
from nearby_search.models.settings import SearchSettings
from nearby_search.orchestrators.search_nearby import SearchNearbyAction
from nearby_search.services.buffer_client import GeometryBufferClient
from nearby_search.services.geometry_service import ArcGISGeometryService
from nearby_search.services.query_client import SpatialQueryClient

if TYPE_CHECKING:
    from nearby_search.host.map_surface import MapHost

logger = logging.getLogger("nearby_search.app")


def create_http_client(config: SearchServiceConfig) -> httpx.AsyncClient:
    """Create the shared HTTP client for geometry and feature services."""
    return httpx.AsyncClient(timeout=config.http_timeout, follow_redirects=True)


def create_search_action(
    host: MapHost,
    config: SearchServiceConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> SearchNearbyAction:
    """Build a ``SearchNearbyAction`` backed by the ArcGIS geometry server.

    Args:
        host: Map host the action runs in.
        config: Service configuration; loaded from the environment if omitted.
        client: Shared HTTP client; created from *config* if omitted.
            The caller owns its lifetime either way.
    """
    config = config or SearchServiceConfig.from_env()
    client = client or create_http_client(config)
    service = ArcGISGeometryService(config.geometry_service_url, client=client)

    logger.info(
        "Creating search action | geometry_service=%s | distance=%d | unit=%s",
        config.geometry_service_url,
        config.default_buffer_distance,
        config.default_buffer_unit.value,
    )
    return SearchNearbyAction(
        host,
        GeometryBufferClient(service),
        SpatialQueryClient(),
        settings=SearchSettings(
            buffer_distance=config.default_buffer_distance,
            buffer_unit=config.default_buffer_unit,
        ),
    )
