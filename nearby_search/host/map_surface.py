"""Host map-surface binding.

The host owns its map surfaces and the features rendered on them. This
module gives the search action what it needs from the host:

- ``FeatureLayer``: the features rendered for one data source on one surface
- ``MapSurface``: a rendering context with a reference system and layers
- ``MapHost``: the registry of surfaces and data sources, plus user notices

Hosts embedding the action either populate ``MapHost`` directly or
subclass it to bridge their own widget model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nearby_search.models.spatial import SpatialReference
from nearby_search.models.validation import check_non_empty

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from nearby_search.host.data_source import DataSource
    from nearby_search.models.feature import Feature

logger = logging.getLogger("nearby_search.host.map_surface")


@dataclass(slots=True, eq=False)
class FeatureLayer:
    """Features rendered for one data source.

    Attributes:
        data_source: The data source whose features are rendered.
        graphics: The rendered features, in drawing order.
    """

    data_source: DataSource
    graphics: list[Feature] = field(default_factory=list)

    @property
    def selected(self) -> list[Feature]:
        return [g for g in self.graphics if g.selected]


class MapSurface:
    """A rendering context hosting the layers of one or more data sources.

    Layers are keyed by data source ``id``, so any reference to the same
    data source finds the same layer.
    """

    def __init__(
        self,
        id: str,
        spatial_reference: SpatialReference | None = None,
        layers: Iterable[FeatureLayer] = (),
    ) -> None:
        check_non_empty("MapSurface", "id", id)
        self.id = id
        self.spatial_reference = spatial_reference or SpatialReference()
        self._layers: dict[str, FeatureLayer] = {}
        for layer in layers:
            self.add_layer(layer)

    def __repr__(self) -> str:
        return f"MapSurface(id={self.id!r}, wkid={self.spatial_reference.wkid})"

    @property
    def layers(self) -> list[FeatureLayer]:
        return list(self._layers.values())

    def add_layer(self, layer: FeatureLayer) -> FeatureLayer:
        """Render *layer* on this surface, replacing any layer of the same source."""
        self._layers[layer.data_source.id] = layer
        return layer

    def remove_layer(self, data_source: DataSource) -> FeatureLayer | None:
        return self._layers.pop(data_source.id, None)

    def find_feature_layer(self, data_source: DataSource) -> FeatureLayer | None:
        """Return the layer rendering *data_source*, or ``None``."""
        return self._layers.get(data_source.id)

    def hosts(self, data_source: DataSource) -> bool:
        return data_source.id in self._layers


class MapHost:
    """Registry of map surfaces and the data sources they render.

    Args:
        surfaces: Initial map surfaces.
        data_sources: Data sources known to the host, including ones not
            rendered on any surface.
        notifier: Callback for non-fatal user notices. Defaults to
            logging the notice at WARNING.
    """

    def __init__(
        self,
        surfaces: Iterable[MapSurface] = (),
        data_sources: Iterable[DataSource] = (),
        *,
        notifier: Callable[[str], None] | None = None,
    ) -> None:
        self._surfaces: dict[str, MapSurface] = {}
        self._data_sources: dict[str, DataSource] = {}
        self._notifier = notifier
        for surface in surfaces:
            self.add_surface(surface)
        for source in data_sources:
            self.add_data_source(source)

    @property
    def surfaces(self) -> list[MapSurface]:
        return list(self._surfaces.values())

    @property
    def data_sources(self) -> list[DataSource]:
        """Known data sources, in registration order."""
        return list(self._data_sources.values())

    def add_surface(self, surface: MapSurface) -> MapSurface:
        self._surfaces[surface.id] = surface
        for layer in surface.layers:
            self.add_data_source(layer.data_source)
        return surface

    def remove_surface(self, surface_id: str) -> MapSurface | None:
        return self._surfaces.pop(surface_id, None)

    def add_data_source(self, data_source: DataSource) -> DataSource:
        self._data_sources.setdefault(data_source.id, data_source)
        return data_source

    def find_surface(self, surface_id: str) -> MapSurface | None:
        return self._surfaces.get(surface_id)

    def find_map_surface(self, data_source: DataSource) -> MapSurface | None:
        """Return the first surface rendering *data_source*, or ``None``."""
        for surface in self._surfaces.values():
            if surface.hosts(data_source):
                return surface
        return None

    def notify(self, message: str) -> None:
        """Show a non-fatal notice to the user."""
        if self._notifier is None:
            logger.warning("Notice | %s", message)
            return
        self._notifier(message)
