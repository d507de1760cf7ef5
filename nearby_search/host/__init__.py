"""Interfaces the host map application provides to the search action."""

from nearby_search.host.data_source import DataSource, FeatureServiceDataSource
from nearby_search.host.dialog import ConfigurationDialog
from nearby_search.host.map_surface import FeatureLayer, MapHost, MapSurface

__all__ = [
    "ConfigurationDialog",
    "DataSource",
    "FeatureLayer",
    "FeatureServiceDataSource",
    "MapHost",
    "MapSurface",
]
