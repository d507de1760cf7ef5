"""Shared pytest fixtures for the search nearby test suite."""

from __future__ import annotations

import pytest
from shapely.geometry import Point

from nearby_search.models.feature import Feature
from tests.fakes import FakeGeometryService, Scene


@pytest.fixture()
def scene() -> Scene:
    """Host with one surface rendering trigger and target data sources."""
    return Scene()


@pytest.fixture()
def geometry_service() -> FakeGeometryService:
    """Geometry service buffering with shapely."""
    return FakeGeometryService()


@pytest.fixture()
def trigger_feature() -> Feature:
    """Trigger feature at the origin."""
    return Feature(geometry=Point(0.0, 0.0), attributes={"OBJECTID": 100})
