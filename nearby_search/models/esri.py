"""Pydantic models for ArcGIS REST response payloads.

The geometry server and feature services answer with JSON documents
that either carry results or an ``error`` object. Validating them
through these models is what separates a malformed answer
(``pydantic.ValidationError``) from a well-formed error or an empty one.

Geometries stay as raw Esri JSON dicts here; ``utils.esri_json`` turns
them into shapely geometries.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EsriErrorPayload(BaseModel):
    """``error`` object of an ArcGIS REST response.

    Attributes:
        code: HTTP-like status code reported by the service.
        message: Error summary.
        details: Additional error lines, often empty.
    """

    code: int = 0
    message: str = ""
    details: list[str] = Field(default_factory=list)

    def describe(self) -> str:
        """Join message and details into one diagnostic line."""
        parts = [self.message or f"error code {self.code}", *self.details]
        return "; ".join(p for p in parts if p)


class BufferResponse(BaseModel):
    """Response of ``GeometryServer/buffer``."""

    model_config = ConfigDict(extra="ignore")

    geometries: list[dict[str, Any]] = Field(default_factory=list)
    error: EsriErrorPayload | None = None


class EsriFeaturePayload(BaseModel):
    """One record of a feature layer query response."""

    model_config = ConfigDict(extra="ignore")

    attributes: dict[str, Any] = Field(default_factory=dict)
    geometry: dict[str, Any] | None = None


class QueryResponse(BaseModel):
    """Response of ``FeatureServer/<layer>/query``.

    Attributes:
        object_id_field_name: Identifier field reported by the layer.
        features: Returned records.
        exceeded_transfer_limit: Whether the service truncated the result.
        error: Error object, when the query failed.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    object_id_field_name: str | None = Field(default=None, alias="objectIdFieldName")
    features: list[EsriFeaturePayload] = Field(default_factory=list)
    exceeded_transfer_limit: bool = Field(default=False, alias="exceededTransferLimit")
    error: EsriErrorPayload | None = None
