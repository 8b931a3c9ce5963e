from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


TransportKind = Literal["http", "duckdb"]


class SearchServiceConfig(BaseModel):
    """
    Where and how the vector-layer search endpoint is queried.

    Column names are the layer's attribute names on the server side.
    """

    serverScript: str = "http://maps.kosmosnimki.ru/VectorLayer/Search.ashx"
    layerId: str = "06CCCC47405646C1BC5C45090D38EA2B"
    outCs: str = "EPSG:4326"
    idColumn: str = "FSC_ID"
    labelColumn: str = "HOLDER_1"
    auxColumns: list[str] = Field(default_factory=lambda: ["FM_CERT", "CB"])
    geometryColumn: str = "GeomixerGeoJson"
    autocompletePageSize: int = Field(default=10, ge=1, le=500)
    timeoutS: float = Field(default=10.0, gt=0.0)
    # Send the current map bounds as a `border` restriction.
    restrictToView: bool = False
    borderCs: str = "EPSG:4326"


class HighlightConfig(BaseModel):
    # Reference layer whose features get filtered down to the selected one.
    layerId: str = "06CCCC47405646C1BC5C45090D38EA2B"
    # Projection of the envelope columns returned by the service.
    sourceCrs: str = "EPSG:3395"
    drawOutline: bool = True
    outlineStyle: dict[str, str | bool | float] = Field(
        default_factory=lambda: {"color": "red", "fill": False}
    )


class GeocoderConfig(BaseModel):
    enabled: bool = True
    url: str = "https://nominatim.openstreetmap.org/search"
    limit: int = Field(default=5, ge=1, le=50)
    userAgent: str = "fsc-map-search"
    timeoutS: float = Field(default=10.0, gt=0.0)


class SearchConfig(BaseModel):
    service: SearchServiceConfig = Field(default_factory=SearchServiceConfig)
    highlight: HighlightConfig = Field(default_factory=HighlightConfig)
    geocoder: GeocoderConfig = Field(default_factory=GeocoderConfig)
    locale: str = "eng"
    transport: TransportKind = "http"
    # CSV seed for the local DuckDB transport (repo-relative or absolute).
    featuresCsv: str | None = None
    resultTabId: str = "searchControlResults"
