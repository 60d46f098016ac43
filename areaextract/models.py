"""
Pydantic models for the extraction data structures

Coordinates are always [longitude, latitude]. Only the XML and CSV writers
name lat before lon, as explicit attributes/columns.
"""

from typing import Annotated, Any, Dict, List, Literal, Tuple, Union
from pydantic import BaseModel, Field, field_validator


Point = Tuple[float, float]  # (lon, lat)
Ring = List[Point]


# ============================================================
# GeoJSON Types
# ============================================================

class GeoJSONPoint(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: List[float]  # [longitude, latitude]

    @field_validator("coordinates")
    @classmethod
    def _two_values(cls, v: List[float]) -> List[float]:
        if len(v) != 2:
            raise ValueError(f"Point needs exactly [lon, lat], got {len(v)} values")
        return v


class GeoJSONLineString(BaseModel):
    type: Literal["LineString"] = "LineString"
    coordinates: List[List[float]]  # [[lon, lat], ...]

    @field_validator("coordinates")
    @classmethod
    def _at_least_two(cls, v: List[List[float]]) -> List[List[float]]:
        if len(v) < 2:
            raise ValueError("LineString needs at least 2 coordinates")
        return v


class GeoJSONPolygon(BaseModel):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[List[float]]]  # [[[lon, lat], ...]]

    @field_validator("coordinates")
    @classmethod
    def _closed_ring(cls, v: List[List[List[float]]]) -> List[List[List[float]]]:
        if not v:
            raise ValueError("Polygon needs an outer ring")
        ring = v[0]
        if len(ring) < 4 or ring[0] != ring[-1]:
            raise ValueError("Polygon outer ring must be closed with at least 4 coordinates")
        return v


Geometry = Annotated[
    Union[GeoJSONPoint, GeoJSONLineString, GeoJSONPolygon],
    Field(discriminator="type")
]


# ============================================================
# Features
# ============================================================

class Feature(BaseModel):
    """A tagged OSM element with resolved geometry"""
    id: int
    tags: Dict[str, str] = Field(default_factory=dict)
    geometry: Geometry

    @property
    def geometry_type(self) -> str:
        return self.geometry.type

    @property
    def properties(self) -> Dict[str, Any]:
        """GeoJSON properties: the OSM id followed by the tags"""
        return {"id": self.id, **self.tags}

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "properties": self.properties,
            "geometry": self.geometry.model_dump(),
        }


class FeatureCollection(BaseModel):
    """Filtered features plus the boundary ring they were filtered against"""
    features: List[Feature] = Field(default_factory=list)
    boundary: Ring = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.features)

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [f.to_geojson() for f in self.features],
        }


# ============================================================
# Input / Output
# ============================================================

class ClickPoint(BaseModel):
    """One user click: a coordinate and its 1-based entry position"""
    ordinal: int = Field(ge=1)
    lon: float = Field(ge=-180.0, le=180.0)
    lat: float = Field(ge=-90.0, le=90.0)

    @property
    def point(self) -> Point:
        return (self.lon, self.lat)


class ExtractionStats(BaseModel):
    area_km2: float
    total_features: int
    road_count: int
    building_count: int
    poi_count: int
