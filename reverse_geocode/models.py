# ============================================================================
# CLAUDE CONTEXT - REVERSE GEOCODE MODELS
# ============================================================================
# STATUS: Standalone Models - Reverse geocoding domain and response models
# PURPOSE: Feature kinds, polygon parts, address points and the result record
# EXPORTS: FeatureKind, GeometryMode, Coordinate, PolygonPart, AssembledGeometry,
#          BuildingAttributes, ParcelAttributes, LandUseAttributes, AddressPoint,
#          CoordinatesEcho, ResultRecord
# INTERFACES: Pydantic BaseModel, dataclasses
# DEPENDENCIES: pydantic, typing, dataclasses, enum
# SCOPE: Reverse geocoding response models
# VALIDATION: Pydantic v2 validation
# PATTERNS: Data Transfer Objects (DTOs)
# ENTRY_POINTS: from reverse_geocode.models import ResultRecord
# ============================================================================

"""
Reverse Geocode Models

Field names are English in Python; the JSON keys are the RUIAN names the
tracer clients read (aliases), e.g. ``cislo_domovni`` or ``adresni_mista``.

Vertices are GeoJSON positions ``[lon, lat]`` in EPSG:4326 as produced by
``ST_AsGeoJSON``; a ring is a list of vertices.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Vertex = List[float]
Ring = List[Vertex]


class FeatureKind(str, Enum):
    """Kinds of features a point can be resolved to."""
    BUILDING = "building"
    PARCEL = "parcel"
    LAND_USE = "land_use"

    @property
    def section_key(self) -> str:
        """Response key holding the resolved feature attributes."""
        return {
            FeatureKind.BUILDING: "stavebni_objekt",
            FeatureKind.PARCEL: "parcela",
            FeatureKind.LAND_USE: "pudni_blok",
        }[self]

    @property
    def has_address_points(self) -> bool:
        return self is FeatureKind.BUILDING


class GeometryMode(str, Enum):
    """Geometry export mode: outer ring only, or outer ring plus holes."""
    SIMPLE = "simple"
    FULL = "full"

    @classmethod
    def from_request(cls, req: Optional[str]) -> "GeometryMode":
        """Only the exact value "full" selects full mode."""
        return cls.FULL if req == "full" else cls.SIMPLE


@dataclass(frozen=True)
class Coordinate:
    """WGS84 query point."""
    latitude: float
    longitude: float


@dataclass
class PolygonPart:
    """
    One connected component of a feature geometry.

    ``rings[0]`` is the outer boundary, the rest are holes. ``contains_point``
    is computed by the store in its own reference system.
    """
    rings: List[Ring]
    contains_point: bool = False

    @property
    def outer(self) -> Optional[Ring]:
        return self.rings[0] if self.rings else None


@dataclass
class AssembledGeometry:
    """
    Geometry of the resolved feature.

    Simple mode carries only ``outer``; full mode also carries ``inners``
    (possibly empty). An empty ``outer`` means no part re-confirmed the point.
    """
    outer: Ring = field(default_factory=list)
    inners: Optional[List[Ring]] = None

    @property
    def is_empty(self) -> bool:
        return not self.outer

    def to_response(self) -> Union[List[Any], Dict[str, Any]]:
        if self.is_empty:
            return []
        if self.inners is None:
            return self.outer
        return {"outer": self.outer, "inners": self.inners}


# ============================================================================
# FEATURE ATTRIBUTES
# ============================================================================

class FeatureAttributes(BaseModel):
    """Base class of the resolved-feature sections."""
    model_config = ConfigDict(populate_by_name=True)

    @property
    def feature_id(self) -> int:
        raise NotImplementedError


class BuildingAttributes(FeatureAttributes):
    """RUIAN building (stavebni objekt) with its address hierarchy."""
    ruian_id: int
    house_numbers: Optional[str] = Field(default=None, alias="cislo_domovni")
    house_number_type: Optional[str] = Field(default=None, alias="cislo_domovni_typ")
    orientation_number: Optional[str] = Field(default=None, alias="cislo_orientacni")
    address_point_id: Optional[int] = Field(default=None, alias="adresni_misto_kod")
    street: Optional[str] = Field(default=None, alias="ulice")
    municipal_part: Optional[str] = Field(default=None, alias="cast_obce")
    city_district: Optional[str] = Field(default=None, alias="mestska_cast")
    municipality: Optional[str] = Field(default=None, alias="obec")
    district: Optional[str] = Field(default=None, alias="okres")
    region: Optional[str] = Field(default=None, alias="kraj")
    postcode: Optional[str] = Field(default=None, alias="psc")
    levels: Optional[int] = Field(default=None, alias="pocet_podlazi")
    usage_code: Optional[str] = Field(default=None, alias="zpusob_vyuziti_kod")
    usage_key: Optional[str] = Field(default=None, alias="zpusob_vyuziti_key")
    usage_value: Optional[str] = Field(default=None, alias="zpusob_vyuziti_val")
    flats: Optional[int] = Field(default=None, alias="pocet_bytu")
    finished: Optional[date] = Field(default=None, alias="dokonceni")
    valid_from: Optional[datetime] = Field(default=None, alias="plati_od")

    @property
    def feature_id(self) -> int:
        return self.ruian_id


class ParcelAttributes(FeatureAttributes):
    """RUIAN land parcel."""
    ruian_id: int
    land_type: Optional[str] = Field(default=None, alias="druh_pozemku")
    land_usage: Optional[str] = Field(default=None, alias="zpusob_vyuziti")
    valid_from: Optional[datetime] = Field(default=None, alias="plati_od")

    @property
    def feature_id(self) -> int:
        return self.ruian_id


class LandUseAttributes(FeatureAttributes):
    """LPIS soil block with its culture mapped to OSM tags."""
    lpis_id: int
    usage: Optional[str] = Field(default=None, alias="kultura")
    valid_from: Optional[datetime] = Field(default=None, alias="plati_od")
    osm_tags: Dict[str, str] = Field(default_factory=dict)

    @property
    def feature_id(self) -> int:
        return self.lpis_id


ATTRIBUTE_MODELS = {
    FeatureKind.BUILDING: BuildingAttributes,
    FeatureKind.PARCEL: ParcelAttributes,
    FeatureKind.LAND_USE: LandUseAttributes,
}


class AddressPoint(BaseModel):
    """
    Address point (adresni misto) of a building.

    The anchor is the address definition point in EPSG:4326; it is used for
    ranking only and is not serialized.
    """
    model_config = ConfigDict(populate_by_name=True)

    ruian_id: int
    house_number: Optional[str] = Field(default=None, alias="cislo_domovni")
    orientation_number: Optional[str] = Field(default=None, alias="cislo_orientacni")
    street: Optional[str] = Field(default=None, alias="ulice")
    anchor_lat: Optional[float] = Field(default=None, exclude=True)
    anchor_lon: Optional[float] = Field(default=None, exclude=True)


# ============================================================================
# RESULT RECORD
# ============================================================================

class CoordinatesEcho(BaseModel):
    """Query coordinates exactly as the caller sent them."""
    lat: str
    lon: str


class ResultRecord(BaseModel):
    """
    Complete lookup result handed to serialization.

    Every section is always present; an unmatched lookup has an empty
    feature section, empty geometry and no address points.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    coordinates: CoordinatesEcho
    source: str
    kind: FeatureKind
    feature: Optional[FeatureAttributes] = None
    geometry: AssembledGeometry = Field(default_factory=AssembledGeometry)
    address_points: List[AddressPoint] = Field(default_factory=list)

    def to_response_dict(self) -> Dict[str, Any]:
        """JSON-ready dict with the fixed key order of the public response."""
        feature = self.feature.model_dump(mode="json", by_alias=True) if self.feature else {}
        return {
            "coordinates": self.coordinates.model_dump(),
            "source": self.source,
            self.kind.section_key: feature,
            "geometry": self.geometry.to_response(),
            "adresni_mista": [
                point.model_dump(mode="json", by_alias=True)
                for point in self.address_points
            ],
        }
