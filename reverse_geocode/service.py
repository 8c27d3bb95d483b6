# ============================================================================
# CLAUDE CONTEXT - REVERSE GEOCODE SERVICE
# ============================================================================
# STATUS: Standalone Service - Reverse geocoding pipeline
# PURPOSE: Validate -> resolve -> assemble geometry -> rank addresses -> record
# EXPORTS: ReverseGeocodeService
# PYDANTIC_MODELS: ResultRecord, CoordinatesEcho
# DEPENDENCIES: typing, logging
# SOURCE: SpatialLookupClient (PostGISSpatialStore by default)
# SCOPE: Business logic for the reverse geocoding endpoints
# PATTERNS: Service Layer, Facade Pattern, Dependency Injection (store)
# ENTRY_POINTS: service = ReverseGeocodeService(); record = service.lookup(...)
# ============================================================================

"""
Reverse Geocode Service - Business Logic Layer

Runs one lookup as a single synchronous pipeline:

    coordinate -> CoordinateValidator -> FeatureResolver -> GeometryAssembler
               -> AddressProximityRanker -> ResultRecord

Only invalid input aborts the request. Every other failure (no match, store
errors, degenerate polygon data) leaves the affected section empty and the
record well-formed.
"""

from typing import Any, List, Optional

from util_logger import LoggerFactory, ComponentType
from .addresses import AddressProximityRanker
from .config import ReverseGeocodeConfig, get_reverse_geocode_config
from .geometry import GeometryAssembler
from .models import (
    AddressPoint,
    AssembledGeometry,
    Coordinate,
    CoordinatesEcho,
    FeatureAttributes,
    FeatureKind,
    GeometryMode,
    ResultRecord,
)
from .repository import PostGISSpatialStore, SpatialLookupClient, StoreUnavailableError
from .resolver import FeatureResolver
from .validator import validate

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "ReverseGeocodeService")


class ReverseGeocodeService:
    """
    Business logic service for the reverse geocoding endpoints.

    The store is injected; it defaults to a PostGISSpatialStore built from
    the configuration. No state is kept between lookups.
    """

    def __init__(
        self,
        config: Optional[ReverseGeocodeConfig] = None,
        store: Optional[SpatialLookupClient] = None
    ):
        self.config = config or get_reverse_geocode_config()
        self.store = store if store is not None else PostGISSpatialStore(self.config)
        self.resolver = FeatureResolver(self.store)
        self.assembler = GeometryAssembler()
        self.ranker = AddressProximityRanker()
        logger.info("ReverseGeocodeService initialized")

    def lookup(
        self,
        raw_lat: Optional[Any],
        raw_lon: Optional[Any],
        kind: FeatureKind,
        req: Optional[str] = None
    ) -> ResultRecord:
        """
        Resolve the feature of ``kind`` at the raw request coordinates.

        Args:
            raw_lat: Latitude as sent by the caller
            raw_lon: Longitude as sent by the caller
            kind: Feature kind to resolve
            req: Request mode parameter ("full" selects full geometry)

        Returns:
            ResultRecord with every section present

        Raises:
            InvalidCoordinateError: If lat/lon are not finite numbers; the
                store is not touched
        """
        point = validate(raw_lat, raw_lon)
        mode = GeometryMode.from_request(req)

        record = ResultRecord(
            coordinates=CoordinatesEcho(lat=str(raw_lat), lon=str(raw_lon)),
            source=self.config.source_tag_for(kind),
            kind=kind,
        )

        feature = self.resolver.resolve_containing(point, kind)
        if feature is None:
            return record

        record.feature = feature
        record.geometry = self._assemble_geometry(point, kind, feature, mode)
        if kind.has_address_points:
            record.address_points = self._ranked_addresses(point, feature)

        logger.info(
            f"Resolved {kind.value} {feature.feature_id}: "
            f"geometry={'empty' if record.geometry.is_empty else mode.value}, "
            f"addresses={len(record.address_points)}"
        )
        return record

    def _assemble_geometry(
        self,
        point: Coordinate,
        kind: FeatureKind,
        feature: FeatureAttributes,
        mode: GeometryMode
    ) -> AssembledGeometry:
        try:
            parts = self.store.fetch_parts(kind, feature.feature_id, point, mode)
        except StoreUnavailableError as e:
            logger.warning(f"Geometry of {kind.value} {feature.feature_id} unavailable: {e}")
            return AssembledGeometry()

        return self.assembler.assemble(parts, mode)

    def _ranked_addresses(self, point: Coordinate, feature: FeatureAttributes) -> List[AddressPoint]:
        try:
            addresses = self.store.fetch_addresses(feature.feature_id)
        except StoreUnavailableError as e:
            logger.warning(f"Address points of building {feature.feature_id} unavailable: {e}")
            return []

        # Below the threshold the list is reported empty, even with one point
        if len(addresses) < self.config.min_address_points:
            return []

        return self.ranker.rank(point, addresses)
