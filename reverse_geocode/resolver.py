"""
Containing feature resolution.

The store may report several rows for one point: enrichment joins fan out
(one row per address point of a building) and overlapping or duplicated
records exist in the cadastre. The first row in the store's natural order
wins; no secondary disambiguation is attempted.
"""

from typing import Optional

from pydantic import ValidationError

from util_logger import LoggerFactory, ComponentType, log_exceptions
from .repository import SpatialLookupClient, StoreUnavailableError
from .models import ATTRIBUTE_MODELS, Coordinate, FeatureAttributes, FeatureKind
from .usage_tags import osm_tags_for_usage

logger = LoggerFactory.create_logger(ComponentType.RESOLVER, "FeatureResolver")


class FeatureResolver:
    """Finds the single feature of a kind containing a point."""

    def __init__(self, store: SpatialLookupClient):
        self.store = store

    @log_exceptions(ComponentType.RESOLVER, "FeatureResolver")
    def resolve_containing(self, point: Coordinate, kind: FeatureKind) -> Optional[FeatureAttributes]:
        """
        Resolve the containing feature.

        Returns:
            Attributes of the first matching row, or None when nothing
            contains the point or the store could not be queried.
        """
        try:
            rows = self.store.find_containing(kind, point)
        except StoreUnavailableError as e:
            logger.warning(f"Store unavailable, treating {kind.value} lookup as no match: {e}", extra={
                'custom_dimensions': {
                    'feature_kind': kind.value,
                    'error_type': type(e).__name__
                }
            })
            return None

        if not rows:
            logger.info(f"No {kind.value} contains ({point.latitude}, {point.longitude})")
            return None

        if len(rows) > 1:
            logger.debug(f"{len(rows)} {kind.value} rows matched, using the first")

        row = dict(rows[0])
        if kind is FeatureKind.LAND_USE:
            row['osm_tags'] = osm_tags_for_usage(row.get('kultura'))

        try:
            return ATTRIBUTE_MODELS[kind].model_validate(row)
        except ValidationError as e:
            logger.warning(f"Unusable {kind.value} row from store: {e}")
            return None
