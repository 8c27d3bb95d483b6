# ============================================================================
# CLAUDE CONTEXT - REVERSE GEOCODE CONFIGURATION
# ============================================================================
# STATUS: Standalone Configuration - Reverse geocoding endpoints
# PURPOSE: Store layout, simplification functions and response constants
# EXPORTS: ReverseGeocodeConfig, get_reverse_geocode_config
# INTERFACES: Pydantic BaseModel
# DEPENDENCIES: pydantic, os
# SOURCE: Environment variables (connection settings live in the main config.py)
# VALIDATION: Pydantic v2 validation
# PATTERNS: Settings Pattern, Singleton via cached function
# ENTRY_POINTS: from reverse_geocode.config import get_reverse_geocode_config
# ============================================================================

"""
Reverse Geocode Configuration

Environment Variables (all optional):
    - RUIAN_SCHEMA: Schema holding the rn_* RUIAN tables (default: "public")
    - RUIAN_REFERENCE_SCHEMA: Schema of the code dictionaries (default: "osmtables")
    - LPIS_TABLE: Table with LPIS soil blocks, inside RUIAN_SCHEMA (default: "lpis_pudni_blok")
    - STORE_SRID: SRID the boundaries are stored in (default: 900913)
    - RUIAN_SOURCE_TAG: Source tag of RUIAN responses (default: "cuzk:ruian")
    - LPIS_SOURCE_TAG: Source tag of LPIS responses (default: "eagri:lpis")
    - SIMPLIFY_FUNCTION: SQL function simplifying a part in simple mode
      (default: "local_simplify_polygon")
    - FULL_SIMPLIFY_FUNCTION: SQL function simplifying a ring in full mode
      (default: "local_less_simplify_polygon")
    - MIN_ADDRESS_POINTS: Fewer address points than this are not reported (default: 2)
    - QUERY_TIMEOUT: Statement timeout in seconds (default: 30)

Connection settings (POSTGIS_*) are read by the application-level config.py.
"""

import os
from typing import Optional
from pydantic import BaseModel, Field


class ReverseGeocodeConfig(BaseModel):
    """
    Configuration of the reverse geocoding endpoints.
    """

    ruian_schema: str = Field(
        default_factory=lambda: os.getenv("RUIAN_SCHEMA", "public"),
        description="PostgreSQL schema containing the RUIAN tables"
    )
    reference_schema: str = Field(
        default_factory=lambda: os.getenv("RUIAN_REFERENCE_SCHEMA", "osmtables"),
        description="Schema of the usage / land type dictionaries with OSM tags"
    )
    lpis_table: str = Field(
        default_factory=lambda: os.getenv("LPIS_TABLE", "lpis_pudni_blok"),
        description="Table with LPIS soil blocks"
    )
    store_srid: int = Field(
        default_factory=lambda: int(os.getenv("STORE_SRID", "900913")),
        description="SRID of the stored boundaries"
    )
    ruian_source_tag: str = Field(
        default_factory=lambda: os.getenv("RUIAN_SOURCE_TAG", "cuzk:ruian"),
        description="Provenance tag for building and parcel responses"
    )
    lpis_source_tag: str = Field(
        default_factory=lambda: os.getenv("LPIS_SOURCE_TAG", "eagri:lpis"),
        description="Provenance tag for land-use block responses"
    )
    simplify_function: str = Field(
        default_factory=lambda: os.getenv("SIMPLIFY_FUNCTION", "local_simplify_polygon"),
        description="Database function simplifying a polygon part (simple mode)"
    )
    full_simplify_function: str = Field(
        default_factory=lambda: os.getenv("FULL_SIMPLIFY_FUNCTION", "local_less_simplify_polygon"),
        description="Database function simplifying a single ring (full mode)"
    )
    min_address_points: int = Field(
        default_factory=lambda: int(os.getenv("MIN_ADDRESS_POINTS", "2")),
        ge=1,
        description="Address lists shorter than this are reported as empty"
    )
    query_timeout_seconds: int = Field(
        default_factory=lambda: int(os.getenv("QUERY_TIMEOUT", "30")),
        ge=1,
        le=300,
        description="Maximum query execution time in seconds"
    )

    def source_tag_for(self, kind) -> str:
        """Provenance tag reported for a feature kind."""
        from .models import FeatureKind

        if kind is FeatureKind.LAND_USE:
            return self.lpis_source_tag
        return self.ruian_source_tag


# Singleton instance cache
_config_cache: Optional[ReverseGeocodeConfig] = None


def get_reverse_geocode_config() -> ReverseGeocodeConfig:
    """
    Get singleton reverse geocoding configuration instance.
    """
    global _config_cache

    if _config_cache is None:
        _config_cache = ReverseGeocodeConfig()

    return _config_cache
