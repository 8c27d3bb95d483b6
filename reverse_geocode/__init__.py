# ============================================================================
# CLAUDE CONTEXT - REVERSE GEOCODE MODULE
# ============================================================================
# STATUS: Standalone Module - Reverse geocoding API
# PURPOSE: Point -> RUIAN building / parcel / LPIS block with geometry and addresses
# EXPORTS: ReverseGeocodeService, ReverseGeocodeConfig, get_reverse_geocode_triggers
# PYDANTIC_MODELS: ResultRecord, BuildingAttributes, ParcelAttributes, LandUseAttributes
# DEPENDENCIES: psycopg, pydantic, pyproj, azure-functions
# SOURCE: Environment variables for PostGIS connection and store layout
# PATTERNS: Service Layer, Repository Pattern, Standalone Module
# ENTRY_POINTS: from reverse_geocode import get_reverse_geocode_triggers
# ============================================================================

"""
Reverse Geocode API - Standalone Module

Given a WGS84 point, finds the cadastral building, land parcel or LPIS
land-use block containing it and returns its attributes, its simplified
polygon (outer ring, or outer ring plus holes in full mode) and, for
buildings, the address points ordered by distance to the point.

Architecture:
    reverse_geocode/
    ├── config.py      # Environment-based configuration
    ├── models.py      # Feature kinds, polygon parts, response models
    ├── validator.py   # Coordinate validation
    ├── resolver.py    # Containing feature selection
    ├── geometry.py    # Outer / inner ring assembly
    ├── addresses.py   # Address point proximity ranking
    ├── usage_tags.py  # LPIS culture -> OSM tags
    ├── repository.py  # PostGIS direct access (psycopg)
    ├── service.py     # Lookup pipeline
    └── triggers.py    # Azure Functions HTTP handlers

The PostGIS access (repository.py) sits behind the SpatialLookupClient
protocol so the pipeline can run against any store.
"""

from .config import ReverseGeocodeConfig, get_reverse_geocode_config
from .service import ReverseGeocodeService
from .triggers import get_reverse_geocode_triggers

__version__ = "1.0.0"
__all__ = [
    "ReverseGeocodeConfig",
    "ReverseGeocodeService",
    "get_reverse_geocode_triggers",
    "get_reverse_geocode_config"
]
