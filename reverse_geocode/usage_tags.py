"""
LPIS culture -> OSM tags

LPIS soil blocks carry their culture as a Czech name; the tracer clients
expect ready-made OSM tags.
"""

from typing import Dict, Optional

from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "UsageTags")

_FARMLAND = {"landuse": "farmland"}
_FAST_GROWING_WOOD = {"landuse": "forest", "crop": "fast_growing_wood"}
_PLANT_NURSERY = {"landuse": "plant_nursery"}
_VEGETABLES = {"landuse": "farmland", "crop": "vegetables"}

LPIS_USAGE_TAGS: Dict[str, Dict[str, str]] = {
    "orná půda": _FARMLAND,
    "chmelnice": {"landuse": "farmland", "crop": "hop"},
    "vinice": {"landuse": "vineyard"},
    "ovocný sad": {"landuse": "orchard"},
    "travní porost": {"landuse": "meadow", "meadow": "agricultural"},
    "porost RRD": _FAST_GROWING_WOOD,
    "RRD": _FAST_GROWING_WOOD,
    "zalesněná půda": {"landuse": "forest"},
    "rybník": {"natural": "water", "water": "pond"},
    "jiná kultura": _FARMLAND,
    "jiná kultura (školka)": _PLANT_NURSERY,
    "školka": _PLANT_NURSERY,
    "jiná kultura (zelinářská zahrada)": _VEGETABLES,
    "zelinářská zahrada": _VEGETABLES,
}


def osm_tags_for_usage(usage: Optional[str]) -> Dict[str, str]:
    """
    OSM tags for an LPIS culture name.

    Unknown cultures give no tags and a warning so the table can be extended.
    """
    if not usage:
        return {}

    tags = LPIS_USAGE_TAGS.get(usage)
    if tags is None:
        logger.warning(f"Unmapped LPIS culture '{usage}'", extra={
            'custom_dimensions': {'lpis_usage': usage}
        })
        return {}

    return dict(tags)
