"""Tests for the LPIS culture to OSM tag mapping."""

import pytest

from reverse_geocode.usage_tags import LPIS_USAGE_TAGS, osm_tags_for_usage


@pytest.mark.parametrize("usage, tags", [
    ("orná půda", {"landuse": "farmland"}),
    ("chmelnice", {"landuse": "farmland", "crop": "hop"}),
    ("vinice", {"landuse": "vineyard"}),
    ("travní porost", {"landuse": "meadow", "meadow": "agricultural"}),
    ("RRD", {"landuse": "forest", "crop": "fast_growing_wood"}),
    ("rybník", {"natural": "water", "water": "pond"}),
    ("jiná kultura (školka)", {"landuse": "plant_nursery"}),
])
def test_known_cultures(usage, tags):
    assert osm_tags_for_usage(usage) == tags


@pytest.mark.parametrize("usage", [None, "", "měsíční krajina"])
def test_unknown_or_missing_culture_gives_no_tags(usage):
    assert osm_tags_for_usage(usage) == {}


def test_returned_tags_are_a_copy():
    tags = osm_tags_for_usage("orná půda")
    tags["crop"] = "wheat"
    assert LPIS_USAGE_TAGS["orná půda"] == {"landuse": "farmland"}
    assert osm_tags_for_usage("jiná kultura") == {"landuse": "farmland"}
