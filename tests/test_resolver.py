"""Tests for containing-feature resolution."""

from conftest import QUERY_LAT, QUERY_LON, FakeSpatialStore

from reverse_geocode.models import (
    BuildingAttributes,
    Coordinate,
    FeatureKind,
    LandUseAttributes,
    ParcelAttributes,
)
from reverse_geocode.resolver import FeatureResolver

POINT = Coordinate(latitude=QUERY_LAT, longitude=QUERY_LON)


def test_building_attributes(building_row):
    resolver = FeatureResolver(FakeSpatialStore(rows={FeatureKind.BUILDING: [building_row]}))

    feature = resolver.resolve_containing(POINT, FeatureKind.BUILDING)

    assert isinstance(feature, BuildingAttributes)
    assert feature.feature_id == 21686548
    assert feature.street == "Celetná"
    assert feature.house_number_type == "Číslo popisné"


def test_first_row_wins(building_row):
    second = dict(building_row, adresni_misto_kod=21720630, cislo_orientacni="14")
    resolver = FeatureResolver(FakeSpatialStore(rows={FeatureKind.BUILDING: [building_row, second]}))

    feature = resolver.resolve_containing(POINT, FeatureKind.BUILDING)

    assert feature.address_point_id == 21720622
    assert feature.orientation_number == "12a"


def test_parcel_attributes(parcel_row):
    resolver = FeatureResolver(FakeSpatialStore(rows={FeatureKind.PARCEL: [parcel_row]}))

    feature = resolver.resolve_containing(POINT, FeatureKind.PARCEL)

    assert isinstance(feature, ParcelAttributes)
    assert feature.land_type == "zastavěná plocha a nádvoří"
    assert feature.land_usage is None


def test_land_use_gets_osm_tags(land_use_row):
    resolver = FeatureResolver(FakeSpatialStore(rows={FeatureKind.LAND_USE: [land_use_row]}))

    feature = resolver.resolve_containing(POINT, FeatureKind.LAND_USE)

    assert isinstance(feature, LandUseAttributes)
    assert feature.feature_id == 5402101
    assert feature.osm_tags == {"landuse": "orchard"}


def test_no_match():
    assert FeatureResolver(FakeSpatialStore()).resolve_containing(POINT, FeatureKind.PARCEL) is None


def test_store_failure_is_treated_as_no_match(building_row):
    store = FakeSpatialStore(rows={FeatureKind.BUILDING: [building_row]}, fail_on={"find_containing"})

    assert FeatureResolver(store).resolve_containing(POINT, FeatureKind.BUILDING) is None


def test_unusable_row_is_treated_as_no_match(building_row):
    del building_row["ruian_id"]
    resolver = FeatureResolver(FakeSpatialStore(rows={FeatureKind.BUILDING: [building_row]}))

    assert resolver.resolve_containing(POINT, FeatureKind.BUILDING) is None
