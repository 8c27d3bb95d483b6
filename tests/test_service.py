"""Tests for the end-to-end lookup pipeline."""

import pytest

from conftest import HOLE, OUTER, FakeSpatialStore

from reverse_geocode.models import FeatureKind, PolygonPart
from reverse_geocode.validator import InvalidCoordinateError

LAT, LON = "50.0875", "14.4213"


class TestBuildingLookup:

    def test_response_shape(self, make_service, building_store):
        response = make_service(building_store).lookup(LAT, LON, FeatureKind.BUILDING).to_response_dict()

        assert list(response) == ["coordinates", "source", "stavebni_objekt", "geometry", "adresni_mista"]
        assert response["coordinates"] == {"lat": LAT, "lon": LON}
        assert response["source"] == "cuzk:ruian"
        assert response["geometry"] == OUTER

    def test_building_section_uses_ruian_keys(self, make_service, building_store):
        building = make_service(building_store).lookup(LAT, LON, FeatureKind.BUILDING).to_response_dict()["stavebni_objekt"]

        assert building["ruian_id"] == 21686548
        assert building["cislo_domovni"] == "548"
        assert building["ulice"] == "Celetná"
        assert building["psc"] == "11000"
        assert building["dokonceni"] == "1911-06-30"
        assert building["plati_od"] == "2015-03-01T00:00:00"

    def test_address_points_nearest_first_without_anchor(self, make_service, building_store):
        addresses = make_service(building_store).lookup(LAT, LON, FeatureKind.BUILDING).to_response_dict()["adresni_mista"]

        assert [address["ruian_id"] for address in addresses] == [2, 3, 1]
        assert addresses[0] == {
            "ruian_id": 2,
            "cislo_domovni": "548",
            "cislo_orientacni": "2",
            "ulice": "Celetná",
        }

    def test_single_address_point_is_not_reported(self, make_service, building_store, address_points):
        building_store.addresses = address_points[:1]

        record = make_service(building_store).lookup(LAT, LON, FeatureKind.BUILDING)

        assert record.to_response_dict()["adresni_mista"] == []
        assert record.feature is not None

    def test_full_mode(self, make_service, building_store):
        response = make_service(building_store).lookup(LAT, LON, FeatureKind.BUILDING, "full").to_response_dict()

        assert response["geometry"] == {"outer": OUTER, "inners": [HOLE]}
        assert building_store.calls[1][3].value == "full"

    @pytest.mark.parametrize("req", [None, "", "FULL", "simple", "full "])
    def test_anything_but_full_is_simple_mode(self, make_service, building_store, req):
        response = make_service(building_store).lookup(LAT, LON, FeatureKind.BUILDING, req).to_response_dict()
        assert response["geometry"] == OUTER


class TestOtherKinds:

    def test_parcel(self, make_service, parcel_row, containing_part):
        store = FakeSpatialStore(rows={FeatureKind.PARCEL: [parcel_row]}, parts=[containing_part])

        response = make_service(store).lookup(LAT, LON, FeatureKind.PARCEL).to_response_dict()

        assert list(response) == ["coordinates", "source", "parcela", "geometry", "adresni_mista"]
        assert response["parcela"]["druh_pozemku"] == "zastavěná plocha a nádvoří"
        assert response["adresni_mista"] == []
        assert not [call for call in store.calls if call[0] == "fetch_addresses"]

    def test_land_use(self, make_service, land_use_row, containing_part):
        store = FakeSpatialStore(rows={FeatureKind.LAND_USE: [land_use_row]}, parts=[containing_part])

        response = make_service(store).lookup(LAT, LON, FeatureKind.LAND_USE).to_response_dict()

        assert response["source"] == "eagri:lpis"
        assert response["pudni_blok"]["kultura"] == "ovocný sad"
        assert response["pudni_blok"]["osm_tags"] == {"landuse": "orchard"}


class TestDegradedLookups:

    def test_invalid_input_never_touches_the_store(self, make_service, building_store):
        with pytest.raises(InvalidCoordinateError):
            make_service(building_store).lookup("50.08", "abc", FeatureKind.BUILDING)
        assert building_store.calls == []

    def test_no_match_keeps_every_section(self, make_service):
        response = make_service(FakeSpatialStore()).lookup(LAT, LON, FeatureKind.BUILDING).to_response_dict()

        assert response == {
            "coordinates": {"lat": LAT, "lon": LON},
            "source": "cuzk:ruian",
            "stavebni_objekt": {},
            "geometry": [],
            "adresni_mista": [],
        }

    def test_store_down_looks_like_no_match(self, make_service, building_store):
        building_store.fail_on = {"find_containing"}

        response = make_service(building_store).lookup(LAT, LON, FeatureKind.BUILDING).to_response_dict()

        assert response["stavebni_objekt"] == {}
        assert response["geometry"] == []

    def test_geometry_failure_keeps_attributes(self, make_service, building_store):
        building_store.fail_on = {"fetch_parts"}

        response = make_service(building_store).lookup(LAT, LON, FeatureKind.BUILDING).to_response_dict()

        assert response["stavebni_objekt"]["ruian_id"] == 21686548
        assert response["geometry"] == []
        assert len(response["adresni_mista"]) == 3

    def test_address_failure_keeps_geometry(self, make_service, building_store):
        building_store.fail_on = {"fetch_addresses"}

        response = make_service(building_store).lookup(LAT, LON, FeatureKind.BUILDING).to_response_dict()

        assert response["geometry"] == OUTER
        assert response["adresni_mista"] == []

    def test_no_part_re_contains_point(self, make_service, building_store):
        building_store.parts = [PolygonPart(rings=[OUTER], contains_point=False)]

        response = make_service(building_store).lookup(LAT, LON, FeatureKind.BUILDING).to_response_dict()

        assert response["stavebni_objekt"] != {}
        assert response["geometry"] == []


def test_coordinates_echo_raw_input(make_service):
    response = make_service(FakeSpatialStore()).lookup(" 50.0875", "+14.4213", FeatureKind.PARCEL).to_response_dict()
    assert response["coordinates"] == {"lat": " 50.0875", "lon": "+14.4213"}


def test_repeated_lookups_are_identical(make_service, building_store):
    service = make_service(building_store)
    first = service.lookup(LAT, LON, FeatureKind.BUILDING, "full").to_response_dict()
    second = service.lookup(LAT, LON, FeatureKind.BUILDING, "full").to_response_dict()
    assert first == second
