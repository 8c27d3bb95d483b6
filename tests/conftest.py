"""Shared test fixtures: an in-memory spatial store and realistic RUIAN rows."""

from datetime import date, datetime

import pytest

from reverse_geocode.config import ReverseGeocodeConfig
from reverse_geocode.models import AddressPoint, FeatureKind, PolygonPart
from reverse_geocode.repository import StoreUnavailableError
from reverse_geocode.service import ReverseGeocodeService

# Prague, Old Town Square area
QUERY_LAT = 50.0875
QUERY_LON = 14.4213

OUTER = [
    [14.4210, 50.0873],
    [14.4216, 50.0873],
    [14.4216, 50.0877],
    [14.4210, 50.0877],
    [14.4210, 50.0873],
]
HOLE = [
    [14.4212, 50.0874],
    [14.4214, 50.0874],
    [14.4214, 50.0875],
    [14.4212, 50.0874],
]
OTHER_OUTER = [
    [14.4300, 50.0900],
    [14.4305, 50.0900],
    [14.4305, 50.0904],
    [14.4300, 50.0900],
]


class FakeSpatialStore:
    """
    SpatialLookupClient backed by plain lists.

    Records every call; operations listed in ``fail_on`` raise
    StoreUnavailableError like an unreachable database.
    """

    def __init__(self, rows=None, parts=None, addresses=None, fail_on=()):
        self.rows = rows or {}
        self.parts = parts or []
        self.addresses = addresses or []
        self.fail_on = set(fail_on)
        self.calls = []

    def _maybe_fail(self, operation):
        if operation in self.fail_on:
            raise StoreUnavailableError(f"{operation}: connection refused")

    def find_containing(self, kind, point):
        self.calls.append(("find_containing", kind, point))
        self._maybe_fail("find_containing")
        return [dict(row) for row in self.rows.get(kind, [])]

    def fetch_parts(self, kind, feature_id, point, mode):
        self.calls.append(("fetch_parts", kind, feature_id, mode))
        self._maybe_fail("fetch_parts")
        return list(self.parts)

    def fetch_addresses(self, building_id):
        self.calls.append(("fetch_addresses", building_id))
        self._maybe_fail("fetch_addresses")
        return list(self.addresses)


@pytest.fixture
def rg_config():
    """Configuration with the production defaults, independent of the environment."""
    return ReverseGeocodeConfig(
        ruian_schema="public",
        reference_schema="osmtables",
        lpis_table="lpis_pudni_blok",
        store_srid=900913,
        ruian_source_tag="cuzk:ruian",
        lpis_source_tag="eagri:lpis",
        simplify_function="local_simplify_polygon",
        full_simplify_function="local_less_simplify_polygon",
        min_address_points=2,
        query_timeout_seconds=30,
    )


@pytest.fixture
def building_row():
    return {
        "ruian_id": 21686548,
        "cislo_domovni_typ": "Číslo popisné",
        "cislo_domovni": "548",
        "cislo_orientacni": "12a",
        "adresni_misto_kod": 21720622,
        "pocet_podlazi": 4,
        "plati_od": datetime(2015, 3, 1, 0, 0),
        "pocet_bytu": 8,
        "dokonceni": date(1911, 6, 30),
        "psc": "11000",
        "ulice": "Celetná",
        "cast_obce": "Staré Město",
        "mestska_cast": "Praha 1",
        "obec": "Praha",
        "okres": "Hlavní město Praha",
        "kraj": "Hlavní město Praha",
        "zpusob_vyuziti_kod": "7",
        "zpusob_vyuziti_key": "building",
        "zpusob_vyuziti_val": "residential",
    }


@pytest.fixture
def parcel_row():
    return {
        "ruian_id": 2311234101,
        "druh_pozemku": "zastavěná plocha a nádvoří",
        "zpusob_vyuziti": None,
        "plati_od": datetime(2018, 1, 2, 0, 0),
    }


@pytest.fixture
def land_use_row():
    return {
        "lpis_id": 5402101,
        "kultura": "ovocný sad",
        "plati_od": datetime(2020, 5, 11, 0, 0),
    }


@pytest.fixture
def containing_part():
    return PolygonPart(rings=[OUTER, HOLE], contains_point=True)


@pytest.fixture
def address_points():
    """Three address points roughly 50 m, 10 m and 30 m north of the query point."""
    return [
        AddressPoint(ruian_id=1, cislo_domovni="548", cislo_orientacni="1", ulice="Celetná",
                     anchor_lat=QUERY_LAT + 0.00045, anchor_lon=QUERY_LON),
        AddressPoint(ruian_id=2, cislo_domovni="548", cislo_orientacni="2", ulice="Celetná",
                     anchor_lat=QUERY_LAT + 0.00009, anchor_lon=QUERY_LON),
        AddressPoint(ruian_id=3, cislo_domovni="548", cislo_orientacni="3", ulice="Celetná",
                     anchor_lat=QUERY_LAT + 0.00027, anchor_lon=QUERY_LON),
    ]


@pytest.fixture
def building_store(building_row, containing_part, address_points):
    return FakeSpatialStore(
        rows={FeatureKind.BUILDING: [building_row]},
        parts=[containing_part],
        addresses=address_points,
    )


@pytest.fixture
def make_service(rg_config):
    def _make(store):
        return ReverseGeocodeService(config=rg_config, store=store)
    return _make
