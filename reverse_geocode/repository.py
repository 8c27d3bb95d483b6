# ============================================================================
# CLAUDE CONTEXT - REVERSE GEOCODE REPOSITORY
# ============================================================================
# STATUS: Standalone Repository - PostGIS access for reverse geocoding
# PURPOSE: Containment, polygon part and address point queries against RUIAN/LPIS
# EXPORTS: SpatialLookupClient, PostGISSpatialStore, StoreUnavailableError
# DEPENDENCIES: psycopg, psycopg.sql, util_logger, config (connection string)
# SOURCE: PostgreSQL/PostGIS database with the RUIAN import (rn_* tables)
# SCOPE: Read-only parameterized queries
# VALIDATION: SQL injection prevention via psycopg.sql composition
# PATTERNS: Repository pattern, Protocol for injection, Per-request connections
# ============================================================================

"""
Reverse Geocode Repository - PostGIS Direct Access

Provides the three read-only capabilities the lookup pipeline consumes:

- find_containing(): features of a kind whose boundary contains a point,
  enriched from the address hierarchy and code dictionaries
- fetch_parts(): simplified rings of a feature's decomposed parts (ST_Dump),
  each flagged with whether the part itself contains the point
- fetch_addresses(): address points of a building with their anchor points

Spatial predicates, reprojection and simplification all run in PostGIS.

Safety:
- All queries use psycopg.sql.SQL() composition (NO string concatenation)
- Schema, table and function names via sql.Identifier()
- Coordinates and ids via named placeholders (%(name)s)

Connection Strategy:
    Each call opens a NEW connection and closes it afterwards. No pooling,
    which suits serverless Azure Functions.
"""

import json
from contextlib import contextmanager
from itertools import groupby
from typing import Any, Dict, List, Optional, Protocol

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from util_logger import LoggerFactory, ComponentType
from .config import ReverseGeocodeConfig, get_reverse_geocode_config
from .models import (
    AddressPoint,
    Coordinate,
    FeatureKind,
    GeometryMode,
    PolygonPart,
    Ring,
)

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "PostGISSpatialStore")


class StoreUnavailableError(RuntimeError):
    """Raised when the spatial store cannot be reached or a query fails."""


class SpatialLookupClient(Protocol):
    """Read-only spatial store consumed by the lookup pipeline."""

    def find_containing(self, kind: FeatureKind, point: Coordinate) -> List[Dict[str, Any]]:
        ...

    def fetch_parts(
        self,
        kind: FeatureKind,
        feature_id: int,
        point: Coordinate,
        mode: GeometryMode
    ) -> List[PolygonPart]:
        ...

    def fetch_addresses(self, building_id: int) -> List[AddressPoint]:
        ...


# ============================================================================
# SQL
# ============================================================================

# Query point: WGS84 lon/lat projected into the store SRID
_POINT = sql.SQL(
    "ST_Transform(ST_SetSRID(ST_MakePoint(%(lon)s, %(lat)s), 4326), %(srid)s)"
)

_BUILDING_CONTAINING = sql.SQL("""
    SELECT s.kod AS ruian_id,
           CASE
             WHEN s.typ_kod = 1 THEN 'Číslo popisné'
             WHEN s.typ_kod = 2 THEN 'Číslo evidenční'
             WHEN s.typ_kod = 3 THEN 'bez č.p./č.e.'
             ELSE ''
           END AS cislo_domovni_typ,
           trim(both '{{}}' from s.cisla_domovni::text) AS cislo_domovni,
           am.cislo_orientacni_hodnota || coalesce(am.cislo_orientacni_pismeno, '') AS cislo_orientacni,
           am.kod AS adresni_misto_kod,
           s.pocet_podlazi, s.plati_od, s.pocet_bytu, s.dokonceni,
           am.adrp_psc::text AS psc,
           ul.nazev AS ulice,
           c.nazev AS cast_obce,
           momc.nazev AS mestska_cast,
           ob.nazev AS obec,
           ok.nazev AS okres,
           vu.nazev AS kraj,
           s.zpusob_vyuziti_kod::text AS zpusob_vyuziti_kod,
           a.osmtag_k AS zpusob_vyuziti_key,
           a.osmtag_v AS zpusob_vyuziti_val
    FROM {schema}.rn_stavebni_objekt s
        LEFT OUTER JOIN {ref}.zpusob_vyuziti_objektu a ON s.zpusob_vyuziti_kod = a.kod
        LEFT OUTER JOIN {schema}.rn_adresni_misto am ON am.stavobj_kod = s.kod AND NOT am.deleted
        LEFT OUTER JOIN {schema}.rn_ulice ul ON am.ulice_kod = ul.kod AND NOT ul.deleted
        LEFT OUTER JOIN {schema}.rn_cast_obce c ON c.kod = s.cobce_kod AND NOT c.deleted
        LEFT OUTER JOIN {schema}.rn_momc momc ON momc.kod = s.momc_kod AND NOT momc.deleted
        LEFT OUTER JOIN {schema}.rn_obec ob ON coalesce(ul.obec_kod, c.obec_kod) = ob.kod AND NOT ob.deleted
        LEFT OUTER JOIN {schema}.rn_okres ok ON ob.okres_kod = ok.kod AND NOT ok.deleted
        LEFT OUTER JOIN {schema}.rn_vusc vu ON ok.vusc_kod = vu.kod AND NOT vu.deleted
    WHERE ST_Contains(s.hranice, {point})
      AND NOT s.deleted
""")

_PARCEL_CONTAINING = sql.SQL("""
    SELECT s.id AS ruian_id,
           a.nazev AS druh_pozemku,
           b.nazev AS zpusob_vyuziti,
           s.plati_od
    FROM {schema}.rn_parcela s
        LEFT OUTER JOIN {ref}.druh_pozemku a ON s.druh_pozemku_kod = a.kod
        LEFT OUTER JOIN {ref}.zpusob_vyuziti_pozemku b ON s.zpusob_vyu_poz_kod = b.kod
    WHERE ST_Contains(s.hranice, {point})
      AND NOT s.deleted
""")

_LAND_USE_CONTAINING = sql.SQL("""
    SELECT b.id AS lpis_id,
           b.kultura,
           b.plati_od
    FROM {schema}.{lpis_table} b
    WHERE ST_Contains(b.hranice, {point})
      AND NOT b.deleted
""")

# One row per decomposed part, simplified as a whole
_SIMPLE_PARTS = sql.SQL("""
    SELECT (d).path AS part_path,
           ST_Contains((d).geom, {point}) AS contains_point,
           ST_AsGeoJSON(ST_Transform({simplify}((d).geom), 4326)) AS geom
    FROM (
        SELECT ST_Dump(hranice) AS d
        FROM {table}
        WHERE {id_column} = %(feature_id)s
          AND NOT deleted
    ) AS dumped
    ORDER BY (d).path
""")

# One row per ring of every decomposed part, each ring simplified on its own
_FULL_PARTS = sql.SQL("""
    SELECT part.path AS part_path,
           part.contains_point,
           r.path[1] AS ring_no,
           ST_AsGeoJSON(ST_Transform({simplify}(r.geom), 4326)) AS geom
    FROM (
        SELECT (d).path AS path,
               (d).geom AS geom,
               ST_Contains((d).geom, {point}) AS contains_point
        FROM (
            SELECT ST_Dump(hranice) AS d
            FROM {table}
            WHERE {id_column} = %(feature_id)s
              AND NOT deleted
        ) AS dumped
    ) AS part
    CROSS JOIN LATERAL ST_DumpRings(part.geom) AS r
    ORDER BY part.path, r.path[1]
""")

_ADDRESSES = sql.SQL("""
    SELECT am.kod AS ruian_id,
           am.cislo_domovni::text AS cislo_domovni,
           am.cislo_orientacni_hodnota || coalesce(am.cislo_orientacni_pismeno, '') AS cislo_orientacni,
           ul.nazev AS ulice,
           ST_Y(ST_Transform(am.definicni_bod, 4326)) AS anchor_lat,
           ST_X(ST_Transform(am.definicni_bod, 4326)) AS anchor_lon
    FROM {schema}.rn_adresni_misto am
        LEFT OUTER JOIN {schema}.rn_ulice ul ON am.ulice_kod = ul.kod
    WHERE am.stavobj_kod = %(building_id)s
      AND NOT am.deleted
    ORDER BY am.kod
""")


def rings_from_geojson(text: Optional[str]) -> List[Ring]:
    """
    Rings of a GeoJSON polygon string.

    A MultiPolygon (simplification can split a part) contributes its first
    polygon; anything else, including NULL, gives no rings.
    """
    if not text:
        return []

    geometry = json.loads(text)
    geom_type = geometry.get("type")
    coordinates = geometry.get("coordinates") or []

    if geom_type == "Polygon":
        return coordinates
    if geom_type == "MultiPolygon" and coordinates:
        return coordinates[0]
    return []


class PostGISSpatialStore:
    """
    PostGIS implementation of SpatialLookupClient.

    Thread Safety:
    - Each method creates its own connection
    - Safe for concurrent requests in Azure Functions
    """

    def __init__(
        self,
        config: Optional[ReverseGeocodeConfig] = None,
        connection_string: Optional[str] = None
    ):
        """
        Args:
            config: Reverse geocoding configuration (uses singleton if not provided)
            connection_string: Explicit connection string; resolved from the
                application config on first use when omitted
        """
        self.config = config or get_reverse_geocode_config()
        self._connection_string = connection_string
        logger.info(f"PostGISSpatialStore initialized (schema: {self.config.ruian_schema}, srid: {self.config.store_srid})")

    def _get_connection_string(self) -> str:
        if self._connection_string is None:
            from config import get_postgres_connection_string
            self._connection_string = get_postgres_connection_string()
        return self._connection_string

    @contextmanager
    def _get_connection(self):
        """
        Context manager for PostgreSQL connections.

        Yields:
            psycopg connection with dict_row factory and statement timeout
        """
        try:
            conn = psycopg.connect(
                self._get_connection_string(),
                row_factory=dict_row,
                options=f"-c statement_timeout={self.config.query_timeout_seconds * 1000}"
            )
        except (psycopg.Error, ValueError) as e:
            logger.error(f"Database connection error: {e}")
            raise StoreUnavailableError(f"Database connection failed: {e}") from e

        try:
            yield conn
        finally:
            conn.close()

    def _fetch_all(self, query: sql.Composed, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        with self._get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    rows = cur.fetchall()
            except psycopg.Error as e:
                logger.error(f"Query execution failed: {e}")
                raise StoreUnavailableError(f"Database query failed: {e}") from e

        logger.debug(f"Query returned {len(rows)} rows")
        return rows

    def _point_params(self, point: Coordinate) -> Dict[str, Any]:
        return {
            'lat': point.latitude,
            'lon': point.longitude,
            'srid': self.config.store_srid
        }

    def _table(self, kind: FeatureKind) -> sql.Identifier:
        tables = {
            FeatureKind.BUILDING: "rn_stavebni_objekt",
            FeatureKind.PARCEL: "rn_parcela",
            FeatureKind.LAND_USE: self.config.lpis_table,
        }
        return sql.Identifier(self.config.ruian_schema, tables[kind])

    @staticmethod
    def _id_column(kind: FeatureKind) -> sql.Identifier:
        return sql.Identifier("kod" if kind is FeatureKind.BUILDING else "id")

    # ========================================================================
    # CONTAINMENT
    # ========================================================================

    def find_containing(self, kind: FeatureKind, point: Coordinate) -> List[Dict[str, Any]]:
        """
        Non-deleted features of ``kind`` whose boundary contains ``point``.

        Rows come back in the store's natural order; enrichment joins may
        yield several rows for one feature.
        """
        templates = {
            FeatureKind.BUILDING: _BUILDING_CONTAINING,
            FeatureKind.PARCEL: _PARCEL_CONTAINING,
            FeatureKind.LAND_USE: _LAND_USE_CONTAINING,
        }
        query = templates[kind].format(
            schema=sql.Identifier(self.config.ruian_schema),
            ref=sql.Identifier(self.config.reference_schema),
            lpis_table=sql.Identifier(self.config.lpis_table),
            point=_POINT
        )

        rows = self._fetch_all(query, self._point_params(point))
        logger.info(f"{len(rows)} {kind.value} rows contain ({point.latitude}, {point.longitude})")
        return rows

    # ========================================================================
    # POLYGON PARTS
    # ========================================================================

    def fetch_parts(
        self,
        kind: FeatureKind,
        feature_id: int,
        point: Coordinate,
        mode: GeometryMode
    ) -> List[PolygonPart]:
        """
        Decomposed parts of a feature with simplified rings in EPSG:4326.

        Simple mode returns each part simplified as a polygon; full mode
        simplifies every ring separately with the less aggressive function.
        """
        if mode is GeometryMode.FULL:
            template, function = _FULL_PARTS, self.config.full_simplify_function
        else:
            template, function = _SIMPLE_PARTS, self.config.simplify_function

        query = template.format(
            table=self._table(kind),
            id_column=self._id_column(kind),
            simplify=sql.Identifier(function),
            point=_POINT
        )
        params = self._point_params(point)
        params['feature_id'] = feature_id

        rows = self._fetch_all(query, params)

        if mode is GeometryMode.FULL:
            parts = self._group_ring_rows(rows)
        else:
            parts = [
                PolygonPart(
                    rings=rings_from_geojson(row['geom']),
                    contains_point=bool(row['contains_point'])
                )
                for row in rows
            ]

        logger.debug(f"{kind.value} {feature_id}: {len(parts)} parts ({mode.value})")
        return parts

    @staticmethod
    def _group_ring_rows(rows: List[Dict[str, Any]]) -> List[PolygonPart]:
        """Fold one-row-per-ring results back into parts, keeping row order."""
        parts = []
        for _, part_rows in groupby(rows, key=lambda row: tuple(row['part_path'] or ())):
            part_rows = list(part_rows)
            rings = []
            for index, row in enumerate(part_rows):
                ring_rings = rings_from_geojson(row['geom'])
                if ring_rings:
                    rings.append(ring_rings[0])
                elif row.get('ring_no', index) == 0:
                    # Unusable outer ring: the part has no outer, a hole must not take its place
                    rings = []
                    break
            parts.append(PolygonPart(
                rings=rings,
                contains_point=bool(part_rows[0]['contains_point'])
            ))
        return parts

    # ========================================================================
    # ADDRESS POINTS
    # ========================================================================

    def fetch_addresses(self, building_id: int) -> List[AddressPoint]:
        """Non-deleted address points of a building."""
        query = _ADDRESSES.format(schema=sql.Identifier(self.config.ruian_schema))
        rows = self._fetch_all(query, {'building_id': building_id})
        return [AddressPoint.model_validate(row) for row in rows]
