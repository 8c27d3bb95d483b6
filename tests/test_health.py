"""Tests for the health checks with the database mocked out."""

from unittest.mock import MagicMock, patch

import psycopg
import pytest

import health
from health import CheckResult, HealthStatus


@pytest.fixture
def db_cursor(rg_config):
    cursor = MagicMock()
    conn = MagicMock()
    conn.__enter__.return_value = conn
    conn.cursor.return_value.__enter__.return_value = cursor
    with patch("health.get_postgres_connection_string", return_value="postgresql://test@localhost/ruian"), \
            patch("health.get_reverse_geocode_config", return_value=rg_config), \
            patch("psycopg.connect", return_value=conn):
        yield cursor


def test_all_tables_present(db_cursor):
    db_cursor.fetchone.return_value = (True,)

    result = health.check_ruian_tables()

    assert result.status == "pass"
    assert result.details["tables"]["lpis_pudni_blok"] is True


def test_missing_table_fails(db_cursor):
    db_cursor.fetchone.side_effect = [(True,), (True,), (True,), (False,)]

    result = health.check_ruian_tables()

    assert result.status == "fail"
    assert "lpis_pudni_blok" in result.message


def test_missing_simplify_function_fails(db_cursor):
    db_cursor.fetchall.return_value = [("local_simplify_polygon",)]

    result = health.check_simplify_functions()

    assert result.status == "fail"
    assert result.details["functions"] == {
        "local_simplify_polygon": True,
        "local_less_simplify_polygon": False,
    }


def test_unreachable_database():
    with patch("health.get_postgres_connection_string", return_value="postgresql://test@localhost/ruian"), \
            patch("health.get_app_config", return_value=MagicMock()), \
            patch("psycopg.connect", side_effect=psycopg.OperationalError("connection refused")):
        result = health.check_database_connectivity()

    assert result.status == "fail"
    assert result.message == "Database connection failed: OperationalError"


def _result(status):
    return CheckResult(status=status, latency_ms=1.0, message=status)


@pytest.mark.parametrize("tables, functions, expected", [
    ("pass", "pass", HealthStatus.HEALTHY),
    ("pass", "fail", HealthStatus.DEGRADED),
    ("fail", "pass", HealthStatus.UNHEALTHY),
])
def test_detailed_health_status(tables, functions, expected):
    with patch("health.check_database_connectivity", return_value=_result("pass")), \
            patch("health.check_ruian_tables", return_value=_result(tables)), \
            patch("health.check_simplify_functions", return_value=_result(functions)), \
            patch("health.check_api_modules", return_value=_result("pass")):
        result = health.get_detailed_health()

    assert result["status"] == expected.value
    assert set(result["checks"]) == {"database", "ruian_tables", "simplify_functions", "api_modules"}
