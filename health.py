# ============================================================================
# CLAUDE CONTEXT - HEALTH CHECK MODULE
# ============================================================================
# STATUS: Core Infrastructure - Health Monitoring
# PURPOSE: Production-grade health checks for APIM integration and monitoring
# EXPORTS: get_public_health, get_detailed_health, HealthStatus
# DEPENDENCIES: psycopg, config, util_logger
# PATTERNS: Two-tier health checks (public/detailed) for APIM
# ============================================================================

"""
Health Check Module for the RUIAN reverse geocoding API

Provides two-tier health monitoring optimized for Azure APIM integration:

1. Public Health (/api/health):
   - Minimal response for external callers (Cloudflare, public users)
   - Returns only status and timestamp
   - Always returns 200 (status in body indicates health)

2. Detailed Health (/api/health/detailed):
   - Full metrics for APIM probes and operations teams
   - Database connectivity with latency metrics
   - Lookup table and simplification function validation
   - API module status
   - Returns 503 if unhealthy

APIM Configuration:
    Block /health/detailed from external gateway to prevent information disclosure.
    Point APIM backend health probe at /health/detailed for circuit breaker.

Usage:
    from health import get_public_health, get_detailed_health

    # Public endpoint
    result = get_public_health()
    # {"status": "healthy", "timestamp": "2025-11-24T12:00:00Z"}

    # Detailed endpoint (APIM only)
    result = get_detailed_health()
    # Full metrics with latency, counts, etc.
"""

import time
import uuid
import psycopg
from enum import Enum
from datetime import datetime, timezone
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, List

from config import get_postgres_connection_string, get_app_config
from reverse_geocode.config import get_reverse_geocode_config
from util_logger import LoggerFactory, ComponentType

# Create module logger
logger = LoggerFactory.create_logger(ComponentType.SERVICE, "HealthService")


# ============================================================================
# Health Status Enum
# ============================================================================

class HealthStatus(str, Enum):
    """Health status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"      # Non-critical components failing
    UNHEALTHY = "unhealthy"    # Critical components failing


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class CheckResult:
    """Result of a single health check."""
    status: str              # "pass" or "fail"
    latency_ms: float        # Time taken for check
    message: str             # Human-readable status message
    details: Optional[Dict[str, Any]] = None  # Additional details

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result = {
            "status": self.status,
            "latency_ms": round(self.latency_ms, 2),
            "message": self.message
        }
        if self.details:
            result["details"] = self.details
        return result


# ============================================================================
# Health Check Functions
# ============================================================================

def check_database_connectivity(timeout_seconds: float = 5.0) -> CheckResult:
    """
    Check PostgreSQL database connectivity.

    Executes SELECT 1 with timeout to verify database is reachable.
    This is a critical check - failure means UNHEALTHY status.

    Args:
        timeout_seconds: Connection timeout in seconds

    Returns:
        CheckResult with connection status and latency
    """
    start_time = time.perf_counter()

    try:
        conn_string = get_postgres_connection_string()
        config = get_app_config()

        # Connect with timeout
        with psycopg.connect(
            conn_string,
            connect_timeout=int(timeout_seconds)
        ) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
                cur.fetchone()

        latency_ms = (time.perf_counter() - start_time) * 1000

        return CheckResult(
            status="pass",
            latency_ms=latency_ms,
            message="PostgreSQL connection successful",
            details={
                "host": config.postgis_host,
                "database": config.postgis_database,
                "auth_mode": "managed_identity" if config.use_managed_identity else "password"
            }
        )

    except Exception as e:
        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.error(f"Database connectivity check failed: {e}")

        return CheckResult(
            status="fail",
            latency_ms=latency_ms,
            message=f"Database connection failed: {type(e).__name__}",
            details={"error": str(e)}
        )


def check_ruian_tables() -> CheckResult:
    """
    Check that the tables the lookups query exist.

    Resolves the building, parcel and LPIS tables plus the address point
    table with to_regclass(). This is a critical check - failure means
    UNHEALTHY status.

    Returns:
        CheckResult with per-table existence
    """
    start_time = time.perf_counter()

    try:
        conn_string = get_postgres_connection_string()
        rg_config = get_reverse_geocode_config()

        tables = [
            "rn_stavebni_objekt",
            "rn_parcela",
            "rn_adresni_misto",
            rg_config.lpis_table,
        ]

        with psycopg.connect(conn_string) as conn:
            with conn.cursor() as cur:
                present = {}
                for table in tables:
                    cur.execute(
                        "SELECT to_regclass(%s) IS NOT NULL",
                        (f"{rg_config.ruian_schema}.{table}",)
                    )
                    present[table] = cur.fetchone()[0]

        latency_ms = (time.perf_counter() - start_time) * 1000
        missing = [table for table, exists in present.items() if not exists]

        if missing:
            return CheckResult(
                status="fail",
                latency_ms=latency_ms,
                message=f"Missing tables: {', '.join(missing)}",
                details={"schema": rg_config.ruian_schema, "tables": present}
            )

        return CheckResult(
            status="pass",
            latency_ms=latency_ms,
            message=f"{len(tables)} lookup tables present",
            details={"schema": rg_config.ruian_schema, "tables": present}
        )

    except Exception as e:
        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.error(f"RUIAN table check failed: {e}")

        return CheckResult(
            status="fail",
            latency_ms=latency_ms,
            message=f"RUIAN table check failed: {type(e).__name__}",
            details={"error": str(e)}
        )


def check_simplify_functions() -> CheckResult:
    """
    Check the simplification functions used for geometry export.

    Missing functions only empty the geometry section, so this is a
    non-critical check - failure means DEGRADED status.

    Returns:
        CheckResult with per-function existence
    """
    start_time = time.perf_counter()

    try:
        conn_string = get_postgres_connection_string()
        rg_config = get_reverse_geocode_config()
        functions = [rg_config.simplify_function, rg_config.full_simplify_function]

        with psycopg.connect(conn_string) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT proname FROM pg_proc WHERE proname = ANY(%s)",
                    (functions,)
                )
                found = {row[0] for row in cur.fetchall()}

        latency_ms = (time.perf_counter() - start_time) * 1000
        present = {name: name in found for name in functions}

        return CheckResult(
            status="pass" if all(present.values()) else "fail",
            latency_ms=latency_ms,
            message="Simplification functions available" if all(present.values())
            else "Simplification functions missing",
            details={"functions": present}
        )

    except Exception as e:
        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.error(f"Simplify function check failed: {e}")

        return CheckResult(
            status="fail",
            latency_ms=latency_ms,
            message=f"Simplify function check failed: {type(e).__name__}",
            details={"error": str(e)}
        )


def check_api_modules() -> CheckResult:
    """
    Check API module availability.

    Verifies the reverse_geocode module imports and builds its triggers.
    This is a non-critical check - failure means DEGRADED status.

    Returns:
        CheckResult with module availability status
    """
    start_time = time.perf_counter()

    rg_status = {"available": False, "endpoints": 0}

    try:
        from reverse_geocode import get_reverse_geocode_triggers
        triggers = get_reverse_geocode_triggers()
        rg_status = {
            "available": True,
            "endpoints": len(triggers),
            "routes": [trigger['route'] for trigger in triggers]
        }
    except Exception as e:
        rg_status["error"] = str(e)

    latency_ms = (time.perf_counter() - start_time) * 1000

    return CheckResult(
        status="pass" if rg_status["available"] else "fail",
        latency_ms=latency_ms,
        message="All modules loaded" if rg_status["available"] else "No API modules available",
        details={"reverse_geocode": rg_status}
    )


# ============================================================================
# Main Entry Points
# ============================================================================

def get_public_health() -> Dict[str, Any]:
    """
    Get minimal health status for public endpoint.

    Returns only status and timestamp - no internal details.
    Use for: Cloudflare health checks, public status pages.

    Returns:
        Dict with status and timestamp only
    """
    start_time = time.perf_counter()

    # Quick database check to determine status
    db_result = check_database_connectivity(timeout_seconds=3.0)

    # Determine overall status based on critical checks only
    if db_result.status == "pass":
        status = HealthStatus.HEALTHY
    else:
        status = HealthStatus.UNHEALTHY

    total_duration = (time.perf_counter() - start_time) * 1000

    # Log the health check
    logger.info("Public health check completed", extra={
        'custom_dimensions': {
            'status': status.value,
            'duration_ms': round(total_duration, 2),
            'check_type': 'public'
        }
    })

    return {
        "status": status.value,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


def get_detailed_health() -> Dict[str, Any]:
    """
    Get detailed health status for APIM probes and operations.

    Includes full metrics: database latency, lookup tables, simplification functions.
    Use for: APIM backend health probes, operations dashboards.

    SECURITY NOTE: Block this endpoint from external access via APIM policy.

    Returns:
        Dict with full health metrics
    """
    start_time = time.perf_counter()
    request_id = str(uuid.uuid4())[:8]

    checks = {}
    critical_failures = []
    non_critical_failures = []

    # Critical: Database connectivity
    db_result = check_database_connectivity()
    checks["database"] = db_result.to_dict()
    if db_result.status == "fail":
        critical_failures.append("database")

    # Critical: RUIAN and LPIS tables
    tables_result = check_ruian_tables()
    checks["ruian_tables"] = tables_result.to_dict()
    if tables_result.status == "fail":
        critical_failures.append("ruian_tables")

    # Non-critical: simplification functions
    functions_result = check_simplify_functions()
    checks["simplify_functions"] = functions_result.to_dict()
    if functions_result.status == "fail":
        non_critical_failures.append("simplify_functions")

    # Non-critical: API modules
    modules_result = check_api_modules()
    checks["api_modules"] = modules_result.to_dict()
    if modules_result.status == "fail":
        non_critical_failures.append("api_modules")

    # Determine overall status
    if critical_failures:
        status = HealthStatus.UNHEALTHY
    elif non_critical_failures:
        status = HealthStatus.DEGRADED
    else:
        status = HealthStatus.HEALTHY

    total_duration = (time.perf_counter() - start_time) * 1000

    # Log the health check
    logger.info("Detailed health check completed", extra={
        'custom_dimensions': {
            'status': status.value,
            'duration_ms': round(total_duration, 2),
            'check_type': 'detailed',
            'request_id': request_id,
            'critical_failures': critical_failures,
            'non_critical_failures': non_critical_failures,
            'database_latency_ms': db_result.latency_ms
        }
    })

    return {
        "status": status.value,
        "app": "ruian-reverse-geocode",
        "description": "RUIAN / LPIS reverse geocoding API",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
        "checks": checks,
        "total_duration_ms": round(total_duration, 2)
    }
