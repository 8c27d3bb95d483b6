# ============================================================================
# CLAUDE CONTEXT - AZURE FUNCTIONS ENTRY POINT
# ============================================================================
# STATUS: Core Infrastructure - Function App Entry Point
# PURPOSE: Main entry point for Azure Functions runtime with the reverse geocoding API
# EXPORTS: app (FunctionApp instance)
# DEPENDENCIES: azure-functions, reverse_geocode, health
# ============================================================================

"""
Azure Functions Entry Point for the RUIAN reverse geocoding API

Registers all HTTP triggers.

Architecture:
    - Reverse geocoding: 3 endpoints resolving a point against PostGIS
        - /api/ruian-buildings - RUIAN building with address points
        - /api/ruian-lands - RUIAN land parcel
        - /api/lpis-blocks - LPIS land-use block
    - Health checks: 2 endpoints for monitoring and APIM integration
        - /api/health - Public (minimal response for external callers)
        - /api/health/detailed - Internal (full metrics for APIM probes)

Deployment:
    - Local: func start
    - Azure: func azure functionapp publish <app-name> --python --build remote
"""

import azure.functions as func
import json
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize Azure Function App
app = func.FunctionApp()

# ============================================================================
# Reverse Geocoding API - 3 Endpoints
# ============================================================================

try:
    from reverse_geocode import get_reverse_geocode_triggers

    logger.info("Registering reverse geocoding endpoints...")

    def _register(trigger):
        handler = trigger['handler']

        # Function names must be unique per app; bound handlers all share one
        def endpoint(req: func.HttpRequest) -> func.HttpResponse:
            return handler(req)

        endpoint.__name__ = trigger['name']
        app.function_name(name=trigger['name'])(
            app.route(
                route=trigger['route'],
                methods=trigger['methods'],
                auth_level=func.AuthLevel.ANONYMOUS
            )(endpoint)
        )

    for trigger in get_reverse_geocode_triggers():
        _register(trigger)

    logger.info("✅ Reverse geocoding API registered successfully (3 endpoints)")

except ImportError as e:
    logger.warning(f"⚠️ Reverse geocoding module not available: {e}")
    logger.warning("Reverse geocoding API will not be available")

# ============================================================================
# Health Check Endpoints - 2 Endpoints (Public + Detailed)
# ============================================================================

@app.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """
    Public health check endpoint - minimal response for external callers.

    Always returns 200 - status in body indicates health.
    """
    from health import get_public_health

    result = get_public_health()

    return func.HttpResponse(
        json.dumps(result, default=str),
        mimetype="application/json",
        status_code=200,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"}
    )


@app.route(route="health/detailed", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_detailed(req: func.HttpRequest) -> func.HttpResponse:
    """
    Detailed health check endpoint - for APIM probes and operations.

    Returns 503 if unhealthy, 200 otherwise.

    SECURITY: Block this endpoint from external access via APIM policy.
    """
    from health import get_detailed_health, HealthStatus

    result = get_detailed_health()

    status_code = 503 if result["status"] == HealthStatus.UNHEALTHY.value else 200

    return func.HttpResponse(
        json.dumps(result, default=str, indent=2),
        mimetype="application/json",
        status_code=status_code,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"}
    )

# ============================================================================
# Application Startup
# ============================================================================

logger.info("="*60)
logger.info("Function App initialized successfully")
logger.info("Available endpoints:")
logger.info("  - GET /api/health - Public health check (minimal)")
logger.info("  - GET /api/health/detailed - Detailed health (APIM only)")
logger.info("  - GET /api/ruian-buildings?lat=&lon=[&req=full] - Building at point")
logger.info("  - GET /api/ruian-lands?lat=&lon=[&req=full] - Land parcel at point")
logger.info("  - GET /api/lpis-blocks?lat=&lon=[&req=full] - LPIS block at point")
logger.info("="*60)
