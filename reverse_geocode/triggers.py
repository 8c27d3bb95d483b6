# ============================================================================
# CLAUDE CONTEXT - REVERSE GEOCODE TRIGGERS
# ============================================================================
# STATUS: Standalone HTTP Triggers - Reverse geocoding endpoints
# PURPOSE: Azure Functions HTTP handlers for building, parcel and land-use lookups
# EXPORTS: get_reverse_geocode_triggers, ReverseGeocodeTrigger
# INTERFACES: Azure Functions HttpRequest/HttpResponse
# DEPENDENCIES: azure.functions, typing, json
# SOURCE: HTTP requests from tracer clients (JOSM plugin, curl)
# SCOPE: HTTP endpoint handlers for reverse geocoding
# PATTERNS: Trigger Pattern, Factory Pattern (get_reverse_geocode_triggers)
# ENTRY_POINTS: Function App route registration via get_reverse_geocode_triggers()
# ============================================================================

"""
Reverse Geocode HTTP Triggers - Azure Functions Handlers

Endpoints:
- GET /api/ruian-buildings?lat=..&lon=..[&req=full] - Building at a point
- GET /api/ruian-lands?lat=..&lon=..[&req=full] - Land parcel at a point
- GET /api/lpis-blocks?lat=..&lon=..[&req=full] - LPIS soil block at a point

Invalid coordinates produce an empty body and nothing else. A point with no
feature still returns the full JSON shape with empty sections.

Integration:
    In function_app.py:

    from reverse_geocode import get_reverse_geocode_triggers

    for trigger in get_reverse_geocode_triggers():
        _register(trigger)  # function_name(trigger['name']) + route(...)
"""

import azure.functions as func
import json
from typing import Any, Dict, List, Optional

from util_logger import LoggerFactory, ComponentType, LogContext
from .models import FeatureKind
from .service import ReverseGeocodeService
from .validator import InvalidCoordinateError

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "ReverseGeocodeTrigger")

ROUTES = {
    FeatureKind.BUILDING: "ruian-buildings",
    FeatureKind.PARCEL: "ruian-lands",
    FeatureKind.LAND_USE: "lpis-blocks",
}


def get_reverse_geocode_triggers(service: Optional[ReverseGeocodeService] = None) -> List[Dict[str, Any]]:
    """
    Trigger configurations for function_app.py.

    All handlers share one service (and so one store client).

    Returns:
        List of dicts with keys name, route, methods, handler
    """
    service = service or ReverseGeocodeService()
    return [
        {
            'name': route.replace('-', '_'),
            'route': route,
            'methods': ['GET'],
            'handler': ReverseGeocodeTrigger(kind, service).handle
        }
        for kind, route in ROUTES.items()
    ]


class ReverseGeocodeTrigger:
    """
    Lookup trigger for one feature kind.

    Query Parameters:
    - lat: Latitude (WGS84), required
    - lon: Longitude (WGS84), required
    - req: "full" exports outer ring plus holes; anything else the outer ring only
    """

    def __init__(self, kind: FeatureKind, service: Optional[ReverseGeocodeService] = None):
        self.kind = kind
        self.service = service or ReverseGeocodeService()

    def handle(self, req: func.HttpRequest) -> func.HttpResponse:
        """
        Handle a lookup request.

        Args:
            req: Azure Functions HTTP request

        Returns:
            HttpResponse with the result JSON, or an empty body for invalid input
        """
        raw_lat = req.params.get('lat')
        raw_lon = req.params.get('lon')
        mode = req.params.get('req')

        context = LogContext(
            request_id=req.headers.get('x-request-id'),
            correlation_id=req.headers.get('x-correlation-id'),
            feature_kind=self.kind.value,
            mode=mode
        )

        try:
            record = self.service.lookup(raw_lat, raw_lon, self.kind, mode)

        except InvalidCoordinateError as e:
            logger.info(f"Invalid coordinates, empty response: {e}", extra={
                'custom_dimensions': context.to_dict()
            })
            return func.HttpResponse(body=b"", status_code=200)

        except Exception as e:
            logger.error(f"Error resolving {self.kind.value}: {e}", exc_info=True, extra={
                'custom_dimensions': context.to_dict()
            })
            return self._error_response(
                message=f"Internal server error: {str(e)}",
                status_code=500,
                error_type="InternalServerError"
            )

        return self._json_response(record.to_response_dict())

    def _json_response(self, data: Any, status_code: int = 200) -> func.HttpResponse:
        return func.HttpResponse(
            body=json.dumps(data),
            status_code=status_code,
            mimetype="application/json"
        )

    def _error_response(
        self,
        message: str,
        status_code: int = 400,
        error_type: str = "BadRequest"
    ) -> func.HttpResponse:
        error_body = {
            "code": error_type,
            "description": message
        }
        return func.HttpResponse(
            body=json.dumps(error_body, indent=2),
            status_code=status_code,
            mimetype="application/json"
        )
