"""
Coordinate validation.

Accepts the decimal notations a numeric query string may use ("50.08",
"+14", ".5", "1e-3", surrounding whitespace) and rejects everything else,
including "nan" and "inf" which float() alone would let through.
"""

import math
import re
from typing import Any, Optional

from util_logger import LoggerFactory, ComponentType
from .models import Coordinate

logger = LoggerFactory.create_logger(ComponentType.VALIDATOR, "CoordinateValidator")

_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


class InvalidCoordinateError(ValueError):
    """Raised when lat or lon is missing or not a finite number."""


def _parse_component(name: str, raw: Optional[Any]) -> float:
    if raw is None:
        raise InvalidCoordinateError(f"{name} is required")

    text = str(raw)
    if not _NUMERIC.match(text):
        raise InvalidCoordinateError(f"{name} is not numeric: {text!r}")

    value = float(text)
    if not math.isfinite(value):
        raise InvalidCoordinateError(f"{name} is not finite: {text!r}")
    return value


def validate(raw_lat: Optional[Any], raw_lon: Optional[Any]) -> Coordinate:
    """
    Parse raw request values into a Coordinate.

    Out-of-range values are accepted; they simply match nothing in the store.

    Raises:
        InvalidCoordinateError: If either value is not a finite number
    """
    try:
        return Coordinate(
            latitude=_parse_component("lat", raw_lat),
            longitude=_parse_component("lon", raw_lon),
        )
    except InvalidCoordinateError as e:
        logger.debug(f"Rejected coordinate input: {e}")
        raise
