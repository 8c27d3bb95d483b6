"""
Address point proximity ranking.
"""

import math
from typing import List

from pyproj import Geod

from util_logger import LoggerFactory, ComponentType
from .models import AddressPoint, Coordinate

logger = LoggerFactory.create_logger(ComponentType.RANKER, "AddressProximityRanker")


class AddressProximityRanker:
    """
    Orders address points by geodesic distance to the query point.

    Distances are WGS84 ellipsoidal (pyproj.Geod). Points without an anchor
    go last, like NULL distances in an ascending SQL sort. Python's sort is
    stable, so equal distances keep the store order.
    """

    def __init__(self, ellps: str = "WGS84"):
        self.geod = Geod(ellps=ellps)

    def distance_m(self, point: Coordinate, address: AddressPoint) -> float:
        """Distance in meters, infinity when the address has no anchor."""
        if address.anchor_lat is None or address.anchor_lon is None:
            return math.inf

        _, _, distance = self.geod.inv(
            point.longitude, point.latitude,
            address.anchor_lon, address.anchor_lat
        )
        return distance

    def rank(self, point: Coordinate, addresses: List[AddressPoint]) -> List[AddressPoint]:
        ranked = sorted(addresses, key=lambda address: self.distance_m(point, address))
        logger.debug(f"Ranked {len(ranked)} address points")
        return ranked
