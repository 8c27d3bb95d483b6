"""
Geometry assembly for the resolved feature.

The store hands back the feature's decomposed parts with loosely simplified
rings; this module only decides which ring is the outer boundary and which
rings are holes. Reprojection, containment and simplification stay in the
store.
"""

from typing import List

from util_logger import LoggerFactory, ComponentType
from .models import AssembledGeometry, GeometryMode, PolygonPart, Ring

logger = LoggerFactory.create_logger(ComponentType.ASSEMBLER, "GeometryAssembler")


def is_duplicate_outer(ring: Ring, outer: Ring) -> bool:
    """
    True when ``ring`` re-emits the outer boundary.

    The store repeats an outer ring at the same position when it decomposes
    some multipolygons. Detection is exact equality of the first vertex;
    both rings come from the same simplification, so no tolerance is applied.
    """
    return bool(ring) and bool(outer) and ring[0] == outer[0]


def _containing_parts(parts: List[PolygonPart]) -> List[PolygonPart]:
    return [part for part in parts if part.contains_point and part.outer]


def assemble_simple(parts: List[PolygonPart]) -> AssembledGeometry:
    """Outer ring of the first part that re-contains the point."""
    matching = _containing_parts(parts)
    if not matching:
        return AssembledGeometry()
    return AssembledGeometry(outer=matching[0].outer)


def assemble_full(parts: List[PolygonPart]) -> AssembledGeometry:
    """
    Outer ring plus holes across all parts that re-contain the point.

    Rings are taken in store order across the matching parts. The first is
    the outer boundary. A later ring starting at the outer's first vertex is
    a duplicate re-emission: it is dropped and nothing after it is read.
    Every other ring becomes an inner ring.
    """
    rings = [ring for part in _containing_parts(parts) for ring in part.rings if ring]
    if not rings:
        return AssembledGeometry()

    outer = rings[0]
    inners = []
    for ring in rings[1:]:
        if is_duplicate_outer(ring, outer):
            logger.debug("Duplicate outer ring found, ignoring remaining rings")
            break
        inners.append(ring)

    return AssembledGeometry(outer=outer, inners=inners)


class GeometryAssembler:
    """Turns polygon parts into the response geometry for a mode."""

    def assemble(self, parts: List[PolygonPart], mode: GeometryMode) -> AssembledGeometry:
        if mode is GeometryMode.FULL:
            geometry = assemble_full(parts)
        else:
            geometry = assemble_simple(parts)

        if geometry.is_empty and parts:
            logger.info(f"None of {len(parts)} parts re-contains the point, geometry left empty")

        return geometry
