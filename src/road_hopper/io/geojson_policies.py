# io/geojson_policies.py
"""
Conversion policies turning guidance data into GeoJSON features.

Debug output only: nothing in the routing decisions depends on these.
"""

from collections.abc import Sequence

from shapely.geometry import LineString, MultiPoint, mapping

from road_hopper.app.protocols import BaseGraph
from road_hopper.domain.entities.geography import Coordinate
from road_hopper.domain.entities.graph import Intersection


def make_feature(geometry, properties: dict | None = None) -> dict:
    return {"type": "Feature", "properties": dict(properties or {}), "geometry": mapping(geometry)}


def _xy(coordinates: Sequence[Coordinate]) -> list[tuple[float, float]]:
    return [(c.lon, c.lat) for c in coordinates]


class CoordinateVectorToLineString:
    def __call__(self, coordinates: Sequence[Coordinate], **properties) -> dict:
        return make_feature(LineString(_xy(coordinates)), properties)


class CoordinateVectorToMultiPoint:
    def __call__(self, coordinates: Sequence[Coordinate], **properties) -> dict:
        return make_feature(MultiPoint(_xy(coordinates)), properties)


class NodeIdVectorToLineString:
    def __init__(self, graph: BaseGraph):
        self.G = graph

    def __call__(self, node_ids: Sequence[int], **properties) -> dict:
        coordinates = [self.G.node_coordinate(n) for n in node_ids]
        return CoordinateVectorToLineString()(coordinates, **properties)


class NodeIdVectorToMultiPoint:
    def __init__(self, graph: BaseGraph):
        self.G = graph

    def __call__(self, node_ids: Sequence[int], **properties) -> dict:
        coordinates = [self.G.node_coordinate(n) for n in node_ids]
        return CoordinateVectorToMultiPoint()(coordinates, **properties)


class IntersectionPrinter:
    """
    Renders the coordinates used for angle calculation at an intersection:
    one MultiPoint with the node and every representative coordinate, plus a
    line from the node to each of them.
    """

    def __init__(self, graph, coordinate_extractor, *, lookahead_m: float = 10.0):
        self.G, self.coords, self.lookahead_m = graph, coordinate_extractor, lookahead_m

    def __call__(self, node: int, intersection: Intersection) -> list[dict]:
        center = self.G.node_coordinate(node)
        points = [
            self.coords.get_coordinate_along_road(
                node,
                road.eid,
                self.G.edge_data(road.eid).reversed,
                self.G.target(road.eid),
                self.lookahead_m,
            )
            for road in intersection
        ]
        features = [CoordinateVectorToMultiPoint()([center, *points], node=node)]
        for road, point in zip(intersection, points, strict=True):
            features.append(
                CoordinateVectorToLineString()(
                    [center, point], eid=road.eid, angle=road.angle, entry_allowed=road.entry_allowed
                )
            )
        return features
