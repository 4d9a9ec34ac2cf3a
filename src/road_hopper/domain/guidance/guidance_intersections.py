from road_hopper.app.protocols import IntersectionSource
from road_hopper.domain.entities.graph import ConnectedRoad, Intersection, NodeBasedGraph
from road_hopper.domain.geometry.coordinate_calculation import compute_angle
from road_hopper.domain.guidance.guidance_coordinates import CoordinateExtractor


class IntersectionGenerator(IntersectionSource):
    """
    Plain intersection enumeration: no merging, no angle adjustment.

    Turn angles are measured between coordinates `lookahead_m` along the
    incoming and outgoing geometry, which keeps short kinks next to the node
    from dominating the angle.
    """

    def __init__(
        self,
        graph: NodeBasedGraph,
        coordinate_extractor: CoordinateExtractor,
        *,
        lookahead_m: float = 10.0,
    ):
        self.G, self.coords, self.lookahead_m = graph, coordinate_extractor, lookahead_m

    def get_connected_roads(self, from_node: int, via_edge: int) -> Intersection:
        assert self.G.source(via_edge) == from_node, f"edge {via_edge} does not leave {from_node}"
        turn_node = self.G.target(via_edge)
        uturn_eid = self.G.twin(via_edge)

        # representative point on the incoming road, seen from the turn node
        incoming = self.coords.get_coordinates_along_road(
            from_node, via_edge, self.G.edge_data(via_edge).reversed, turn_node
        )
        incoming.reverse()
        in_coord = self.coords.trim_coordinates_to_length(incoming, self.lookahead_m)[-1]
        turn_coord = self.G.node_coordinate(turn_node)

        out_edges = self.G.out_edges(turn_node)
        dead_end = len(out_edges) == 1

        uturn = ConnectedRoad(
            eid=uturn_eid,
            angle=0.0,
            entry_allowed=dead_end and self.G.traversable(uturn_eid),
        )
        roads = []
        for eid in out_edges:
            if eid == uturn_eid:
                continue
            out_coord = self.coords.get_coordinate_along_road(
                turn_node,
                eid,
                self.G.edge_data(eid).reversed,
                self.G.target(eid),
                self.lookahead_m,
            )
            roads.append(
                ConnectedRoad(
                    eid=eid,
                    angle=compute_angle(in_coord, turn_coord, out_coord),
                    entry_allowed=self.G.traversable(eid),
                )
            )
        roads.sort(key=lambda road: road.angle)
        return Intersection([uturn, *roads])
