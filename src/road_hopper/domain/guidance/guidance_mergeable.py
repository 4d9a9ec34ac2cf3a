"""
Detection of segregated roads that should be treated as a single road.

Segregated roads often meet at a single intersection. While technically
different ways, guidance looks at them as one road:

            b<b<b<b(1)<b<b<b
    aaaaa-b
            b>b>b>b(2)>b>b>b

Taken separately, a -> (2) looks like a slight turn and (1) -> (2) like a
sharp one. Merging both carriageways yields

    aaaaa-bbbbbb

for the turn representation.
"""

from road_hopper.app.protocols import BaseGraph, CoordinateSampler, IntersectionSource
from road_hopper.config.models import MergeModel
from road_hopper.domain.entities.geography import Coordinate
from road_hopper.domain.entities.graph import EMPTY_NAMEID, ConnectedRoad, EdgeData
from road_hopper.domain.geometry.coordinate_calculation import angular_deviation, get_length
from road_hopper.domain.guidance.guidance_hopper import NAME_ONLY, GraphHopper
from road_hopper.io.geojson_policies import CoordinateVectorToMultiPoint
from road_hopper.io.recorder import Recorder
from road_hopper.runtime.hooks import GuidanceHooks, NoopHooks
from road_hopper.runtime.registries import make_direction_check


def have_compatible_road_data(lhs: EdgeData, rhs: EdgeData) -> bool:
    """True if both edges can describe the same road in opposite directions."""
    # one direction of the way and the other one
    if lhs.reversed == rhs.reversed:
        return False

    # strict on names: similar names are not good enough for a merge
    if lhs.name_id != rhs.name_id or lhs.name_id == EMPTY_NAMEID:
        return False

    # merging different modes would hide valid choices (e.g. short pushing sections)
    if lhs.travel_mode != rhs.travel_mode:
        return False

    return lhs.road_classification == rhs.road_classification


class MergableRoadDetector:
    def __init__(
        self,
        graph: BaseGraph,
        intersection_generator: IntersectionSource,
        coordinate_extractor: CoordinateSampler,
        *,
        config: MergeModel | None = None,
        hooks: GuidanceHooks | None = None,
        recorder: Recorder | None = None,
    ):
        self.G, self.intersections, self.coords = graph, intersection_generator, coordinate_extractor
        self.cfg = config or MergeModel()
        self.direction_check = make_direction_check(self.cfg.direction)
        self.recorder = recorder
        self._hooks = hooks or NoopHooks()
        self._hopper = GraphHopper(graph, intersection_generator)

    # --------------- Decision -----------------------------

    def can_merge(self, node: int, lhs: ConnectedRoad, rhs: ConnectedRoad) -> bool:
        merged, reason = self._decide(node, lhs, rhs)
        self._hooks.merge_decision(
            node=node, lhs_eid=lhs.eid, rhs_eid=rhs.eid, merged=merged, reason=reason
        )
        return merged

    def _decide(self, node: int, lhs: ConnectedRoad, rhs: ConnectedRoad) -> tuple[bool, str]:
        lhs_data, rhs_data = self.G.edge_data(lhs.eid), self.G.edge_data(rhs.eid)

        # roundabouts are left alone
        if lhs_data.roundabout or rhs_data.roundabout:
            return False, "roundabout"

        # a merge must never hide a turn
        if lhs.entry_allowed and rhs.entry_allowed:
            return False, "hides_turn"

        if not have_compatible_road_data(lhs_data, rhs_data):
            return False, "incompatible"

        if not self.have_same_direction(node, lhs, rhs):
            return False, "direction"

        if self.cfg.require_reconnect and not self.connect_again(node, lhs, rhs):
            return False, "no_reconnect"

        limit = self.cfg.max_turn_deviation_deg
        if limit is not None and angular_deviation(lhs.angle, rhs.angle) >= limit:
            return False, "turn_angle"

        return True, "merged"

    # --------------- Direction -----------------------------

    def assumed_lane_width(self, lhs_data: EdgeData, rhs_data: EdgeData) -> float:
        lanes = max(1, lhs_data.road_classification.num_lanes) + max(
            1, rhs_data.road_classification.num_lanes
        )
        return lanes * self.cfg.lane_width_m

    def lookahead_distance(self, lane_width: float) -> float:
        return self.cfg.lookahead_offset_m + self.cfg.lookahead_lane_factor * lane_width

    def find_coordinate_following_road(
        self, node: int, road: ConnectedRoad, length: float
    ) -> Coordinate:
        """
        Point `length` meters down `road`, following same-named continuations.
        Falls back to the farthest point reached when the road cannot be followed.
        """
        reached = self.G.node_coordinate(node)
        remaining = length
        for current_node, eid in self._hopper.follow(
            node, road.eid, policy=NAME_ONLY, max_hops=self.cfg.max_lookahead_hops
        ):
            coordinates = self.coords.get_coordinates_along_road(
                current_node, eid, self.G.edge_data(eid).reversed, self.G.target(eid)
            )
            local_length = get_length(coordinates)
            if local_length >= remaining:
                return self.coords.trim_coordinates_to_length(coordinates, remaining)[-1]
            remaining -= local_length
            reached = coordinates[-1]
        return reached

    def have_same_direction(self, node: int, lhs: ConnectedRoad, rhs: ConnectedRoad) -> bool:
        lane_width = self.assumed_lane_width(self.G.edge_data(lhs.eid), self.G.edge_data(rhs.eid))
        distance = self.lookahead_distance(lane_width)

        to_left = self.find_coordinate_following_road(node, lhs, distance)
        to_right = self.find_coordinate_following_road(node, rhs, distance)
        center = self.G.node_coordinate(node)

        if self.recorder is not None:
            self.recorder.emit(
                CoordinateVectorToMultiPoint()(
                    [to_left, center, to_right], node=node, lhs=lhs.eid, rhs=rhs.eid
                )
            )
        return self.direction_check(to_left, center, to_right, lane_width)

    # --------------- Reconnection -----------------------------

    def find_meet_up_candidate(self, node: int, road: ConnectedRoad) -> int | None:
        """
        Follow `road` by name until an intersection offers that name at least
        twice (the other carriageway joins in). Returns that node, if any.
        """
        name_id = self.G.edge_data(road.eid).name_id
        current_node, eid = node, road.eid
        for _ in range(self.cfg.max_lookahead_hops):
            intersection = self.intersections.get_connected_roads(current_node, eid)
            named = [r for r in intersection[1:] if self.G.edge_data(r.eid).name_id == name_id]
            if len(named) >= 2:
                return self.G.target(eid)
            if not named:
                return None
            current_node, eid = self.G.target(eid), named[0].eid
        return None

    def connect_again(self, node: int, lhs: ConnectedRoad, rhs: ConnectedRoad) -> bool:
        """True if both roads run into each other again further down."""
        lhs_meet = self.find_meet_up_candidate(node, lhs)
        return lhs_meet is not None and lhs_meet == self.find_meet_up_candidate(node, rhs)
