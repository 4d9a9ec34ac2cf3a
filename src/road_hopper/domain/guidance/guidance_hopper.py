from collections.abc import Iterator
from dataclasses import dataclass

from road_hopper.app.protocols import Accumulator, BaseGraph, IntersectionSource
from road_hopper.domain.entities.graph import ConnectedRoad, Intersection
from road_hopper.domain.geometry.coordinate_calculation import angular_deviation
from road_hopper.runtime.hooks import GuidanceHooks, NoopHooks

STRAIGHT_ANGLE = 180.0
NARROW_TURN_ANGLE = 40.0


@dataclass(frozen=True)
class ContinuationPolicy:
    """
    How to pick the next edge of "the same road" at an intersection.

    With `narrow_turn_angle` set, a same-name candidate must also be within
    that deviation from straight on. `straightmost_fallback` allows taking the
    straightmost road when no unique same-name candidate exists.
    """

    narrow_turn_angle: float | None = NARROW_TURN_ANGLE
    straightmost_fallback: bool = True

    def __post_init__(self):
        if self.straightmost_fallback and self.narrow_turn_angle is None:
            raise ValueError("straightmost_fallback requires a narrow_turn_angle")

    def _continues(self, road: ConnectedRoad, name_id, graph: BaseGraph) -> bool:
        if graph.edge_data(road.eid).name_id != name_id:
            return False
        return (
            self.narrow_turn_angle is None
            or angular_deviation(road.angle, STRAIGHT_ANGLE) < self.narrow_turn_angle
        )

    def select(
        self, intersection: Intersection, name_id, graph: BaseGraph
    ) -> ConnectedRoad | None:
        if len(intersection) == 2:
            return intersection[1]

        matches = [road for road in intersection[1:] if self._continues(road, name_id, graph)]
        if len(matches) == 1:
            return matches[0]
        if not self.straightmost_fallback:
            return None

        straightmost = intersection.find_closest_turn(STRAIGHT_ANGLE)
        if (
            straightmost is not None
            and angular_deviation(straightmost.angle, STRAIGHT_ANGLE) < self.narrow_turn_angle
        ):
            return straightmost
        return None


# Lookahead used by the merge checks: same name only, never guess
NAME_ONLY = ContinuationPolicy(narrow_turn_angle=None, straightmost_fallback=False)


class RoadFollower:
    """
    Iterates (node, eid) pairs along one road, starting with the given pair.

    Stops after the last edge when the road dead-ends, returns to its start
    node, becomes ambiguous or `max_hops` intersections have been passed.
    `stop_reason` and `hops` are filled in as iteration proceeds.
    """

    def __init__(
        self,
        graph: BaseGraph,
        intersections: IntersectionSource,
        node: int,
        eid: int,
        policy: ContinuationPolicy,
        max_hops: int | None = None,
    ):
        self.G, self.intersections = graph, intersections
        self.start, self.policy, self.max_hops = (node, eid), policy, max_hops
        self.stop_reason: str | None = None
        self.hops = 0

    def __iter__(self) -> Iterator[tuple[int, int]]:
        node, eid = self.start
        stop_node = node
        # captured once: renamed continuations never extend the road
        name_id = self.G.edge_data(eid).name_id
        while True:
            yield node, eid

            if self.max_hops is not None and self.hops >= self.max_hops:
                self.stop_reason = "hop_limit"
                return

            # unadjusted on purpose, adjustments may themselves hop the graph
            intersection = self.intersections.get_connected_roads(node, eid)
            assert len(intersection) >= 1, f"empty intersection behind edge {eid}"

            to_node = self.G.target(eid)
            if intersection.is_dead_end:
                self.stop_reason = "dead_end"
                return
            if to_node == stop_node:
                self.stop_reason = "loop"
                return

            next_road = self.policy.select(intersection, name_id, self.G)
            if next_road is None:
                self.stop_reason = "ambiguous"
                return
            node, eid = to_node, next_road.eid
            self.hops += 1


class GraphHopper:
    """Finds intersections along a road, feeding every traversed edge to an accumulator."""

    def __init__(
        self,
        graph: BaseGraph,
        intersection_generator: IntersectionSource,
        *,
        narrow_turn_angle: float = NARROW_TURN_ANGLE,
        hooks: GuidanceHooks | None = None,
    ):
        self.G, self.intersections = graph, intersection_generator
        self.policy = ContinuationPolicy(narrow_turn_angle=narrow_turn_angle)
        self._hooks = hooks or NoopHooks()

    def follow(
        self,
        node: int,
        eid: int,
        *,
        policy: ContinuationPolicy | None = None,
        max_hops: int | None = None,
    ) -> RoadFollower:
        return RoadFollower(self.G, self.intersections, node, eid, policy or self.policy, max_hops)

    def traverse_road(
        self, node: int, eid: int, accumulator: Accumulator
    ) -> tuple[int, int] | None:
        """
        Walk from `eid` (leaving `node`) until the accumulator terminates.
        Returns the (node, eid) reached at that point, or None when the road
        ended, looped or became ambiguous first.
        """
        self._hooks.walk_start(node=node, eid=eid)
        follower = self.follow(node, eid)
        for current_node, current_eid in follower:
            if accumulator.terminate():
                result = (current_node, current_eid)
                self._hooks.walk_end(
                    node=node, eid=eid, result=result, hops=follower.hops, reason="terminated"
                )
                return result
            accumulator.update(
                current_node,
                current_eid,
                self.G.target(current_eid),
                self.G.edge_data(current_eid),
            )
        self._hooks.walk_end(
            node=node, eid=eid, result=None, hops=follower.hops, reason=follower.stop_reason
        )
        return None
