from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from road_hopper.domain.entities.geography import Coordinate
from road_hopper.domain.entities.graph import EdgeData, Intersection


# ------------- Collaborators --------------------
@runtime_checkable
class BaseGraph(Protocol):
    """
    Read-only view of the node based graph.
    Must stay frozen while walks or merge checks run against it.
    """

    def target(self, eid: int) -> int: ...
    def edge_data(self, eid: int) -> EdgeData: ...
    def node_coordinate(self, node: int) -> Coordinate: ...


@runtime_checkable
class IntersectionSource(Protocol):
    """
    Responsibilities:
      • Enumerate the roads reachable from `via_edge` at its target node.
      • Entry 0 is the u-turn, the rest are ordered by angle.
      • Never applies merging/adjustment (hoppers call this from inside adjustments).
    """

    def get_connected_roads(self, from_node: int, via_edge: int) -> Intersection: ...


@runtime_checkable
class CoordinateSampler(Protocol):
    """
    Responsibilities:
      • Provide the geometry of an edge in travel direction.
      • Trim polylines to an exact great-circle length.
    Units: meters for all lengths.
    """

    def get_coordinates_along_road(
        self, from_node: int, via_edge: int, reversed: bool, to_node: int
    ) -> list[Coordinate]: ...
    def trim_coordinates_to_length(
        self, coordinates: Sequence[Coordinate], length: float
    ) -> list[Coordinate]: ...


# ------------- Traversal --------------------
@runtime_checkable
class Accumulator(Protocol):
    """
    Strategy plugged into GraphHopper.traverse_road.
    `update` only mutates the accumulator's own state.
    """

    def terminate(self) -> bool: ...
    def update(self, from_node: int, via_edge: int, to_node: int, edge_data: EdgeData) -> None: ...
