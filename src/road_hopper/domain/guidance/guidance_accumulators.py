from road_hopper.app.protocols import Accumulator, CoordinateSampler
from road_hopper.domain.entities.geography import Coordinate
from road_hopper.domain.entities.graph import EdgeData
from road_hopper.domain.geometry.coordinate_calculation import get_length


class LengthLimitedCoordinateAccumulator(Accumulator):
    """
    Collects the road geometry up to `max_length` meters.

    `accumulated_length` tracks the full length of every traversed edge and
    drives termination; `coordinates` holds the geometry trimmed to land
    exactly on `max_length`.
    """

    def __init__(self, coordinate_extractor: CoordinateSampler, max_length: float):
        if max_length < 0:
            raise ValueError(f"max_length must be >= 0, got {max_length}")
        self.coords, self.max_length = coordinate_extractor, max_length
        self.accumulated_length = 0.0
        self.coordinates: list[Coordinate] = []

    def terminate(self) -> bool:
        return self.accumulated_length >= self.max_length

    def update(self, from_node: int, via_edge: int, to_node: int, edge_data: EdgeData) -> None:
        current = self.coords.get_coordinates_along_road(
            from_node, via_edge, edge_data.reversed, to_node
        )
        length = get_length(current)

        if length + self.accumulated_length > self.max_length:
            current = self.coords.trim_coordinates_to_length(
                current, self.max_length - self.accumulated_length
            )

        # consecutive edges share their joint vertex
        if self.coordinates and current and self.coordinates[-1] == current[0]:
            current = current[1:]
        self.coordinates.extend(current)
        self.accumulated_length += length

    @property
    def coordinate_length(self) -> float:
        return get_length(self.coordinates)


class NodeIdAccumulator(Accumulator):
    """Records the nodes passed by a walk, stopping after `max_hops` edges."""

    def __init__(self, max_hops: int):
        self.max_hops = max_hops
        self.nodes: list[int] = []
        self.edges: list[int] = []

    def terminate(self) -> bool:
        return len(self.edges) >= self.max_hops

    def update(self, from_node: int, via_edge: int, to_node: int, edge_data: EdgeData) -> None:
        if not self.nodes:
            self.nodes.append(from_node)
        self.nodes.append(to_node)
        self.edges.append(via_edge)
