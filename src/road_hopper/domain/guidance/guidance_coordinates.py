import math
from collections.abc import Sequence

from road_hopper.app.protocols import CoordinateSampler
from road_hopper.domain.entities.geography import Coordinate
from road_hopper.domain.entities.graph import NodeBasedGraph
from road_hopper.domain.geometry.coordinate_calculation import (
    interpolate_linear,
    segment_lengths,
)


class CoordinateExtractor(CoordinateSampler):
    """
    Geometry sampler on top of a NodeBasedGraph.

    Ways keep a single shape in digitization order; edges flagged `reversed`
    read it backwards. With `sample_rate_m` set, shapes are densified so that
    consecutive points are at most that far apart.
    """

    def __init__(self, graph: NodeBasedGraph, *, sample_rate_m: float | None = None):
        if sample_rate_m is not None and sample_rate_m <= 0:
            raise ValueError(f"sample_rate_m must be > 0, got {sample_rate_m}")
        self.G, self.sample_rate_m = graph, sample_rate_m

    def get_coordinates_along_road(
        self, from_node: int, via_edge: int, reversed: bool, to_node: int
    ) -> list[Coordinate]:
        assert self.G.target(via_edge) == to_node, f"edge {via_edge} does not reach {to_node}"
        coordinates = self.G.edge_geometry(via_edge)
        if reversed:
            coordinates.reverse()
        assert coordinates[0] == self.G.node_coordinate(from_node)
        if self.sample_rate_m is not None:
            coordinates = self.sample_coordinates(coordinates, self.sample_rate_m)
        return coordinates

    def get_coordinate_along_road(
        self, from_node: int, via_edge: int, reversed: bool, to_node: int, distance: float
    ) -> Coordinate:
        coordinates = self.get_coordinates_along_road(from_node, via_edge, reversed, to_node)
        return self.trim_coordinates_to_length(coordinates, distance)[-1]

    @staticmethod
    def trim_coordinates_to_length(
        coordinates: Sequence[Coordinate], length: float
    ) -> list[Coordinate]:
        if not coordinates:
            return []
        if length <= 0:
            return [coordinates[0]]

        trimmed = [coordinates[0]]
        remaining = length
        for (a, b), seg in zip(
            zip(coordinates, coordinates[1:], strict=False), segment_lengths(coordinates)
        ):
            if seg >= remaining:
                trimmed.append(interpolate_linear(a, b, remaining / seg))
                return trimmed
            trimmed.append(b)
            remaining -= seg
        return trimmed

    @staticmethod
    def sample_coordinates(coordinates: Sequence[Coordinate], rate: float) -> list[Coordinate]:
        if len(coordinates) < 2:
            return list(coordinates)
        out = [coordinates[0]]
        for (a, b), seg in zip(
            zip(coordinates, coordinates[1:], strict=False), segment_lengths(coordinates)
        ):
            # tolerate rounding so that exact multiples do not gain a step
            steps = max(1, math.ceil(seg / rate - 1e-9))
            for k in range(1, steps):
                out.append(interpolate_linear(a, b, k / steps))
            out.append(b)
        return out
