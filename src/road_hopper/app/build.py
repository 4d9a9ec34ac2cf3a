# road_hopper/app/build.py
from collections.abc import Mapping
from dataclasses import dataclass

from road_hopper.config.models import GuidanceModel
from road_hopper.domain.entities.graph import NodeBasedGraph
from road_hopper.domain.guidance.guidance_accumulators import LengthLimitedCoordinateAccumulator
from road_hopper.domain.guidance.guidance_coordinates import CoordinateExtractor
from road_hopper.domain.guidance.guidance_hopper import GraphHopper
from road_hopper.domain.guidance.guidance_intersections import IntersectionGenerator
from road_hopper.domain.guidance.guidance_mergeable import MergableRoadDetector
from road_hopper.io.geojson_policies import IntersectionPrinter
from road_hopper.io.guidance_logging import GuidanceLogging
from road_hopper.io.recorder import GeojsonFileSink, Recorder
from road_hopper.runtime.hooks import NoopHooks
from road_hopper.runtime.resources import load_graph_from_path


@dataclass
class Guidance:
    graph: NodeBasedGraph
    coordinates: CoordinateExtractor
    intersections: IntersectionGenerator
    hopper: GraphHopper
    merger: MergableRoadDetector
    recorder: Recorder | None = None

    def collect_coordinates(
        self, node: int, eid: int, max_length: float
    ) -> LengthLimitedCoordinateAccumulator:
        """Walk the road starting at `eid` and return the filled accumulator."""
        accumulator = LengthLimitedCoordinateAccumulator(self.coordinates, max_length)
        self.hopper.traverse_road(node, eid, accumulator)
        return accumulator

    def print_intersection(self, from_node: int, via_edge: int) -> None:
        if self.recorder is None:
            return
        printer = IntersectionPrinter(
            self.graph, self.coordinates, lookahead_m=self.intersections.lookahead_m
        )
        intersection = self.intersections.get_connected_roads(from_node, via_edge)
        for feature in printer(self.graph.target(via_edge), intersection):
            self.recorder.emit(feature)

    def close(self) -> None:
        if self.recorder is not None:
            self.recorder.close()


def build(
    cfg: GuidanceModel | Mapping | None = None,
    *,
    graph: NodeBasedGraph | None = None,
    use_logging: bool = True,
) -> Guidance:
    # 0) Validate config
    if cfg is None:
        model = GuidanceModel()
    else:
        model = cfg if isinstance(cfg, GuidanceModel) else GuidanceModel.model_validate(cfg)

    # 1) Graph: explicit instance wins over the configured file
    if graph is None:
        if model.graph is None:
            raise ValueError("No graph provided")
        graph = load_graph_from_path(model.graph.file, model.graph.fmt)

    # 2) Hooks & debug output
    hooks = (
        GuidanceLogging(
            run_id=model.run_id,
            level=model.log.level,
            debug=model.log.debug,
            sample_every=model.log.sample_every,
        )
        if use_logging
        else NoopHooks()
    )
    recorder = (
        Recorder(GeojsonFileSink(model.debug.geojson_path))
        if model.debug.geojson_path is not None
        else None
    )

    # 3) Collaborators (read-only over the frozen graph)
    coordinates = CoordinateExtractor(graph, sample_rate_m=model.coordinates.sample_rate_m)
    intersections = IntersectionGenerator(
        graph, coordinates, lookahead_m=model.coordinates.intersection_lookahead_m
    )

    # 4) Core
    hopper = GraphHopper(
        graph, intersections, narrow_turn_angle=model.hopper.narrow_turn_angle, hooks=hooks
    )
    merger = MergableRoadDetector(
        graph, intersections, coordinates, config=model.merge, hooks=hooks, recorder=recorder
    )
    return Guidance(graph, coordinates, intersections, hopper, merger, recorder)
