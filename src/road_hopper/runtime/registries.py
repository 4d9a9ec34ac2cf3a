# runtime/registries.py
from collections.abc import Callable

from road_hopper.config.models import (
    DirectionAngleModel,
    DirectionDistanceModel,
    DirectionUnion,
)
from road_hopper.domain.entities.geography import Coordinate
from road_hopper.domain.geometry.coordinate_calculation import (
    angular_deviation,
    bearing,
    haversine_distance,
)

# (left_sample, intersection, right_sample, assumed_lane_width) -> same road?
DirectionCheck = Callable[[Coordinate, Coordinate, Coordinate, float], bool]
DirectionFactory = Callable[[DirectionUnion], DirectionCheck]

_direction_registry: dict[str, DirectionFactory] = {}


# ------------------- Direction checks ---------------------------


def register_direction_check(kind: str):
    def deco(fn: DirectionFactory):
        _direction_registry[kind] = fn
        return fn

    return deco


def make_direction_check(cfg: DirectionUnion) -> DirectionCheck:
    try:
        factory = _direction_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown direction check kind {cfg.kind!r}") from None
    return factory(cfg)


@register_direction_check("angle")
def _make_angle(cfg: DirectionAngleModel) -> DirectionCheck:
    def check(left: Coordinate, node: Coordinate, right: Coordinate, lane_width: float) -> bool:
        # parallel carriageways leave the node in (nearly) the same direction
        spread = angular_deviation(bearing(node, left), bearing(node, right))
        return spread < cfg.max_deviation_deg

    return check


@register_direction_check("distance")
def _make_distance(cfg: DirectionDistanceModel) -> DirectionCheck:
    def check(left: Coordinate, node: Coordinate, right: Coordinate, lane_width: float) -> bool:
        threshold = cfg.base_m + cfg.lane_factor * lane_width
        return haversine_distance(left, right) < threshold

    return check
