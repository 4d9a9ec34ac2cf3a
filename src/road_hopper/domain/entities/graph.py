from dataclasses import dataclass, field
from enum import Enum

from road_hopper.domain.entities.geography import Coordinate
from road_hopper.domain.geometry.coordinate_calculation import angular_deviation

# Unnamed roads carry no name id
EMPTY_NAMEID = None


class TravelMode(Enum):
    INACCESSIBLE = "inaccessible"
    DRIVING = "driving"
    CYCLING = "cycling"
    WALKING = "walking"
    FERRY = "ferry"
    TRAIN = "train"


@dataclass(frozen=True)
class RoadClassification:
    priority: str = "primary"
    num_lanes: int = 0  # 0 => unknown


@dataclass(frozen=True)
class EdgeData:
    name_id: int | None = EMPTY_NAMEID
    reversed: bool = False  # runs against the way's digitization direction
    travel_mode: TravelMode = TravelMode.DRIVING
    road_classification: RoadClassification = field(default_factory=RoadClassification)
    roundabout: bool = False


@dataclass(frozen=True)
class ConnectedRoad:
    eid: int
    angle: float  # 0 => u-turn, 180 => straight, 90 => right, 270 => left
    entry_allowed: bool = True


class Intersection(list):
    """Roads reachable from one incoming edge. Entry 0 is always the u-turn."""

    def find_closest_turn(self, angle: float) -> ConnectedRoad | None:
        candidates = self[1:]
        if not candidates:
            return None
        return min(candidates, key=lambda road: angular_deviation(road.angle, angle))

    @property
    def is_dead_end(self) -> bool:
        return len(self) <= 1


@dataclass
class _Edge:
    source: int
    target: int
    data: EdgeData
    geometry_id: int
    traversable: bool
    twin: int


class NodeBasedGraph:
    """
    In-memory node based graph.

    Every way is stored as two directed edges sharing one geometry. The forward
    edge follows the digitization direction, the backward one is flagged
    `reversed` and is not traversable for oneways.
    """

    def __init__(self):
        self._coordinates: list[Coordinate] = []
        self._edges: list[_Edge] = []
        self._geometries: list[list[Coordinate]] = []
        self._out: list[list[int]] = []

    # ------------- construction --------------------

    def add_node(self, coordinate: Coordinate | tuple[float, float]) -> int:
        if not isinstance(coordinate, Coordinate):
            coordinate = Coordinate(float(coordinate[0]), float(coordinate[1]))
        self._coordinates.append(coordinate)
        self._out.append([])
        return len(self._coordinates) - 1

    def add_way(
        self,
        u: int,
        v: int,
        *,
        name_id: int | None = EMPTY_NAMEID,
        oneway: bool = False,
        geometry: list[Coordinate] | None = None,
        travel_mode: TravelMode = TravelMode.DRIVING,
        road_classification: RoadClassification | None = None,
        roundabout: bool = False,
    ) -> tuple[int, int]:
        """Add a way from u to v. `geometry` holds the interior shape points only."""
        if u == v:
            raise ValueError(f"way must connect two distinct nodes, got {u} twice")
        shape = [self._coordinates[u], *(geometry or []), self._coordinates[v]]
        self._geometries.append(shape)
        gid = len(self._geometries) - 1

        classification = road_classification or RoadClassification()
        fwd, bwd = len(self._edges), len(self._edges) + 1
        for eid, (a, b, rev) in ((fwd, (u, v, False)), (bwd, (v, u, True))):
            data = EdgeData(
                name_id=name_id,
                reversed=rev,
                travel_mode=travel_mode,
                road_classification=classification,
                roundabout=roundabout,
            )
            self._edges.append(
                _Edge(
                    source=a,
                    target=b,
                    data=data,
                    geometry_id=gid,
                    traversable=not (rev and oneway),
                    twin=bwd if eid == fwd else fwd,
                )
            )
            self._out[a].append(eid)
        return fwd, bwd

    # ------------- queries --------------------

    @property
    def num_nodes(self) -> int:
        return len(self._coordinates)

    @property
    def num_edges(self) -> int:
        return len(self._edges)

    def target(self, eid: int) -> int:
        return self._edges[eid].target

    def source(self, eid: int) -> int:
        return self._edges[eid].source

    def edge_data(self, eid: int) -> EdgeData:
        return self._edges[eid].data

    def twin(self, eid: int) -> int:
        return self._edges[eid].twin

    def traversable(self, eid: int) -> bool:
        return self._edges[eid].traversable

    def out_edges(self, node: int) -> tuple[int, ...]:
        return tuple(self._out[node])

    def node_coordinate(self, node: int) -> Coordinate:
        return self._coordinates[node]

    def edge_geometry(self, eid: int) -> list[Coordinate]:
        """Shape of the underlying way in digitization order."""
        return list(self._geometries[self._edges[eid].geometry_id])
