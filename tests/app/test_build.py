# tests/app/test_build.py
import json
import math
import pickle

import pytest

from road_hopper.app.build import build
from road_hopper.domain.entities.graph import NodeBasedGraph
from road_hopper.domain.geometry.coordinate_calculation import EARTH_RADIUS_M
from road_hopper.runtime.resources import load_graph_from_path, save_graph_to_path


def _deg(m: float) -> float:
    return math.degrees(m / EARTH_RADIUS_M)


@pytest.fixture
def avenue():
    """
    Avenue 1 arriving from the south, splitting into a divided section
    (N -> A northbound, B -> N southbound) that rejoins at M, plus a side street.
    """
    g = NodeBasedGraph()
    n = g.add_node((0.0, 0.0))
    s = g.add_node((0.0, -_deg(100)))
    a = g.add_node((_deg(6), _deg(200)))
    b = g.add_node((-_deg(6), _deg(200)))
    m = g.add_node((0.0, _deg(220)))
    t = g.add_node((0.0, _deg(320)))
    x = g.add_node((_deg(80), -_deg(100)))
    from_south, _ = g.add_way(s, n, name_id=1)
    g.add_way(n, a, name_id=1, oneway=True)
    g.add_way(b, n, name_id=1, oneway=True)
    g.add_way(a, m, name_id=1, oneway=True)
    g.add_way(m, b, name_id=1, oneway=True)
    g.add_way(m, t, name_id=1)
    g.add_way(s, x, name_id=2)
    return g, s, n, from_south


def test_build_from_pickled_graph(tmp_path, avenue):
    g, s, n, from_south = avenue
    path = tmp_path / "avenue.pkl"
    save_graph_to_path(g, str(path))

    guidance = build({"run_id": "t", "graph": {"file": str(path)}}, use_logging=False)
    assert guidance.graph.num_nodes == g.num_nodes
    assert guidance.graph.num_edges == g.num_edges
    assert guidance.recorder is None

    roads = guidance.intersections.get_connected_roads(s, from_south)
    assert guidance.merger.can_merge(n, roads[1], roads[2])


def test_collect_coordinates(avenue):
    g, s, _, from_south = avenue
    guidance = build(graph=g, use_logging=False)
    acc = guidance.collect_coordinates(s, from_south, 150.0)
    assert abs(acc.coordinate_length - 150.0) < 1e-6
    assert acc.coordinates[0] == g.node_coordinate(s)


def test_missing_graph_is_an_error():
    with pytest.raises(ValueError):
        build(use_logging=False)


def test_loader_rejects_other_objects(tmp_path):
    path = tmp_path / "not_a_graph.pkl"
    path.write_bytes(pickle.dumps({"nodes": []}))
    with pytest.raises(ValueError):
        load_graph_from_path(str(path), "pickle")
    with pytest.raises(FileNotFoundError):
        load_graph_from_path(str(tmp_path / "missing.pkl"), "pickle")


def test_invalid_config_is_rejected(avenue):
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        build({"hopper": {"narrow_turn_angle": 0}}, graph=avenue[0], use_logging=False)


def test_debug_geojson_output(tmp_path, avenue):
    g, s, n, from_south = avenue
    out = tmp_path / "debug.geojson"
    guidance = build({"debug": {"geojson_path": str(out)}}, graph=g, use_logging=False)

    roads = guidance.intersections.get_connected_roads(s, from_south)
    guidance.merger.can_merge(n, roads[1], roads[2])
    guidance.print_intersection(s, from_south)
    guidance.close()

    features = json.loads(out.read_text())["features"]
    # one merge sample plus the intersection printout (node points + one line per road)
    assert len(features) == 1 + 1 + len(roads)
    assert features[0]["properties"] == {"node": n, "lhs": roads[1].eid, "rhs": roads[2].eid}
