# tests/io/test_geojson_debug.py
import json
import logging
import math
import threading

import pytest

from road_hopper.domain.entities.geography import Coordinate
from road_hopper.domain.entities.graph import NodeBasedGraph
from road_hopper.domain.geometry.coordinate_calculation import EARTH_RADIUS_M
from road_hopper.domain.guidance.guidance_coordinates import CoordinateExtractor
from road_hopper.domain.guidance.guidance_intersections import IntersectionGenerator
from road_hopper.io.geojson_policies import (
    CoordinateVectorToLineString,
    IntersectionPrinter,
    NodeIdVectorToLineString,
    NodeIdVectorToMultiPoint,
)
from road_hopper.io.recorder import GeojsonFileSink, MemorySink, Recorder


def _deg(m: float) -> float:
    return math.degrees(m / EARTH_RADIUS_M)


@pytest.fixture
def tee():
    """S -> C with two branches leaving C to the east and the north."""
    g = NodeBasedGraph()
    c = g.add_node((0.0, 0.0))
    s = g.add_node((0.0, -_deg(50)))
    e = g.add_node((_deg(50), 0.0))
    n = g.add_node((0.0, _deg(50)))
    from_south, _ = g.add_way(s, c, name_id=1)
    g.add_way(c, e, name_id=2)
    g.add_way(c, n, name_id=1)
    return g, s, c, from_south


# ---------- Policies


def test_coordinate_policy_keeps_lon_lat_order():
    f = CoordinateVectorToLineString()([Coordinate(1.0, 2.0), Coordinate(3.0, 4.0)], eid=7)
    assert f["type"] == "Feature"
    assert f["properties"] == {"eid": 7}
    assert f["geometry"]["type"] == "LineString"
    assert [list(p) for p in f["geometry"]["coordinates"]] == [[1.0, 2.0], [3.0, 4.0]]


def test_node_id_policies_look_up_coordinates(tee):
    g, s, c, _ = tee
    line = NodeIdVectorToLineString(g)([s, c])
    points = NodeIdVectorToMultiPoint(g)([s, c], run="x")
    assert line["geometry"]["type"] == "LineString"
    assert points["geometry"]["type"] == "MultiPoint"
    assert points["properties"] == {"run": "x"}
    assert tuple(line["geometry"]["coordinates"][0]) == (0.0, -_deg(50))


def test_intersection_printer(tee):
    g, s, c, from_south = tee
    coords = CoordinateExtractor(g)
    roads = IntersectionGenerator(g, coords).get_connected_roads(s, from_south)
    features = IntersectionPrinter(g, coords)(c, roads)

    assert len(features) == 1 + len(roads)
    assert features[0]["geometry"]["type"] == "MultiPoint"
    assert len(features[0]["geometry"]["coordinates"]) == 1 + len(roads)
    assert [f["properties"]["eid"] for f in features[1:]] == [r.eid for r in roads]
    assert all(f["geometry"]["type"] == "LineString" for f in features[1:])
    assert features[1]["properties"]["angle"] == 0.0


# ---------- Sinks


def test_file_sink_is_valid_geojson_under_threads(tmp_path):
    path = tmp_path / "debug.geojson"
    sink = GeojsonFileSink(str(path))
    policy = CoordinateVectorToLineString()

    def work(k):
        for i in range(100):
            sink.write(policy([Coordinate(0.0, 0.0), Coordinate(k, i)], worker=k, i=i))

    threads = [threading.Thread(target=work, args=(k,)) for k in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    sink.close()

    data = json.loads(path.read_text())
    assert data["type"] == "FeatureCollection"
    assert len(data["features"]) == 400
    assert {f["properties"]["worker"] for f in data["features"]} == {0, 1, 2, 3}


def test_file_sink_without_features_creates_nothing(tmp_path):
    path = tmp_path / "unused.geojson"
    with GeojsonFileSink(str(path)):
        pass
    assert not path.exists()


def test_file_sink_rejects_writes_after_close(tmp_path):
    sink = GeojsonFileSink(str(tmp_path / "x.geojson"))
    sink.close()
    with pytest.raises(RuntimeError):
        sink.write({"type": "Feature"})


class _BrokenSink:
    def write(self, feature):
        raise OSError("disk full")


def test_recorder_survives_failing_sink(caplog):
    good = MemorySink()
    rec = Recorder(_BrokenSink(), good)
    with caplog.at_level(logging.WARNING, logger="road_hopper.debug"):
        rec.emit({"type": "Feature", "properties": {}, "geometry": None})
    assert len(good.features) == 1
    assert any("failed" in r.getMessage() for r in caplog.records)
    assert good.feature_collection()["features"] == good.features
    rec.close()
