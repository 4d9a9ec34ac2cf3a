# tests/io/test_guidance_logging.py
import json
import logging

from road_hopper.io.guidance_logging import GuidanceLogging, _default_json_logger


def _records(caplog, msg):
    return [r for r in caplog.records if r.getMessage() == msg]


def test_failed_walks_are_reported(caplog):
    log = GuidanceLogging(run_id="t1", logger=logging.getLogger("road_hopper.test.walks"))
    with caplog.at_level(logging.DEBUG, logger="road_hopper.test.walks"):
        log.walk_start(node=1, eid=2)
        log.walk_end(node=1, eid=2, result=None, hops=3, reason="loop")
        log.walk_end(node=1, eid=2, result=(4, 5), hops=1, reason="terminated")

    (end,) = _records(caplog, "walk_end")
    assert end.levelno == logging.INFO
    assert end.extra == {
        "run_id": "t1",
        "node": 1,
        "eid": 2,
        "result": None,
        "hops": 3,
        "reason": "loop",
    }
    assert not _records(caplog, "walk_start")


def test_debug_mode_samples_walk_starts(caplog):
    log = GuidanceLogging(
        debug=True, sample_every=2, logger=logging.getLogger("road_hopper.test.sampled")
    )
    with caplog.at_level(logging.DEBUG, logger="road_hopper.test.sampled"):
        for eid in range(5):
            log.walk_start(node=0, eid=eid)
        log.walk_end(node=0, eid=0, result=(4, 5), hops=1, reason="terminated")

    assert [r.extra["eid"] for r in _records(caplog, "walk_start")] == [1, 3]
    (end,) = _records(caplog, "walk_end")
    assert end.levelno == logging.DEBUG
    assert end.extra["result"] == [4, 5]


def test_merge_decisions_are_counted(caplog):
    log = GuidanceLogging(logger=logging.getLogger("road_hopper.test.merges"))
    with caplog.at_level(logging.DEBUG, logger="road_hopper.test.merges"):
        log.merge_decision(node=3, lhs_eid=1, rhs_eid=2, merged=True, reason="merged")
        log.merge_decision(node=3, lhs_eid=1, rhs_eid=4, merged=False, reason="direction")
        log.merge_decision(node=5, lhs_eid=6, rhs_eid=7, merged=False, reason="incompatible")

    assert log.merges == {"merged": 1, "rejected": 2}
    levels = [r.levelno for r in _records(caplog, "merge_decision")]
    assert levels == [logging.INFO, logging.DEBUG, logging.DEBUG]


def test_default_logger_writes_json_lines(capsys):
    logger = _default_json_logger(name="road_hopper.test.json", level="INFO")
    logger.info("hello", extra={"extra": {"run_id": "r", "node": 7}})
    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload.pop("ts")
    assert payload == {
        "level": "INFO",
        "msg": "hello",
        "logger": "road_hopper.test.json",
        "run_id": "r",
        "node": 7,
    }
