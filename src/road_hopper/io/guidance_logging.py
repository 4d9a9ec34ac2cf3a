# io/guidance_logging.py
import json
import logging
import sys

from road_hopper.runtime.hooks import NoopHooks


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; structured fields travel in `extra={"extra": {...}}`."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            payload.update(fields)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _default_json_logger(name="road_hopper", level="INFO"):
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonLineFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


class GuidanceLogging(NoopHooks):
    """
    Structured logs for road walks and merge decisions.
    Walk starts are DEBUG only and sampled; outcomes are always reported.
    """

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        sample_every: int = 1000,
        logger: logging.Logger | None = None,
    ):
        self.run_id, self.debug, self.sample_every = run_id, debug, max(1, sample_every)
        self.log = logger or _default_json_logger(level=level)
        self._walks = 0
        self.merges = {"merged": 0, "rejected": 0}

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        self.log.log(getattr(logging, level), msg, extra={"extra": {"run_id": self.run_id, **extra}})

    # --------------------------------------------------------

    def walk_start(self, *, node, eid):
        self._walks += 1
        if self.debug and (self._walks % self.sample_every) == 0:
            self._emit("DEBUG", "walk_start", node=node, eid=eid, walks=self._walks)

    def walk_end(self, *, node, eid, result, hops, reason):
        level = "DEBUG" if result is not None else "INFO"
        if level == "INFO" or self.debug:
            self._emit(
                level,
                "walk_end",
                node=node,
                eid=eid,
                result=list(result) if result is not None else None,
                hops=hops,
                reason=reason,
            )

    def merge_decision(self, *, node, lhs_eid, rhs_eid, merged, reason):
        self.merges["merged" if merged else "rejected"] += 1
        self._emit(
            "INFO" if merged else "DEBUG",
            "merge_decision",
            node=node,
            lhs_eid=lhs_eid,
            rhs_eid=rhs_eid,
            merged=merged,
            reason=reason,
        )
