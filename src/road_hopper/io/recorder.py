# io/recorder.py
import json
import logging
import threading
from typing import Protocol

logger = logging.getLogger("road_hopper.debug")


class Sink(Protocol):
    def write(self, feature: dict) -> None: ...


class MemorySink:
    def __init__(self):
        self.features: list[dict] = []

    def write(self, feature: dict) -> None:
        self.features.append(feature)

    def feature_collection(self) -> dict:
        return {"type": "FeatureCollection", "features": list(self.features)}


class GeojsonFileSink:
    """
    Streams features into one FeatureCollection file.

    The file is opened on the first write and completed by `close()`.
    Writes from several threads are serialized by a single lock.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._fp = None
        self._first = True
        self._closed = False

    def write(self, feature: dict) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError(f"sink for {self.path} is closed")
            if self._fp is None:
                self._fp = open(self.path, "w", encoding="utf-8")
                self._fp.write('{"type": "FeatureCollection", "features": [\n')
            if not self._first:
                self._fp.write(",\n")
            self._fp.write(json.dumps(feature))
            self._first = False

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._fp is None:
                return
            self._fp.write("\n]}\n")
            self._fp.close()
            self._fp = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class Recorder:
    """Fans debug features out to every sink; a failing sink never breaks guidance."""

    def __init__(self, *sinks: Sink):
        self.sinks = sinks

    def emit(self, feature: dict) -> None:
        for s in self.sinks:
            try:
                s.write(feature)
            except Exception:
                logger.warning("debug sink %r failed", s, exc_info=True)

    def close(self) -> None:
        for s in self.sinks:
            close = getattr(s, "close", None)
            if close is not None:
                close()
