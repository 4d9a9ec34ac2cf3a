# runtime/hooks.py
from typing import Protocol


class GuidanceHooks(Protocol):
    def walk_start(self, *, node, eid): ...
    def walk_end(self, *, node, eid, result, hops, reason): ...
    def merge_decision(self, *, node, lhs_eid, rhs_eid, merged, reason): ...


class NoopHooks:
    def walk_start(self, **_):
        pass

    def walk_end(self, **_):
        pass

    def merge_decision(self, **_):
        pass
