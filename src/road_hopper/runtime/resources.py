# road_hopper/runtime/resources.py
import pickle
from functools import lru_cache

from road_hopper.domain.entities.graph import NodeBasedGraph


@lru_cache(maxsize=8)
def load_graph_from_path(file: str, fmt: str) -> NodeBasedGraph:
    if fmt == "pickle":
        with open(file, "rb") as f:
            graph = pickle.load(f)
        if not isinstance(graph, NodeBasedGraph):
            raise ValueError(f"{file!r} does not hold a NodeBasedGraph (got {type(graph).__name__})")
        return graph
    raise ValueError(f"Unsupported graph fmt {fmt!r}")


def save_graph_to_path(graph: NodeBasedGraph, file: str) -> None:
    with open(file, "wb") as f:
        pickle.dump(graph, f)
