from dataclasses import dataclass


# Core geometry type shared by graph, sampler and debug output
@dataclass(frozen=True)
class Coordinate:
    lon: float  # decimal degrees, WGS84
    lat: float
