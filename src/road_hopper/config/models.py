import os
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = Field(default=1, ge=1)


class GraphByPath(BaseModel):
    model_config = ConfigDict(extra="forbid")
    by: Literal["path"] = "path"
    file: str
    fmt: Literal["pickle"] = "pickle"

    @field_validator("file")
    @classmethod
    def _expand(cls, v: str) -> str:
        return os.path.expandvars(os.path.expanduser(v))


# ----------------- COORDINATES ---------------------


class CoordinateModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    sample_rate_m: float | None = None  # None => keep the stored shape points
    intersection_lookahead_m: float = 10.0

    @field_validator("sample_rate_m", "intersection_lookahead_m")
    @classmethod
    def _positive(cls, v: float | None, info: ValidationInfo) -> float | None:
        if v is not None and v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v


# ----------------- HOPPER ---------------------


class HopperModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    narrow_turn_angle: float = Field(default=40.0, gt=0.0, lt=180.0)


# ----------------- MERGING ---------------------


class DirectionAngleModel(BaseModel):
    """Samples must lie in nearly the same direction seen from the intersection."""

    model_config = ConfigDict(extra="forbid")
    kind: Literal["angle"] = "angle"
    max_deviation_deg: float = Field(default=20.0, gt=0.0, lt=180.0)


class DirectionDistanceModel(BaseModel):
    """Samples must be closer than base_m + lane_factor * assumed road width."""

    model_config = ConfigDict(extra="forbid")
    kind: Literal["distance"] = "distance"
    base_m: float = Field(default=10.0, ge=0.0)
    lane_factor: float = Field(default=0.5, ge=0.0)


DirectionUnion = Annotated[
    DirectionAngleModel | DirectionDistanceModel,
    Field(discriminator="kind"),
]


class MergeModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    lane_width_m: float = Field(default=3.25, gt=0.0)
    lookahead_offset_m: float = Field(default=5.0, ge=0.0)
    lookahead_lane_factor: float = Field(default=4.0, gt=0.0)
    max_lookahead_hops: int = Field(default=10, ge=1)
    direction: DirectionUnion = Field(default_factory=DirectionAngleModel)
    max_turn_deviation_deg: float | None = 60.0  # None => no turn angle gate
    require_reconnect: bool = False

    @model_validator(mode="after")
    def _check_turn_deviation(self):
        d = self.max_turn_deviation_deg
        if d is not None and not (0.0 < d <= 180.0):
            raise ValueError(f"max_turn_deviation_deg must be in (0, 180], got {d}")
        return self


# ----------------- DEBUG ---------------------


class DebugModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    geojson_path: str | None = None  # None => no debug geometry

    @field_validator("geojson_path")
    @classmethod
    def _expand(cls, v: str | None) -> str | None:
        return None if v is None else os.path.expandvars(os.path.expanduser(v))


# ------------------------------------------------------------------


class GuidanceModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    run_id: str = "local"
    graph: GraphByPath | None = None
    log: LogModel = LogModel()
    coordinates: CoordinateModel = CoordinateModel()
    hopper: HopperModel = HopperModel()
    merge: MergeModel = MergeModel()
    debug: DebugModel = DebugModel()
