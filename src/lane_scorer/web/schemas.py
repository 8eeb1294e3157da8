"""Pydantic request/response schemas for the scoring API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PositionIn(BaseModel):
    x: float
    y: float


class LaneRelationIn(BaseModel):
    angle_diff: float
    lane_l: float
    dist_to_left_boundary: float
    dist_to_right_boundary: float
    lane_turn_type: int = 1


class MotionSampleIn(BaseModel):
    timestamp: float | None = None
    heading: float | None = None
    speed: float = 0.0
    tracked_heading: float | None = None
    tracked_speed: float | None = None
    position: PositionIn | None = None
    lane: LaneRelationIn | None = None


class ObstacleIn(BaseModel):
    id: int
    samples: list[MotionSampleIn] = Field(default_factory=list)


class LanePointIn(BaseModel):
    position: PositionIn | None = None
    relative_l: float = 0.0
    heading: float = 0.0
    angle_diff: float = 0.0


class LaneSegmentIn(BaseModel):
    lane_id: str | None = None
    points: list[LanePointIn] = Field(default_factory=list)


class CandidateIn(BaseModel):
    sequence_id: int | None = None
    segments: list[LaneSegmentIn] = Field(default_factory=list)


class ScoreRequest(BaseModel):
    obstacle: ObstacleIn
    candidates: list[CandidateIn]


class CandidateScore(BaseModel):
    index: int
    sequence_id: int | None
    probability: float | None


class ScoreResponse(BaseModel):
    obstacle_id: int
    scores: list[CandidateScore]


class HealthResponse(BaseModel):
    status: str
    version: str
    model_loaded: bool
