"""Obstacle motion history."""

from lane_scorer.obstacle.models import (
    LaneRelation,
    LaneTurnType,
    MotionSample,
    ObstacleTrack,
    Point2D,
)

__all__ = ["LaneRelation", "LaneTurnType", "MotionSample", "ObstacleTrack", "Point2D"]
