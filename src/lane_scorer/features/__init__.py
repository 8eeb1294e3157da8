"""Feature extraction for lane-sequence scoring."""

from lane_scorer.features.lane import LANE_FEATURE_SIZE, LaneFeatureExtractor
from lane_scorer.features.obstacle import (
    OBSTACLE_FEATURE_SIZE,
    MotionHistory,
    ObstacleFeatureExtractor,
)

__all__ = [
    "LANE_FEATURE_SIZE",
    "OBSTACLE_FEATURE_SIZE",
    "LaneFeatureExtractor",
    "MotionHistory",
    "ObstacleFeatureExtractor",
]
