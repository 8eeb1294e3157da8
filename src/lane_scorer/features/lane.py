"""Per-candidate lane geometry features."""

from __future__ import annotations

import logging
import math

from lane_scorer.lane.models import LaneSequenceCandidate
from lane_scorer.obstacle.models import MotionSample, ObstacleTrack

_logger = logging.getLogger(__name__)

LANE_FEATURE_SIZE = 40

_TUPLE_SIZE = 4


class LaneFeatureExtractor:
    """Describe a candidate path relative to the obstacle's current pose.

    Each lane point contributes four values: the sine of the bearing to the
    point relative to the obstacle heading, the point's lateral offset, its
    heading and its angle difference to the path tangent.  Long candidates are
    truncated to *feature_size*; short ones are padded by repeating the last
    four values.

    Args:
        feature_size: Length budget of the output vector.  Must be a positive
            multiple of 4.
        use_tracked_state: Use the tracker's filtered heading instead of the
            raw heading.
    """

    def __init__(
        self,
        feature_size: int = LANE_FEATURE_SIZE,
        use_tracked_state: bool = False,
    ) -> None:
        if feature_size <= 0 or feature_size % _TUPLE_SIZE:
            raise ValueError(f"feature_size must be a positive multiple of 4, got {feature_size}")
        self.feature_size = feature_size
        self.use_tracked_state = use_tracked_state

    def extract(
        self,
        obstacle: ObstacleTrack | MotionSample,
        candidate: LaneSequenceCandidate,
    ) -> list[float]:
        """Return ``feature_size`` values, or ``[]`` if the pose or geometry is missing.

        Args:
            obstacle: The obstacle track (its newest sample is used) or the
                newest sample itself.
            candidate: The lane sequence to describe.
        """
        if isinstance(obstacle, ObstacleTrack):
            sample = obstacle.latest
            label = obstacle.id
        else:
            sample = obstacle
            label = "?"

        if sample is None:
            _logger.debug("Obstacle [%s] has no latest sample.", label)
            return []
        if sample.position is None:
            _logger.debug("Obstacle [%s] has no position.", label)
            return []
        heading = sample.heading_for(self.use_tracked_state)
        if heading is None:
            _logger.debug("Obstacle [%s] has no heading.", label)
            return []

        values: list[float] = []
        for point in candidate.iter_points():
            if len(values) >= self.feature_size:
                break
            if point.position is None:
                _logger.debug("Lane point has no position.")
                continue
            diff_x = point.position.x - sample.position.x
            diff_y = point.position.y - sample.position.y
            # Bearing measured from the y axis, matching the heading convention.
            angle = math.atan2(diff_x, diff_y)
            values.extend((
                math.sin(angle - heading),
                point.relative_l,
                point.heading,
                point.angle_diff,
            ))

        if not values:
            _logger.debug("Obstacle [%s] candidate has no positioned lane points.", label)
            return []

        last = values[-_TUPLE_SIZE:]
        while len(values) < self.feature_size:
            values.extend(last)
        return values
