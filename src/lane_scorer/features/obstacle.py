"""Obstacle motion-history features.

Summarises the recent history of one obstacle into a fixed-size vector that
does not depend on any candidate path:

  - heading-angle difference to the lane (filtered, mean, trend)
  - lateral lane offset (filtered, mean, trend)
  - mean speed
  - distance, rate of change and time-to-cross for both lane boundaries
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from lane_scorer.obstacle.models import LaneTurnType, ObstacleTrack

_logger = logging.getLogger(__name__)

OBSTACLE_FEATURE_SIZE = 14

_EPSILON = 1e-10

# Below this lateral speed (m/s) time-to-boundary uses the saturated estimate.
_MIN_LATERAL_SPEED = 0.05
_SATURATED_TIME_FACTOR = 20.0


# ---------------------------------------------------------------------------
# Math helpers
# ---------------------------------------------------------------------------

def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def _filtered(values: list[float]) -> float:
    """Average of the two newest values, or the single value."""
    if len(values) > 1:
        return (values[0] + values[1]) / 2.0
    return values[0]


def _rate(values: list[float], timestamps: list[float]) -> float:
    """Change per second between the newest and oldest value."""
    if len(values) < 2:
        return 0.0
    time_diff = timestamps[0] - timestamps[-1]
    if abs(time_diff) < _EPSILON:
        return 0.0
    return (values[0] - values[-1]) / time_diff


# ---------------------------------------------------------------------------
# History window
# ---------------------------------------------------------------------------

@dataclass
class MotionHistory:
    """Parallel arrays collected from the samples inside the history window.

    Index 0 is the newest qualifying sample.
    """

    thetas: list[float] = field(default_factory=list)
    lane_ls: list[float] = field(default_factory=list)
    dist_lbs: list[float] = field(default_factory=list)
    dist_rbs: list[float] = field(default_factory=list)
    lane_types: list[LaneTurnType] = field(default_factory=list)
    timestamps: list[float] = field(default_factory=list)
    speeds: list[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.timestamps)


class ObstacleFeatureExtractor:
    """Compute the obstacle-only part of the scoring feature vector.

    Args:
        history_window_s: Only samples at most this many seconds older than
            the newest sample are used.
        use_tracked_state: Use the tracker's filtered speed instead of the raw
            speed.
    """

    def __init__(self, history_window_s: float = 5.0, use_tracked_state: bool = False) -> None:
        if history_window_s < 0:
            raise ValueError("history_window_s must be >= 0")
        self.history_window_s = history_window_s
        self.use_tracked_state = use_tracked_state

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def summarize(self, track: ObstacleTrack) -> MotionHistory | None:
        """Collect the lane-matched samples within the history window.

        Returns ``None`` if no sample qualifies.
        """
        latest_ts = track.timestamp
        if latest_ts is None:
            return None
        cutoff = latest_ts - self.history_window_s

        history = MotionHistory()
        for sample in track.samples:
            if sample.timestamp is None:
                continue
            if sample.timestamp < cutoff - _EPSILON:
                break
            lane = sample.lane
            if lane is None:
                continue
            history.thetas.append(lane.angle_diff)
            history.lane_ls.append(lane.lane_l)
            history.dist_lbs.append(lane.dist_to_left_boundary)
            history.dist_rbs.append(lane.dist_to_right_boundary)
            history.lane_types.append(lane.lane_turn_type)
            history.timestamps.append(sample.timestamp)
            history.speeds.append(sample.speed_for(self.use_tracked_state))

        if not history:
            return None
        return history

    def extract(self, track: ObstacleTrack) -> list[float]:
        """Return ``OBSTACLE_FEATURE_SIZE`` values, or ``[]`` on insufficient data."""
        history = self.summarize(track)
        if history is None:
            _logger.debug("Obstacle [%d] has no lane-matched history.", track.id)
            return []
        return self._feature_values(history)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _feature_values(self, h: MotionHistory) -> list[float]:
        theta_mean = _mean(h.thetas)
        theta_filtered = _filtered(h.thetas)
        theta_delta = h.thetas[0] - h.thetas[1] if len(h.thetas) > 1 else h.thetas[0]
        lane_l_mean = _mean(h.lane_ls)
        lane_l_filtered = _filtered(h.lane_ls)
        speed_mean = _mean(h.speeds)

        speed_lateral = math.sin(theta_filtered) * speed_mean
        speed_sign = 1.0 if speed_lateral > 0 else -1.0
        if abs(speed_lateral) > _MIN_LATERAL_SPEED:
            time_to_lb = h.dist_lbs[0] / speed_lateral
            time_to_rb = -h.dist_rbs[0] / speed_lateral
        else:
            time_to_lb = _SATURATED_TIME_FACTOR * h.dist_lbs[0] * speed_sign
            time_to_rb = -_SATURATED_TIME_FACTOR * h.dist_rbs[0] * speed_sign

        return [
            theta_filtered,
            theta_mean,
            theta_filtered - theta_mean,
            theta_delta,
            lane_l_filtered,
            lane_l_mean,
            lane_l_filtered - lane_l_mean,
            speed_mean,
            h.dist_lbs[0],
            _rate(h.dist_lbs, h.timestamps),
            time_to_lb,
            h.dist_rbs[0],
            _rate(h.dist_rbs, h.timestamps),
            time_to_rb,
        ]
