"""Obstacle motion-history data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class LaneTurnType(IntEnum):
    """Turn type of the lane an obstacle was matched to."""

    NO_TURN = 1
    LEFT_TURN = 2
    RIGHT_TURN = 3
    U_TURN = 4


@dataclass(frozen=True)
class Point2D:
    """A position in the map frame (metres)."""

    x: float
    y: float

    @classmethod
    def from_dict(cls, d: dict | None) -> Point2D | None:
        if d is None:
            return None
        return cls(x=float(d["x"]), y=float(d["y"]))


@dataclass(frozen=True)
class LaneRelation:
    """Measurements of a sample relative to the lane it was matched to."""

    angle_diff: float
    """Heading minus lane heading (radians)."""

    lane_l: float
    """Lateral offset from the lane centre line (metres, positive = left)."""

    dist_to_left_boundary: float
    """Distance to the left lane boundary (metres)."""

    dist_to_right_boundary: float
    """Distance to the right lane boundary (metres)."""

    lane_turn_type: LaneTurnType = LaneTurnType.NO_TURN

    @classmethod
    def from_dict(cls, d: dict) -> LaneRelation:
        return cls(
            angle_diff=float(d["angle_diff"]),
            lane_l=float(d["lane_l"]),
            dist_to_left_boundary=float(d["dist_to_left_boundary"]),
            dist_to_right_boundary=float(d["dist_to_right_boundary"]),
            lane_turn_type=LaneTurnType(int(d.get("lane_turn_type", LaneTurnType.NO_TURN))),
        )


@dataclass(frozen=True)
class MotionSample:
    """One historical observation of an obstacle.

    Optional fields are ``None`` when the upstream tracker did not provide them.
    """

    timestamp: float | None
    """Observation time in seconds."""

    heading: float | None = None
    """Raw heading (theta) in radians."""

    speed: float = 0.0
    """Raw scalar speed in m/s."""

    tracked_heading: float | None = None
    """Filtered velocity heading from the tracker, radians."""

    tracked_speed: float | None = None
    """Filtered speed from the tracker, m/s."""

    position: Point2D | None = None

    lane: LaneRelation | None = None
    """Lane-relative measurements, when the sample was matched to a lane."""

    def heading_for(self, use_tracked_state: bool) -> float | None:
        return self.tracked_heading if use_tracked_state else self.heading

    def speed_for(self, use_tracked_state: bool) -> float:
        if use_tracked_state and self.tracked_speed is not None:
            return self.tracked_speed
        return self.speed

    @classmethod
    def from_dict(cls, d: dict) -> MotionSample:
        """Create a :class:`MotionSample` from a plain (JSON) dict."""
        lane = d.get("lane")
        return cls(
            timestamp=_opt_float(d.get("timestamp")),
            heading=_opt_float(d.get("heading")),
            speed=float(d.get("speed") or 0.0),
            tracked_heading=_opt_float(d.get("tracked_heading")),
            tracked_speed=_opt_float(d.get("tracked_speed")),
            position=Point2D.from_dict(d.get("position")),
            lane=LaneRelation.from_dict(lane) if lane is not None else None,
        )


@dataclass
class ObstacleTrack:
    """An obstacle and its motion history, ordered newest-first.

    Raises:
        ValueError: If the defined timestamps are not monotonically
            non-increasing.
    """

    id: int
    samples: list[MotionSample] = field(default_factory=list)

    def __post_init__(self) -> None:
        previous: float | None = None
        for sample in self.samples:
            if sample.timestamp is None:
                continue
            if previous is not None and sample.timestamp > previous:
                raise ValueError(
                    f"Obstacle [{self.id}] samples must be ordered newest-first: "
                    f"{sample.timestamp} follows {previous}"
                )
            previous = sample.timestamp

    @property
    def latest(self) -> MotionSample | None:
        """The newest sample, or ``None`` for an empty history."""
        return self.samples[0] if self.samples else None

    @property
    def timestamp(self) -> float | None:
        """The newest defined timestamp in the history."""
        for sample in self.samples:
            if sample.timestamp is not None:
                return sample.timestamp
        return None

    def __len__(self) -> int:
        return len(self.samples)

    @classmethod
    def from_dict(cls, d: dict) -> ObstacleTrack:
        return cls(
            id=int(d["id"]),
            samples=[MotionSample.from_dict(s) for s in d.get("samples", [])],
        )


def _opt_float(value) -> float | None:
    return None if value is None else float(value)
