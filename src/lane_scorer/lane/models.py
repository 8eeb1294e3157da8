"""Candidate lane-sequence geometry."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from lane_scorer.obstacle.models import Point2D


@dataclass(frozen=True)
class LanePoint:
    """A geometric sample along a candidate path."""

    position: Point2D | None
    """Absolute map position; ``None`` if the lane graph left it undefined."""

    relative_l: float = 0.0
    """Lateral offset of the point relative to the path (metres)."""

    heading: float = 0.0
    """Path heading at this point (radians)."""

    angle_diff: float = 0.0
    """Angle difference to the path tangent (radians)."""

    @classmethod
    def from_dict(cls, d: dict) -> LanePoint:
        return cls(
            position=Point2D.from_dict(d.get("position")),
            relative_l=float(d.get("relative_l", 0.0)),
            heading=float(d.get("heading", 0.0)),
            angle_diff=float(d.get("angle_diff", 0.0)),
        )


@dataclass(frozen=True)
class LaneSegment:
    """An ordered run of lane points belonging to one lane."""

    points: tuple[LanePoint, ...] = ()
    lane_id: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> LaneSegment:
        return cls(
            points=tuple(LanePoint.from_dict(p) for p in d.get("points", [])),
            lane_id=d.get("lane_id"),
        )


@dataclass
class LaneSequenceCandidate:
    """One hypothesised future path for an obstacle.

    ``probability`` is written by the scorer; it stays ``None`` when the
    candidate could not be scored.
    """

    segments: list[LaneSegment] = field(default_factory=list)
    sequence_id: int | None = None
    probability: float | None = None

    def iter_points(self) -> Iterator[LanePoint]:
        """Yield every lane point, segment by segment, in path order."""
        for segment in self.segments:
            yield from segment.points

    @classmethod
    def from_dict(cls, d: dict) -> LaneSequenceCandidate:
        return cls(
            segments=[LaneSegment.from_dict(s) for s in d.get("segments", [])],
            sequence_id=d.get("sequence_id"),
        )
