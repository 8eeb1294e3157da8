"""Candidate lane-sequence geometry."""

from lane_scorer.lane.models import LanePoint, LaneSegment, LaneSequenceCandidate

__all__ = ["LanePoint", "LaneSegment", "LaneSequenceCandidate"]
