"""Per-obstacle lane-sequence scoring."""

from lane_scorer.scoring.cache import FeatureCache
from lane_scorer.scoring.orchestrator import ScoringOrchestrator, assemble_features

__all__ = ["FeatureCache", "ScoringOrchestrator", "assemble_features"]
