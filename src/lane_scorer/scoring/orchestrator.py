"""ScoringOrchestrator: scores every candidate lane sequence of one obstacle."""

from __future__ import annotations

import logging

from lane_scorer.config import FeatureAssembly, ScoringConfig
from lane_scorer.features.lane import LaneFeatureExtractor
from lane_scorer.features.obstacle import OBSTACLE_FEATURE_SIZE, ObstacleFeatureExtractor
from lane_scorer.lane.models import LaneSequenceCandidate
from lane_scorer.network.evaluator import EvaluationError, NetworkEvaluator
from lane_scorer.obstacle.models import ObstacleTrack
from lane_scorer.scoring.cache import FeatureCache

_logger = logging.getLogger(__name__)


def assemble_features(
    obstacle_values: list[float],
    lane_values: list[float],
    assembly: FeatureAssembly = FeatureAssembly.OBSTACLE_LANE,
) -> list[float]:
    """Combine the obstacle and lane vectors into one model input."""
    if assembly is FeatureAssembly.LANE_LANE:
        return lane_values + lane_values
    return obstacle_values + lane_values


def _log_size_mismatch(obstacle_id: int, kind: str, values: list[float], expected: int) -> None:
    # Empty means insufficient data; any other length is an extractor fault.
    if not values:
        _logger.debug("Obstacle [%d] has no %s feature_values.", obstacle_id, kind)
        return
    _logger.error(
        "Obstacle [%d] produced %d %s feature_values, expected %d.",
        obstacle_id,
        len(values),
        kind,
        expected,
    )


class ScoringOrchestrator:
    """Score candidate lane sequences for one obstacle at a time.

    Parameters
    ----------
    evaluator:
        Network evaluator holding the loaded model.
    obstacle_extractor:
        Computes the candidate-independent obstacle features.
    lane_extractor:
        Computes the per-candidate lane features.
    cache:
        Obstacle feature cache owned by this orchestrator.  A fresh one is
        created when omitted.
    assembly:
        Layout of the combined model input.
    """

    def __init__(
        self,
        evaluator: NetworkEvaluator,
        obstacle_extractor: ObstacleFeatureExtractor | None = None,
        lane_extractor: LaneFeatureExtractor | None = None,
        cache: FeatureCache | None = None,
        assembly: FeatureAssembly = FeatureAssembly.OBSTACLE_LANE,
    ) -> None:
        self._evaluator = evaluator
        self._obstacle = obstacle_extractor or ObstacleFeatureExtractor()
        self._lane = lane_extractor or LaneFeatureExtractor()
        self._cache = cache if cache is not None else FeatureCache()
        self._assembly = assembly

    @classmethod
    def from_config(
        cls,
        config: ScoringConfig,
        evaluator: NetworkEvaluator | None = None,
    ) -> ScoringOrchestrator:
        """Build an orchestrator from *config*.

        Loads ``config.model_path`` into a new evaluator unless an already
        loaded *evaluator* is passed in.
        """
        if evaluator is None:
            evaluator = NetworkEvaluator()
            if config.model_path:
                evaluator.load_model(config.model_path)
        return cls(
            evaluator=evaluator,
            obstacle_extractor=ObstacleFeatureExtractor(
                history_window_s=config.history_window_s,
                use_tracked_state=config.use_tracked_state,
            ),
            lane_extractor=LaneFeatureExtractor(
                feature_size=config.lane_feature_size,
                use_tracked_state=config.use_tracked_state,
            ),
            assembly=config.assembly,
        )

    @property
    def evaluator(self) -> NetworkEvaluator:
        return self._evaluator

    @property
    def cache(self) -> FeatureCache:
        return self._cache

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def score(
        self,
        track: ObstacleTrack,
        candidates: list[LaneSequenceCandidate],
    ) -> list[LaneSequenceCandidate]:
        """Write a probability onto each scorable candidate (mutates + returns them).

        Candidates whose features cannot be extracted or evaluated keep
        ``probability = None``.
        """
        self._cache.clear()
        for candidate in candidates:
            candidate.probability = None

        if not track.samples:
            _logger.debug("Obstacle [%d] has no latest feature.", track.id)
            return candidates
        if not candidates:
            _logger.debug("Obstacle [%d] has no lane sequences.", track.id)
            return candidates
        if not self._evaluator.has_model:
            _logger.error("No model loaded; cannot score obstacle [%d].", track.id)
            return candidates

        for candidate in candidates:
            candidate.probability = self._score_candidate(track, candidate)
        return candidates

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _obstacle_features(self, track: ObstacleTrack) -> list[float]:
        cached = self._cache.get(track.id)
        if cached is not None:
            return cached
        values = self._obstacle.extract(track)
        self._cache.put(track.id, values)
        return values

    def _score_candidate(
        self,
        track: ObstacleTrack,
        candidate: LaneSequenceCandidate,
    ) -> float | None:
        obstacle_values = self._obstacle_features(track)
        if len(obstacle_values) != OBSTACLE_FEATURE_SIZE:
            _log_size_mismatch(track.id, "obstacle", obstacle_values, OBSTACLE_FEATURE_SIZE)
            return None

        lane_values = self._lane.extract(track, candidate)
        if len(lane_values) != self._lane.feature_size:
            _log_size_mismatch(track.id, "lane", lane_values, self._lane.feature_size)
            return None

        features = assemble_features(obstacle_values, lane_values, self._assembly)
        try:
            return self._evaluator.compute_probability(features)
        except EvaluationError as exc:
            _logger.error("Obstacle [%d] candidate not scored: %s", track.id, exc)
            return None
