"""ScoringService: wraps model loading and per-request scoring for the Web API."""

from __future__ import annotations

from lane_scorer.config import ScoringConfig
from lane_scorer.lane.models import LaneSequenceCandidate
from lane_scorer.network.evaluator import NetworkEvaluator
from lane_scorer.obstacle.models import ObstacleTrack
from lane_scorer.scoring.orchestrator import ScoringOrchestrator
from lane_scorer.web.schemas import CandidateScore, ScoreRequest, ScoreResponse


class ScoringService:
    """Holds the loaded model and scores request payloads.

    The model is loaded once and shared read-only; every request gets its own
    :class:`ScoringOrchestrator` and therefore its own feature cache.

    Parameters
    ----------
    config:
        Scoring settings.  The model is loaded from ``config.model_path``.
    evaluator:
        Optional pre-built evaluator for testing injection.
    """

    def __init__(
        self,
        config: ScoringConfig,
        evaluator: NetworkEvaluator | None = None,
    ) -> None:
        self._config = config
        if evaluator is None:
            evaluator = NetworkEvaluator()
            if config.model_path:
                evaluator.load_model(config.model_path)
        self._evaluator = evaluator

    @property
    def model_loaded(self) -> bool:
        return self._evaluator.has_model

    def score(self, req: ScoreRequest) -> ScoreResponse:
        """Score every candidate in *req*.

        Raises
        ------
        ValueError
            If the obstacle history is not ordered newest-first.
        """
        track = ObstacleTrack.from_dict(req.obstacle.model_dump())
        candidates = [LaneSequenceCandidate.from_dict(c.model_dump()) for c in req.candidates]

        orchestrator = ScoringOrchestrator.from_config(self._config, evaluator=self._evaluator)
        orchestrator.score(track, candidates)

        return ScoreResponse(
            obstacle_id=track.id,
            scores=[
                CandidateScore(index=i, sequence_id=c.sequence_id, probability=c.probability)
                for i, c in enumerate(candidates)
            ],
        )
