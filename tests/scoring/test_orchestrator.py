"""Tests for ScoringOrchestrator: caching, skipping and end-to-end scoring."""

from __future__ import annotations

import logging
import math
from unittest.mock import MagicMock

import pytest

from lane_scorer.config import FeatureAssembly, ScoringConfig
from lane_scorer.features.lane import LANE_FEATURE_SIZE, LaneFeatureExtractor
from lane_scorer.features.obstacle import OBSTACLE_FEATURE_SIZE, ObstacleFeatureExtractor
from lane_scorer.lane.models import LanePoint, LaneSegment, LaneSequenceCandidate
from lane_scorer.network.evaluator import NetworkEvaluator
from lane_scorer.network.model import Layer, ModelDefinition
from lane_scorer.network.model_file import save_model
from lane_scorer.obstacle.models import LaneRelation, MotionSample, ObstacleTrack, Point2D
from lane_scorer.scoring.cache import FeatureCache
from lane_scorer.scoring.orchestrator import ScoringOrchestrator, assemble_features

DIM = OBSTACLE_FEATURE_SIZE + LANE_FEATURE_SIZE
WEIGHT = 0.05
BIAS = -0.3

# ---------------------------------------------------------------------------
# Test-data helpers
# ---------------------------------------------------------------------------

def make_track(obstacle_id: int = 7) -> ObstacleTrack:
    """Two samples: theta=[0.1, 0.3], speed=2, left=[1.0, 1.2], t=[10.0, 9.5]."""
    return ObstacleTrack(id=obstacle_id, samples=[
        MotionSample(
            timestamp=10.0, heading=0.0, speed=2.0, position=Point2D(0.0, 0.0),
            lane=LaneRelation(angle_diff=0.1, lane_l=0.2,
                              dist_to_left_boundary=1.0, dist_to_right_boundary=2.0),
        ),
        MotionSample(
            timestamp=9.5, heading=0.0, speed=2.0, position=Point2D(0.0, -1.0),
            lane=LaneRelation(angle_diff=0.3, lane_l=0.4,
                              dist_to_left_boundary=1.2, dist_to_right_boundary=1.8),
        ),
    ])


def one_point_candidate(sequence_id: int = 0) -> LaneSequenceCandidate:
    point = LanePoint(Point2D(1.0, 1.0), relative_l=0.5, heading=0.1, angle_diff=0.05)
    return LaneSequenceCandidate(
        segments=[LaneSegment(points=(point,), lane_id="l1")],
        sequence_id=sequence_id,
    )


def sigmoid_model(dim: int = DIM) -> ModelDefinition:
    return ModelDefinition(
        dim_input=dim,
        mean=(0.0,) * dim,
        std=(1.0,) * dim,
        layers=(Layer.build([[WEIGHT]] * dim, [BIAS], "sigmoid"),),
    )


def expected_probability() -> float:
    speed_lateral = math.sin(0.2) * 2.0
    obstacle = [
        0.2, 0.2, 0.0, -0.2, 0.3, 0.3, 0.0, 2.0,
        1.0, -0.4, 1.0 / speed_lateral,
        2.0, 0.4, -2.0 / speed_lateral,
    ]
    lane = [math.sin(math.pi / 4), 0.5, 0.1, 0.05] * (LANE_FEATURE_SIZE // 4)
    z = BIAS + WEIGHT * sum(obstacle + lane)
    return 1.0 / (1.0 + math.exp(-z))


def make_orchestrator(model: ModelDefinition | None = None, **kwargs) -> ScoringOrchestrator:
    return ScoringOrchestrator(NetworkEvaluator(model or sigmoid_model()), **kwargs)


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------

def test_end_to_end_probability():
    candidate = one_point_candidate()
    make_orchestrator().score(make_track(), [candidate])
    assert candidate.probability == pytest.approx(expected_probability())


def test_score_returns_candidates_in_order():
    candidates = [one_point_candidate(1), one_point_candidate(2)]
    result = make_orchestrator().score(make_track(), candidates)
    assert result is candidates
    assert [c.sequence_id for c in result] == [1, 2]


def test_from_config_loads_model(tmp_path):
    path = tmp_path / "mlp.bin"
    save_model(sigmoid_model(), path)
    orchestrator = ScoringOrchestrator.from_config(ScoringConfig(model_path=str(path)))
    candidate = one_point_candidate()
    orchestrator.score(make_track(), [candidate])
    assert candidate.probability == pytest.approx(expected_probability())


def test_from_config_reuses_given_evaluator():
    evaluator = NetworkEvaluator(sigmoid_model())
    orchestrator = ScoringOrchestrator.from_config(
        ScoringConfig(model_path="/does/not/exist.bin"), evaluator=evaluator
    )
    assert orchestrator.evaluator is evaluator
    assert evaluator.has_model


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------

def test_obstacle_features_computed_once_per_pass():
    extractor = MagicMock(wraps=ObstacleFeatureExtractor())
    lane = MagicMock(wraps=LaneFeatureExtractor())
    lane.feature_size = LANE_FEATURE_SIZE
    evaluator = MagicMock(wraps=NetworkEvaluator(sigmoid_model()))
    evaluator.has_model = True
    orchestrator = ScoringOrchestrator(evaluator, obstacle_extractor=extractor, lane_extractor=lane)

    candidates = [one_point_candidate(1), one_point_candidate(2)]
    orchestrator.score(make_track(), candidates)

    assert extractor.extract.call_count == 1
    assert lane.extract.call_count == 2
    first, second = (call.args[0] for call in evaluator.compute_probability.call_args_list)
    assert first[:OBSTACLE_FEATURE_SIZE] == second[:OBSTACLE_FEATURE_SIZE]


def test_cache_populated_during_pass():
    cache = FeatureCache()
    make_orchestrator(cache=cache).score(make_track(7), [one_point_candidate()])
    assert 7 in cache
    assert len(cache.get(7)) == OBSTACLE_FEATURE_SIZE


def test_cache_cleared_at_start_of_next_obstacle():
    cache = FeatureCache()
    orchestrator = make_orchestrator(cache=cache)
    orchestrator.score(make_track(7), [one_point_candidate()])
    orchestrator.score(make_track(8), [one_point_candidate()])
    assert 7 not in cache
    assert 8 in cache


def test_stale_cache_entry_not_reused_across_passes():
    cache = FeatureCache()
    cache.put(7, [99.0] * OBSTACLE_FEATURE_SIZE)
    candidate = one_point_candidate()
    make_orchestrator(cache=cache).score(make_track(7), [candidate])
    assert candidate.probability == pytest.approx(expected_probability())


def test_insufficient_obstacle_data_is_cached_too():
    extractor = MagicMock(wraps=ObstacleFeatureExtractor())
    track = ObstacleTrack(id=1, samples=[MotionSample(timestamp=1.0, heading=0.0,
                                                      position=Point2D(0.0, 0.0))])
    candidates = [one_point_candidate(1), one_point_candidate(2)]
    make_orchestrator(obstacle_extractor=extractor).score(track, candidates)
    assert extractor.extract.call_count == 1
    assert all(c.probability is None for c in candidates)


# ---------------------------------------------------------------------------
# Skipping
# ---------------------------------------------------------------------------

def test_candidate_without_geometry_is_skipped_others_scored():
    empty = LaneSequenceCandidate(sequence_id=1)
    good = one_point_candidate(2)
    make_orchestrator().score(make_track(), [empty, good])
    assert empty.probability is None
    assert good.probability == pytest.approx(expected_probability())


def test_dimension_mismatch_logged_as_error(caplog):
    candidate = one_point_candidate()
    orchestrator = make_orchestrator(sigmoid_model(dim=DIM + 1))
    with caplog.at_level(logging.ERROR, logger="lane_scorer.scoring.orchestrator"):
        orchestrator.score(make_track(), [candidate])
    assert candidate.probability is None
    assert "not scored" in caplog.text


def test_missing_model_skips_everything(caplog):
    candidate = one_point_candidate()
    orchestrator = ScoringOrchestrator(NetworkEvaluator())
    with caplog.at_level(logging.ERROR, logger="lane_scorer.scoring.orchestrator"):
        orchestrator.score(make_track(), [candidate])
    assert candidate.probability is None
    assert "No model loaded" in caplog.text


def test_empty_track_logs_debug(caplog):
    candidate = one_point_candidate()
    with caplog.at_level(logging.DEBUG, logger="lane_scorer.scoring.orchestrator"):
        make_orchestrator().score(ObstacleTrack(id=4), [candidate])
    assert candidate.probability is None
    assert "Obstacle [4] has no latest feature" in caplog.text


def test_no_candidates_is_a_noop():
    assert make_orchestrator().score(make_track(), []) == []


def test_inconsistent_in_memory_model_skips_without_raising(caplog):
    inconsistent = ModelDefinition(
        dim_input=DIM,
        mean=(0.0,) * DIM,
        std=(1.0,) * DIM,
        layers=(
            Layer.build([[0.1, 0.1]] * DIM, [0.0, 0.0], "relu"),
            Layer.build([[1.0]] * 5, [0.0], "sigmoid"),
        ),
    )
    candidate = one_point_candidate()
    with caplog.at_level(logging.ERROR):
        ScoringOrchestrator(NetworkEvaluator(inconsistent)).score(make_track(), [candidate])
    assert candidate.probability is None
    assert "No model loaded" in caplog.text


# ---------------------------------------------------------------------------
# Stale probabilities
# ---------------------------------------------------------------------------

def test_rescore_without_model_clears_previous_probability():
    candidate = one_point_candidate()
    make_orchestrator().score(make_track(), [candidate])
    assert candidate.probability is not None

    ScoringOrchestrator(NetworkEvaluator()).score(make_track(), [candidate])
    assert candidate.probability is None


def test_rescore_with_empty_track_clears_previous_probability():
    candidate = one_point_candidate()
    orchestrator = make_orchestrator()
    orchestrator.score(make_track(), [candidate])
    assert candidate.probability is not None

    orchestrator.score(ObstacleTrack(id=7), [candidate])
    assert candidate.probability is None


def test_rescore_with_unscorable_candidate_clears_previous_probability():
    candidate = one_point_candidate()
    make_orchestrator().score(make_track(), [candidate])
    candidate.segments = []

    make_orchestrator().score(make_track(), [candidate])
    assert candidate.probability is None


# ---------------------------------------------------------------------------
# Wrong-size extractor output
# ---------------------------------------------------------------------------

def test_wrong_size_lane_vector_logged_as_error(caplog):
    lane = MagicMock(spec=LaneFeatureExtractor)
    lane.feature_size = LANE_FEATURE_SIZE
    lane.extract.return_value = [0.0] * (LANE_FEATURE_SIZE - 4)
    candidate = one_point_candidate()
    orchestrator = make_orchestrator(lane_extractor=lane)
    with caplog.at_level(logging.ERROR, logger="lane_scorer.scoring.orchestrator"):
        orchestrator.score(make_track(), [candidate])
    assert candidate.probability is None
    assert f"produced {LANE_FEATURE_SIZE - 4} lane feature_values" in caplog.text


def test_wrong_size_obstacle_vector_logged_as_error(caplog):
    obstacle = MagicMock(spec=ObstacleFeatureExtractor)
    obstacle.extract.return_value = [0.0] * 3
    candidate = one_point_candidate()
    orchestrator = make_orchestrator(obstacle_extractor=obstacle)
    with caplog.at_level(logging.ERROR, logger="lane_scorer.scoring.orchestrator"):
        orchestrator.score(make_track(), [candidate])
    assert candidate.probability is None
    assert "produced 3 obstacle feature_values" in caplog.text


def test_empty_lane_vector_is_not_an_error(caplog):
    empty = LaneSequenceCandidate(sequence_id=1)
    with caplog.at_level(logging.DEBUG, logger="lane_scorer.scoring.orchestrator"):
        make_orchestrator().score(make_track(), [empty])
    assert empty.probability is None
    assert "has no lane feature_values" in caplog.text
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def test_assemble_obstacle_then_lane():
    assert assemble_features([1.0, 2.0], [3.0]) == [1.0, 2.0, 3.0]


def test_assemble_lane_twice():
    assert assemble_features([1.0, 2.0], [3.0], FeatureAssembly.LANE_LANE) == [3.0, 3.0]


def test_lane_lane_assembly_scores_with_matching_model():
    candidate = one_point_candidate()
    orchestrator = make_orchestrator(
        sigmoid_model(dim=2 * LANE_FEATURE_SIZE), assembly=FeatureAssembly.LANE_LANE
    )
    orchestrator.score(make_track(), [candidate])
    lane = [math.sin(math.pi / 4), 0.5, 0.1, 0.05] * (LANE_FEATURE_SIZE // 4)
    z = BIAS + WEIGHT * 2 * sum(lane)
    assert candidate.probability == pytest.approx(1.0 / (1.0 + math.exp(-z)))
