"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from lane_scorer.config import ScoringConfig
from lane_scorer.network.evaluator import NetworkEvaluator
from lane_scorer.network.model import Layer, ModelDefinition
from lane_scorer.web.app import app, get_service
from lane_scorer.web.service import ScoringService

DIM = 54


def make_model(dim: int = DIM) -> ModelDefinition:
    return ModelDefinition(
        dim_input=dim,
        mean=(0.0,) * dim,
        std=(1.0,) * dim,
        layers=(Layer.build([[0.01]] * dim, [0.0], "sigmoid"),),
    )


@pytest.fixture
def service() -> ScoringService:
    return ScoringService(ScoringConfig(), evaluator=NetworkEvaluator(make_model()))


@pytest.fixture
def client(service):
    """FastAPI test client backed by an in-memory model."""
    app.dependency_overrides[get_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def unloaded_client():
    """FastAPI test client whose service has no model."""
    service = ScoringService(ScoringConfig(), evaluator=NetworkEvaluator())
    app.dependency_overrides[get_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_payload(timestamps: tuple[float, ...] = (10.0, 9.5)) -> dict:
    """Build a score request body with one obstacle and two candidates."""
    samples = [
        {
            "timestamp": t,
            "heading": 0.0,
            "speed": 2.0,
            "position": {"x": 0.0, "y": 0.0},
            "lane": {
                "angle_diff": 0.1,
                "lane_l": 0.2,
                "dist_to_left_boundary": 1.0,
                "dist_to_right_boundary": 2.0,
            },
        }
        for t in timestamps
    ]
    return {
        "obstacle": {"id": 5, "samples": samples},
        "candidates": [
            {
                "sequence_id": 11,
                "segments": [{"lane_id": "a", "points": [
                    {"position": {"x": 1.0, "y": 1.0}, "relative_l": 0.5},
                ]}],
            },
            {"sequence_id": 12, "segments": []},
        ],
    }
