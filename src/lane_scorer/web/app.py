"""FastAPI scoring service."""

from __future__ import annotations

from functools import lru_cache

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException

from lane_scorer.config import ScoringConfig
from lane_scorer.web.schemas import HealthResponse, ScoreRequest, ScoreResponse
from lane_scorer.web.service import ScoringService

load_dotenv()  # loads .env from project root; must run before env vars are consumed

VERSION = "0.1.0"

app = FastAPI(title="Lane Sequence Scorer", version=VERSION)


@lru_cache(maxsize=1)
def get_service() -> ScoringService:
    """Return the process-wide service; the model is loaded on first use."""
    return ScoringService(ScoringConfig.from_env())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health(service: ScoringService = Depends(get_service)) -> HealthResponse:
    return HealthResponse(status="ok", version=VERSION, model_loaded=service.model_loaded)


@app.post("/api/score", response_model=ScoreResponse)
def score(req: ScoreRequest, service: ScoringService = Depends(get_service)) -> ScoreResponse:
    """Score every candidate lane sequence of one obstacle."""
    if not service.model_loaded:
        raise HTTPException(status_code=503, detail="No model loaded")
    try:
        return service.score(req)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
