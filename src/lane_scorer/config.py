"""Scoring configuration read from environment variables.

Entry points call ``dotenv.load_dotenv()`` before :meth:`ScoringConfig.from_env`
so a project-root ``.env`` file can supply these values.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from lane_scorer.features.lane import LANE_FEATURE_SIZE

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


class FeatureAssembly(Enum):
    """How the obstacle and lane vectors are combined into the model input."""

    OBSTACLE_LANE = "obstacle_lane"
    """Obstacle features followed by lane features."""

    LANE_LANE = "lane_lane"
    """Lane features twice; for models trained against that duplicated layout."""


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class ScoringConfig:
    """Settings shared by the scorer, the web service and the scripts."""

    model_path: str = ""
    history_window_s: float = 5.0
    use_tracked_state: bool = False
    lane_feature_size: int = LANE_FEATURE_SIZE
    assembly: FeatureAssembly = FeatureAssembly.OBSTACLE_LANE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ScoringConfig:
        """Build a config from ``LANE_SCORER_*`` variables.

        Raises:
            ValueError: If a variable is set to an unparsable value.
        """
        env = os.environ if environ is None else environ
        cfg = cls()
        cfg.model_path = env.get("LANE_SCORER_MODEL", cfg.model_path)
        if "LANE_SCORER_HISTORY_WINDOW_S" in env:
            cfg.history_window_s = float(env["LANE_SCORER_HISTORY_WINDOW_S"])
        if "LANE_SCORER_USE_TRACKED_STATE" in env:
            cfg.use_tracked_state = _parse_bool(
                "LANE_SCORER_USE_TRACKED_STATE", env["LANE_SCORER_USE_TRACKED_STATE"]
            )
        if "LANE_SCORER_LANE_FEATURE_SIZE" in env:
            cfg.lane_feature_size = int(env["LANE_SCORER_LANE_FEATURE_SIZE"])
        if "LANE_SCORER_ASSEMBLY" in env:
            cfg.assembly = FeatureAssembly(env["LANE_SCORER_ASSEMBLY"].strip().lower())
        return cfg
