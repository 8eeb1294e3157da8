"""Per-pass cache of obstacle feature vectors."""

from __future__ import annotations


class FeatureCache:
    """Maps obstacle id to its obstacle feature vector for one scoring pass.

    Owned by a single :class:`~lane_scorer.scoring.orchestrator.ScoringOrchestrator`;
    not shared between concurrent passes.
    """

    def __init__(self) -> None:
        self._values: dict[int, list[float]] = {}

    def get(self, obstacle_id: int) -> list[float] | None:
        return self._values.get(obstacle_id)

    def put(self, obstacle_id: int, values: list[float]) -> None:
        self._values[obstacle_id] = values

    def clear(self) -> None:
        self._values.clear()

    def __contains__(self, obstacle_id: object) -> bool:
        return obstacle_id in self._values

    def __len__(self) -> int:
        return len(self._values)
