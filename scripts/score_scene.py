"""Score one obstacle scene file against a model.

The scene file is JSON with an ``obstacle`` (id + newest-first samples) and a
list of ``candidates`` (segments of lane points), the same shape the web API
accepts.

Usage:
    uv run python scripts/score_scene.py --model mlp.bin --scene scene.json
    uv run python scripts/score_scene.py --scene scene.json --tracked --log-level DEBUG

Settings not given on the command line come from ``LANE_SCORER_*`` variables
(``.env`` is honoured).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from lane_scorer.config import ScoringConfig  # noqa: E402
from lane_scorer.lane.models import LaneSequenceCandidate  # noqa: E402
from lane_scorer.obstacle.models import ObstacleTrack  # noqa: E402
from lane_scorer.scoring.orchestrator import ScoringOrchestrator  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser(description="Score candidate lane sequences for one obstacle")
    ap.add_argument("--scene", required=True, help="Scene JSON file")
    ap.add_argument("--model", help="Binary model file (default: LANE_SCORER_MODEL)")
    ap.add_argument("--history-window-s", type=float, help="History window in seconds")
    ap.add_argument("--tracked", action="store_true", help="Use tracked speed/heading")
    ap.add_argument("--log-level", default="WARNING", help="Logging level")
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    config = ScoringConfig.from_env()
    if args.model:
        config.model_path = args.model
    if args.history_window_s is not None:
        config.history_window_s = args.history_window_s
    if args.tracked:
        config.use_tracked_state = True

    if not config.model_path:
        print("  [!] No model given (--model or LANE_SCORER_MODEL).", file=sys.stderr)
        sys.exit(1)

    with open(args.scene, encoding="utf-8") as fh:
        scene = json.load(fh)

    track = ObstacleTrack.from_dict(scene["obstacle"])
    candidates = [LaneSequenceCandidate.from_dict(c) for c in scene.get("candidates", [])]

    orchestrator = ScoringOrchestrator.from_config(config)
    if not orchestrator.evaluator.has_model:
        print(f"  [!] Could not load model: {config.model_path}", file=sys.stderr)
        sys.exit(1)

    orchestrator.score(track, candidates)

    print(f"Obstacle  : {track.id}  ({len(track)} samples)")
    print(f"Candidates: {len(candidates)}")
    for i, candidate in enumerate(candidates):
        label = candidate.sequence_id if candidate.sequence_id is not None else i
        if candidate.probability is None:
            print(f"  [{label}]  skipped")
        else:
            print(f"  [{label}]  {candidate.probability:.4f}")


if __name__ == "__main__":
    main()
