"""Run the scoring web service.

Usage:
    uv run python scripts/serve.py
    uv run python scripts/serve.py --host 127.0.0.1 --port 9000

The model is read from ``LANE_SCORER_MODEL`` (``.env`` is honoured).
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from lane_scorer.web.app import app


def main() -> None:
    ap = argparse.ArgumentParser(description="Serve the lane-sequence scoring API")
    ap.add_argument("--host", default="0.0.0.0", help="Bind address")
    ap.add_argument("--port", type=int, default=8000, help="Port")
    ap.add_argument("--log-level", default="INFO", help="Logging level")
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
