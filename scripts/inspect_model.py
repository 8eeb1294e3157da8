"""Print the structure of a binary model file.

Usage:
    uv run python scripts/inspect_model.py --model mlp.bin
    uv run python scripts/inspect_model.py --model mlp.bin --stats
"""

from __future__ import annotations

import argparse
import sys

from lane_scorer.network.model import ModelLoadError
from lane_scorer.network.model_file import load_model


def main() -> None:
    ap = argparse.ArgumentParser(description="Inspect a lane-scorer model file")
    ap.add_argument("--model", required=True, help="Binary model file")
    ap.add_argument("--stats", action="store_true", help="Also print normalization stats")
    args = ap.parse_args()

    try:
        model = load_model(args.model)
    except ModelLoadError as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"Model     : {args.model}")
    print(f"dim_input : {model.dim_input}")
    print(f"num_layer : {model.num_layer}")
    for i, layer in enumerate(model.layers):
        print(
            f"  layer {i}: {layer.input_dim:>4} -> {layer.output_dim:<4} "
            f"{layer.activation_name} ({layer.activation.name.lower()})"
        )

    if args.stats:
        print()
        print(f"{'#':>4}  {'mean':>12}  {'std':>12}")
        for i, (m, s) in enumerate(zip(model.mean, model.std)):
            print(f"{i:>4}  {m:>12.5f}  {s:>12.5f}")


if __name__ == "__main__":
    main()
