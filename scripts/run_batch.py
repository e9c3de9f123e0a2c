#!/usr/bin/env python
"""Apply lime, gypsum and sulfur calculators to a CSV of soil tests."""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from calc_engine.applications.farm_pipeline import run_batch_file
from calc_engine.config import load_config


def main():
    parser = argparse.ArgumentParser(description="Batch soil-test rate recommendations")
    parser.add_argument("--input", type=str, required=True, help="Soil-test CSV")
    parser.add_argument("--output", type=str, required=True, help="Output CSV")
    parser.add_argument("--config", type=str, default=None, help="Config YAML")
    parser.add_argument("--desired-mg", type=float, default=15.0, help="Desired Mg %% base saturation")

    args = parser.parse_args()
    cfg = load_config(args.config)
    lime, sulfur = cfg.lime, cfg.sulfur

    rated = run_batch_file(
        args.input, args.output,
        institution=lime.institution, tillage=lime.tillage,
        target_ph_98g=lime.target_ph_98g, target_ph_aglime=lime.target_ph_aglime,
        ecce_percent=lime.ecce_percent, desired_mg_pct=args.desired_mg,
        default_crop=sulfur.crop,
    )

    rate_cols = [c for c in rated.columns if c.endswith(("_lbs_ac", "_tons_ac"))]
    print(f"\n{'Column':<24} {'Mean':>10} {'Max':>10}")
    for col in rate_cols:
        print(f"{col:<24} {rated[col].mean():>10.2f} {rated[col].max():>10.2f}")


if __name__ == "__main__":
    main()
