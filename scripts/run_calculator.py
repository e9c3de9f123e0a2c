#!/usr/bin/env python
"""Run one agronomic calculator from the command line."""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from calc_engine.applications.fertilizer_acidity import AcidityRow, run_fertilizer_acidity
from calc_engine.applications.gypsum_rates import run_high_mg, run_sodic
from calc_engine.applications.lime_rates import (
    calculate_lime_rate,
    compare_lime_products,
    list_target_phs,
)
from calc_engine.applications.ph_efficiency import FertChoice, PhEfficiencyInput, run_ph_efficiency
from calc_engine.applications.sulfur_rates import run_sulfur_rate
from calc_engine.config import load_config
from calc_engine.data.catalogs import DEFAULT_PRICE
from calc_engine.errors import CalcEngineError
from calc_engine.evaluation import report


def _parse_acidity_row(text: str) -> AcidityRow:
    """Parse 'Fertilizer name:n=40,s=10,rate=100'."""
    name, _, params = text.partition(":")
    values = {}
    for item in filter(None, params.split(",")):
        key, _, value = item.partition("=")
        values[key.strip()] = float(value)
    unknown = set(values) - {"n", "s", "rate"}
    if unknown:
        raise argparse.ArgumentTypeError(f"Unknown acidity row keys: {', '.join(sorted(unknown))}")
    return AcidityRow(
        fertilizer=name.strip(),
        units_n=values.get("n"),
        units_s=values.get("s"),
        product_rate_lbs_ac=values.get("rate"),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lime, gypsum, sulfur and fertilizer calculators")
    parser.add_argument("--config", type=str, default=None, help="Config YAML (defaults to configs/defaults.yaml)")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("lime", help="98G or Aglime rate")
    p.add_argument("--material", choices=["98G", "Aglime"], required=True)
    p.add_argument("--institution", type=str, default=None)
    p.add_argument("--tillage", type=str, default=None)
    p.add_argument("--use-case", type=str, default="Correction")
    p.add_argument("--soil-ph", type=float, required=True)
    p.add_argument("--buffer-ph", type=float, required=True)
    p.add_argument("--target-ph", type=float, default=None)
    p.add_argument("--ecce", type=float, default=None, help="Aglime ECCE/NI percent")

    p = sub.add_parser("compare", help="98G vs Aglime with economics")
    p.add_argument("--soil-ph", type=float, required=True)
    p.add_argument("--buffer-ph", type=float, required=True)
    p.add_argument("--institution", type=str, default=None)
    p.add_argument("--tillage", type=str, default=None)

    p = sub.add_parser("target-phs", help="List target pH values with equations")
    p.add_argument("--material", choices=["98G", "Aglime"], required=True)
    p.add_argument("--institution", type=str, default=None)
    p.add_argument("--tillage", type=str, default=None)

    p = sub.add_parser("acidity", help="98G to offset fertilizer acidity")
    p.add_argument("rows", nargs="+", type=_parse_acidity_row,
                   help="'Fertilizer:n=..,s=..,rate=..' e.g. 'Urea:n=150'")
    p.add_argument("--enp", type=float, default=None, help="Neutralizing power fraction")

    p = sub.add_parser("ph-efficiency", help="Nutrient dollars at risk vs soil pH")
    p.add_argument("--soil-ph", type=float, required=True)
    p.add_argument("--crop", type=str, default=None)
    p.add_argument("--yield-goal", type=float, default=None)
    for nutrient in ("n", "p", "k", "s"):
        p.add_argument(f"--{nutrient}-product", type=str, default=None)
        p.add_argument(f"--{nutrient}-price", type=float, default=None, help="$/ton")

    p = sub.add_parser("high-mg", help="SO4 rate for high-Mg soils")
    p.add_argument("--cec", type=float, required=True)
    p.add_argument("--current-mg", type=float, required=True)
    p.add_argument("--desired-mg", type=float, required=True)
    p.add_argument("--basis", choices=["percent", "ppm"], default="percent")
    p.add_argument("--desired-basis", choices=["percent", "ppm"], default=None)

    p = sub.add_parser("sodic", help="SO4 rate for sodic soils")
    p.add_argument("--cec", type=float, required=True)
    p.add_argument("--sodium-ppm", type=float, default=None)
    p.add_argument("--na-pct", type=float, default=None)

    p = sub.add_parser("sulfur", help="SO4 rate from crop sulfur removal")
    p.add_argument("--crop", type=str, default=None)
    p.add_argument("--yield-goal", type=float, required=True)
    p.add_argument("--sulfur-ppm", type=float, required=True)
    p.add_argument("--om", type=float, required=True, help="Organic matter (%%)")

    return parser


def run(args) -> str:
    cfg = load_config(args.config)
    lime = cfg.lime
    institution = getattr(args, "institution", None) or lime.institution
    tillage = getattr(args, "tillage", None) or lime.tillage

    if args.command == "lime":
        target = args.target_ph
        if target is None:
            target = lime.target_ph_98g if args.material == "98G" else lime.target_ph_aglime
        ecce = args.ecce if args.ecce is not None else lime.ecce_percent
        result = calculate_lime_rate(
            args.material, institution, tillage, args.use_case, args.soil_ph, args.buffer_ph, target, ecce
        )
        return json.dumps(result.to_dict(), indent=2) if args.json else report.format_lime_rate(result)

    if args.command == "compare":
        result = compare_lime_products(
            institution, tillage, args.soil_ph, args.buffer_ph,
            lime.target_ph_98g, lime.target_ph_aglime, lime.ecce_percent,
            lime.cost_98g_per_ton, lime.cost_aglime_per_ton,
            lime.yield_increase_98g, lime.yield_increase_aglime, lime.price_per_bu,
            use_case_98g=lime.use_case_98g,
        )
        return json.dumps(result.to_dict(), indent=2) if args.json else report.format_lime_comparison(result)

    if args.command == "target-phs":
        values = list_target_phs(args.material, institution, tillage)
        return json.dumps(values) if args.json else ", ".join(f"{v:.1f}" for v in values)

    if args.command == "acidity":
        enp = args.enp if args.enp is not None else cfg.acidity.neutralizing_power_fraction
        result = run_fertilizer_acidity(args.rows, enp)
        return json.dumps(result.to_dict(), indent=2) if args.json else report.format_acidity(result)

    if args.command == "ph-efficiency":
        pe = cfg.ph_efficiency

        def choice(nutrient: str, default_id: str) -> FertChoice:
            fid = getattr(args, f"{nutrient}_product") or default_id
            price = getattr(args, f"{nutrient}_price")
            return FertChoice(fid, price if price is not None else DEFAULT_PRICE.get(fid, 0.0))

        result = run_ph_efficiency(PhEfficiencyInput(
            crop=args.crop or pe.crop,
            yield_goal=args.yield_goal if args.yield_goal is not None else pe.yield_goal,
            soil_ph=args.soil_ph,
            n=choice("n", pe.n_product),
            p=choice("p", pe.p_product),
            k=choice("k", pe.k_product),
            s=choice("s", pe.s_product),
        ))
        return json.dumps(result.to_dict(), indent=2) if args.json else report.format_ph_efficiency(result)

    if args.command == "high-mg":
        result = run_high_mg(args.cec, args.current_mg, args.desired_mg, args.basis, args.desired_basis)
        return json.dumps(result.to_dict(), indent=2) if args.json else report.format_high_mg(result)

    if args.command == "sodic":
        result = run_sodic(args.cec, sodium_ppm=args.sodium_ppm, base_sat_na_pct=args.na_pct)
        return json.dumps(result.to_dict(), indent=2) if args.json else report.format_sodic(result)

    if args.command == "sulfur":
        result = run_sulfur_rate(args.crop or cfg.sulfur.crop, args.yield_goal, args.sulfur_ppm, args.om)
        return json.dumps(result.to_dict(), indent=2) if args.json else report.format_sulfur(result)

    raise ValueError(f"Unknown command: {args.command}")


def main():
    parser = build_parser()
    args = parser.parse_args()
    try:
        print(run(args))
    except (CalcEngineError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
