"""Nutrient dollars at risk versus soil pH.

Product rates are sized to replace crop removal. The N product is sized after
crediting N supplied by the chosen P, K and S products. Dollars at risk are
the share of product cost that is not utilized at the soil pH bucket.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from calc_engine.data.catalogs import (
    ALLOWED_PHS,
    CROP_REMOVAL,
    CROPS,
    NUTRIENTS,
    UTILIZATION,
    FertilizerEntry,
    get_fertilizer,
)
from calc_engine.data.conversions import LBS_PER_TON, round_half_up
from calc_engine.errors import UnknownFertilizer

logger = logging.getLogger(__name__)

# Nutrients rolled into the headline at-risk figure; sulfur stays per-row
AT_RISK_SUMMARY_NUTRIENTS = ("N", "P2O5", "K2O")


@dataclass(frozen=True)
class FertChoice:
    id: str
    price_per_ton: float


@dataclass(frozen=True)
class PhEfficiencyInput:
    crop: str
    yield_goal: float
    soil_ph: float
    n: FertChoice
    p: FertChoice
    k: FertChoice
    s: FertChoice


@dataclass(frozen=True)
class EfficiencyRow:
    nutrient: str
    needed_lb_ac: float
    utilization_frac: float
    rate_lb_ac: float
    cost_per_ac: float
    at_risk_per_ac: float
    fertilizer: str
    analysis_pct: float


@dataclass(frozen=True)
class NutrientCard:
    util: float
    at_risk: float


@dataclass(frozen=True)
class PhEfficiencyResult:
    soil_ph_bucket: float
    rows: List[EfficiencyRow]
    total_cost_per_ac: float
    total_at_risk_per_ac: float
    cards: Dict[str, NutrientCard]
    skipped: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def snap_to_allowed_ph(soil_ph: float) -> float:
    """Nearest supported pH bucket; on a tie the first (lower) bucket wins."""
    best = ALLOWED_PHS[0]
    best_dist = abs(soil_ph - best)
    for value in ALLOWED_PHS:
        dist = abs(soil_ph - value)
        if dist < best_dist:
            best, best_dist = value, dist
    return best


def rate_from_pct(pct: float, units_lb: float) -> float:
    """Product lb/ac supplying `units_lb` of a nutrient at `pct` analysis; 0 if pct <= 0."""
    if pct <= 0:
        return 0.0
    return units_lb / (pct / 100)


def dollars_per_acre(rate_lb_ac: float, price_per_ton: float) -> float:
    return (rate_lb_ac / LBS_PER_TON) * price_per_ton


def _nutrient_share(entry: FertilizerEntry, nutrient: str) -> float:
    total = entry.analysis.total
    return entry.analysis.get(nutrient) / total if total > 0 else 0.0


def required_nutrients(crop: str, yield_goal: float) -> Dict[str, float]:
    """Crop removal (lb/ac) for each nutrient at the yield goal."""
    if crop not in CROP_REMOVAL:
        raise ValueError(f"Unknown crop '{crop}'. Expected one of: {', '.join(CROPS)}")
    removal = CROP_REMOVAL[crop]
    return {nutrient: removal[nutrient] * yield_goal for nutrient in NUTRIENTS}


def _resolve_choices(choices: Dict[str, FertChoice]):
    entries: Dict[str, Optional[FertilizerEntry]] = {}
    skipped = []
    for nutrient, choice in choices.items():
        try:
            entries[nutrient] = get_fertilizer(choice.id)
        except UnknownFertilizer as exc:
            logger.warning("Skipping %s row: %s", nutrient, exc)
            entries[nutrient] = None
            skipped.append(choice.id)
    return entries, skipped


def _analysis(entry: Optional[FertilizerEntry], nutrient: str) -> float:
    return entry.analysis.get(nutrient) if entry is not None else 0.0


def run_ph_efficiency(inp: PhEfficiencyInput) -> PhEfficiencyResult:
    """
    Size N/P/K/S products for a crop and price the unutilized share.

    A choice naming a product outside the catalog is listed in `skipped`; its
    row keeps the requirement but carries no rate, cost or N credit.

    Raises:
        ValueError: unknown crop.
    """
    needed = required_nutrients(inp.crop, inp.yield_goal)
    bucket = snap_to_allowed_ph(inp.soil_ph)
    util = UTILIZATION[bucket]

    choices = {"N": inp.n, "P2O5": inp.p, "K2O": inp.k, "S": inp.s}
    entries, skipped = _resolve_choices(choices)

    rates = {
        nutrient: rate_from_pct(_analysis(entries[nutrient], nutrient), needed[nutrient])
        for nutrient in ("P2O5", "K2O", "S")
    }
    n_credit = sum(rates[nutrient] * (_analysis(entries[nutrient], "N") / 100) for nutrient in ("P2O5", "K2O", "S"))
    n_net_needed = max(0.0, needed["N"] - n_credit)
    rates["N"] = rate_from_pct(_analysis(entries["N"], "N"), n_net_needed)

    costs = {nutrient: dollars_per_acre(rates[nutrient], choices[nutrient].price_per_ton) for nutrient in NUTRIENTS}

    rows = []
    for nutrient in NUTRIENTS:
        cost = costs[nutrient]
        u = util[nutrient]
        rows.append(EfficiencyRow(
            nutrient=nutrient,
            needed_lb_ac=round_half_up(needed[nutrient], 1),
            utilization_frac=u,
            rate_lb_ac=round_half_up(rates[nutrient], 1),
            cost_per_ac=round_half_up(cost, 2),
            at_risk_per_ac=round_half_up(cost * (1 - u), 2),
            fertilizer=choices[nutrient].id,
            analysis_pct=_analysis(entries[nutrient], nutrient),
        ))

    total_cost = round_half_up(sum(r.cost_per_ac for r in rows), 2)
    total_at_risk = round_half_up(
        sum(r.at_risk_per_ac for r in rows if r.nutrient in AT_RISK_SUMMARY_NUTRIENTS), 2
    )

    # Cards: spread each product's cost over every nutrient it carries
    allocated = {nutrient: 0.0 for nutrient in NUTRIENTS}
    for product_nutrient in NUTRIENTS:
        entry = entries[product_nutrient]
        if entry is None:
            continue
        for nutrient in NUTRIENTS:
            allocated[nutrient] += costs[product_nutrient] * _nutrient_share(entry, nutrient)

    cards = {
        label: NutrientCard(util=util[nutrient], at_risk=round_half_up(allocated[nutrient] * (1 - util[nutrient]), 2))
        for label, nutrient in (("N", "N"), ("P", "P2O5"), ("K", "K2O"))
    }

    return PhEfficiencyResult(
        soil_ph_bucket=bucket,
        rows=rows,
        total_cost_per_ac=total_cost,
        total_at_risk_per_ac=total_at_risk,
        cards=cards,
        skipped=skipped,
    )
