"""Plain-text tables for calculator results."""

from typing import Iterable, List, Optional, Sequence, Tuple

from calc_engine.applications.fertilizer_acidity import AcidityResult
from calc_engine.applications.gypsum_rates import HighMgResult, SodicResult
from calc_engine.applications.lime_rates import LimeComparison, LimeEconomics, LimeRate
from calc_engine.applications.ph_efficiency import PhEfficiencyResult
from calc_engine.applications.sulfur_rates import SulfurRateResult


def _fmt(value, decimals: int = 2) -> str:
    if value is None:
        return "-"
    if isinstance(value, (int, float)):
        return f"{value:,.{decimals}f}"
    return str(value)


def _money(value: Optional[float]) -> str:
    return "-" if value is None else f"${value:,.2f}"


def format_table(title: str, header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Left-align the first column, right-align the rest."""
    rows = [list(r) for r in rows]
    widths = [len(h) for h in header]
    for r in rows:
        for i, cell in enumerate(r):
            widths[i] = max(widths[i], len(cell))

    def line(cells: Sequence[str]) -> str:
        parts = [f"{cells[0]:<{widths[0]}}"] + [f"{c:>{w}}" for c, w in zip(cells[1:], widths[1:])]
        return "  ".join(parts)

    lines = [title, "=" * len(title), line(header), "-" * (sum(widths) + 2 * (len(widths) - 1))]
    lines.extend(line(r) for r in rows)
    return "\n".join(lines)


def format_key_values(title: str, items: List[Tuple[str, str]], notes: Iterable[str] = ()) -> str:
    width = max((len(k) for k, _ in items), default=0)
    lines = [title, "=" * len(title)]
    lines.extend(f"{k:<{width}}  {v}" for k, v in items)
    lines.extend(f"Note: {n}" for n in notes)
    return "\n".join(lines)


def format_lime_rate(rate: LimeRate) -> str:
    items = [
        ("Tons/ac", _fmt(rate.tons_ac_display)),
        ("Lbs/ac", _fmt(rate.lbs_ac_display, 0)),
        ("Equation", rate.equation or "maintenance (250 lb/ac)"),
    ]
    return format_key_values(f"{rate.material} rate", items)


def format_lime_comparison(comp: LimeComparison) -> str:
    def rate_cells(rate: Optional[LimeRate]) -> List[str]:
        if rate is None:
            return ["n/a", "n/a"]
        return [_fmt(rate.tons_ac_display), _fmt(rate.lbs_ac_display, 0)]

    def econ_cells(econ: LimeEconomics) -> List[str]:
        return [_money(econ.cost_per_ac), _money(econ.roi), _money(econ.net)]

    rows = [
        ["98G"] + rate_cells(comp.rate_98g) + econ_cells(comp.economics_98g),
        ["Aglime"] + rate_cells(comp.rate_aglime) + econ_cells(comp.economics_aglime),
    ]
    return format_table("98G vs Aglime", ["Material", "Tons/ac", "Lbs/ac", "Cost/ac", "ROI", "Net"], rows)


def format_acidity(result: AcidityResult) -> str:
    rows = [
        [r.fertilizer, _fmt(r.n_contribution, 0), _fmt(r.s_contribution, 0), _fmt(r.lbs_needed, 0)]
        for r in result.rows
    ]
    rows.append(["Total", "", "", _fmt(result.total_lbs_needed, 0)])
    text = format_table("Lbs 98G to offset fertilizer acidity", ["Fertilizer", "From N", "From S", "Lbs 98G/ac"], rows)
    if result.skipped:
        text += "\nSkipped unknown fertilizers: " + ", ".join(result.skipped)
    return text


def format_ph_efficiency(result: PhEfficiencyResult) -> str:
    rows = [
        [r.nutrient, r.fertilizer, _fmt(r.needed_lb_ac, 1), _fmt(r.rate_lb_ac, 1),
         f"{r.utilization_frac:.0%}", _money(r.cost_per_ac), _money(r.at_risk_per_ac)]
        for r in result.rows
    ]
    rows.append(["Total", "", "", "", "", _money(result.total_cost_per_ac), _money(result.total_at_risk_per_ac)])
    text = format_table(
        f"Nutrient $ at risk at pH {result.soil_ph_bucket}",
        ["Nutrient", "Product", "Need lb/ac", "Rate lb/ac", "Util", "Cost/ac", "At risk/ac"],
        rows,
    )
    cards = "  ".join(f"{k}: {c.util:.0%} util, {_money(c.at_risk)} at risk" for k, c in result.cards.items())
    text = f"{text}\n{cards}"
    if result.skipped:
        text += "\nSkipped unknown fertilizers: " + ", ".join(result.skipped)
    return text


def format_high_mg(result: HighMgResult) -> str:
    d = result.details
    items = [
        ("Current Mg %", _fmt(d.current_mg_pct)),
        ("Desired Mg %", _fmt(d.desired_mg_pct)),
        ("meq Mg", _fmt(d.meq_mg)),
        ("meq to displace", _fmt(d.meq_to_displace)),
        ("SO4 tons/ac", _fmt(result.rate_ton_ac)),
        ("SO4 lbs/ac", _fmt(result.rate_lbs_ac, 0)),
    ]
    return format_key_values("High-Mg SO4 rate", items, result.notes)


def format_sodic(result: SodicResult) -> str:
    items = [
        ("%Na base saturation", _fmt(result.base_sat_na_pct)),
        ("Sodium ppm", _fmt(result.sodium_ppm, 1)),
        ("Na meq/L", _fmt(result.na_meq_per_l)),
        ("Na meq/100 g", _fmt(result.na_meq_per_100g)),
        ("ESP", _fmt(result.esp, 3)),
        ("SO4 tons/ac", _fmt(result.rate_tons_per_ac)),
        ("SO4 lbs/ac", _fmt(result.rate_lbs_so4_per_ac, 0)),
    ]
    return format_key_values("Sodic SO4 rate", items, result.notes)


def format_sulfur(result: SulfurRateResult) -> str:
    b = result.breakdown
    items = [
        ("Yield term", _fmt(b.yield_term)),
        ("Sulfur term", _fmt(b.sulfur_term)),
        ("OM term", _fmt(b.om_term)),
        ("Pre-conversion", _fmt(b.pre_conversion)),
        ("SO4 lbs/ac", _fmt(result.rate_lbs_per_ac, 1)),
    ]
    return format_key_values("Sulfur SO4 rate", items)
