"""Sulfur rate as SO4 pelletized gypsum, and the AMS sulfur helper."""

from dataclasses import asdict, dataclass

SO4_S_PCT = 17.0

# lbs S removed per unit yield
CROP_YIELD_COEF = {
    "Corn": 0.22,
    "Soybean": 0.29,
    "Wheat": 0.35,
    "Alfalfa": 6.3,
}
SULFUR_CROPS = tuple(CROP_YIELD_COEF)


@dataclass(frozen=True)
class SulfurBreakdown:
    yield_term: float
    sulfur_term: float
    om_term: float
    pre_conversion: float


@dataclass(frozen=True)
class SulfurRateResult:
    rate_lbs_per_ac: float
    breakdown: SulfurBreakdown

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AmsResult:
    ams_required_lb_ac: float
    n_credit_lb_ac: float

    def to_dict(self) -> dict:
        return asdict(self)


def sulfur_ppm_term(crop: str, sulfur_ppm: float) -> float:
    """Soil-test sulfate credit; alfalfa uses a shallower credit."""
    if crop == "Alfalfa":
        return sulfur_ppm * 0.2 * 2
    return sulfur_ppm * 0.3 * 8


def run_sulfur_rate(
    crop: str,
    yield_goal: float,
    sulfur_ppm: float,
    organic_matter_pct: float,
) -> SulfurRateResult:
    """
    SO4 product rate (lb/ac).

    Formula: rate = ((YG * coef) - S_term - (OM * 3)) * 100 / 17, floored at 0
    Yield goal is bu/ac, or tons/ac for alfalfa.
    """
    if crop not in CROP_YIELD_COEF:
        raise ValueError(f"Unknown crop '{crop}'. Expected one of: {', '.join(SULFUR_CROPS)}")

    yield_term = yield_goal * CROP_YIELD_COEF[crop]
    sulfur_term = sulfur_ppm_term(crop, sulfur_ppm)
    om_term = organic_matter_pct * 3
    pre = yield_term - sulfur_term - om_term

    rate = (pre * 100) / SO4_S_PCT
    return SulfurRateResult(
        rate_lbs_per_ac=rate if rate > 0 else 0.0,
        breakdown=SulfurBreakdown(yield_term, sulfur_term, om_term, pre),
    )


def run_ams_sulfur(target_s_lb_ac: float, n_pct: float = 21.0, s_pct: float = 24.0) -> AmsResult:
    """Ammonium sulfate needed to supply a sulfur target, and the N it brings along."""
    s_per_lb = s_pct / 100
    ams_required = target_s_lb_ac / (s_per_lb or 1)
    return AmsResult(ams_required_lb_ac=ams_required, n_credit_lb_ac=ams_required * (n_pct / 100))
