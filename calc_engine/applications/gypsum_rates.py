"""SO4 (gypsum) rate calculation for high-Mg and sodic soils."""

import math
from dataclasses import asdict, dataclass, field
from typing import List, Optional

from calc_engine.data.conversions import (
    clamp0,
    mg_pct_from_ppm,
    na_meq_per_litre,
    na_pct_from_ppm,
    na_ppm_from_pct,
    tons_to_lbs,
)

MG_DISPLACEMENT_TONS_PER_MEQ = 0.68
NA_DISPLACEMENT_TONS_PER_MEQ = 1.7
BASES = ("percent", "ppm")


@dataclass(frozen=True)
class HighMgDetails:
    meq_mg: float
    pct_to_lower: float
    fraction_of_current: float
    meq_to_displace: float
    factor_ton_per_meq: float
    current_mg_pct: float
    desired_mg_pct: float


@dataclass(frozen=True)
class HighMgResult:
    rate_ton_ac: float
    rate_lbs_ac: float
    details: HighMgDetails
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SodicResult:
    base_sat_na_pct: float
    sodium_ppm: float
    na_meq_per_l: float
    na_meq_per_100g: float
    esp: float
    rate_tons_per_ac: float
    rate_lbs_so4_per_ac: float
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _mg_pct(value: float, basis: str, cec: float) -> float:
    if basis not in BASES:
        raise ValueError(f"Unknown basis '{basis}'. Expected one of: {', '.join(BASES)}")
    value = max(0.0, float(value))
    return value if basis == "percent" else mg_pct_from_ppm(value, cec)


def run_high_mg(
    cec: float,
    current_mg: float,
    desired_mg: float,
    basis: str = "percent",
    desired_basis: Optional[str] = None,
) -> HighMgResult:
    """
    SO4 rate (tons/ac) to lower exchangeable Mg toward a desired saturation.

    Args:
        cec: Cation exchange capacity (cmolc/kg)
        current_mg: Current Mg as % base saturation or ppm (see `basis`)
        desired_mg: Desired Mg, in `desired_basis` (defaults to `basis`)

    Formula: rate = CEC * current% / 100 * (current% - desired%) / current% * 0.68
    """
    cec = float(cec)
    desired_basis = desired_basis or basis
    current_pct = _mg_pct(current_mg, basis, cec)
    desired_pct = _mg_pct(desired_mg, desired_basis, cec)
    notes = []

    if cec <= 0:
        notes.append("CEC must be > 0; returned 0 recommendation.")
        details = HighMgDetails(0.0, 0.0, 0.0, 0.0, MG_DISPLACEMENT_TONS_PER_MEQ, current_pct, desired_pct)
        return HighMgResult(0.0, 0.0, details, notes)

    meq_mg = cec * (min(100.0, current_pct) / 100)
    pct_to_lower = max(0.0, current_pct - desired_pct)
    fraction = min(1.0, pct_to_lower / current_pct) if current_pct > 0 else 0.0
    meq_to_displace = meq_mg * fraction

    if pct_to_lower == 0:
        notes.append("Desired Mg is at or above current Mg; no reduction needed.")

    rate_ton_ac = clamp0(meq_to_displace * MG_DISPLACEMENT_TONS_PER_MEQ)
    details = HighMgDetails(
        meq_mg=meq_mg,
        pct_to_lower=pct_to_lower,
        fraction_of_current=fraction,
        meq_to_displace=meq_to_displace,
        factor_ton_per_meq=MG_DISPLACEMENT_TONS_PER_MEQ,
        current_mg_pct=current_pct,
        desired_mg_pct=desired_pct,
    )
    return HighMgResult(rate_ton_ac, tons_to_lbs(rate_ton_ac), details, notes)


def _finite(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _zero_sodic(note: str, sodium_ppm: float = 0.0, na_meq_per_l: float = 0.0) -> SodicResult:
    return SodicResult(0.0, sodium_ppm, na_meq_per_l, 0.0, 0.0, 0.0, 0.0, [note])


def run_sodic(
    cec: float,
    sodium_ppm: Optional[float] = None,
    base_sat_na_pct: Optional[float] = None,
) -> SodicResult:
    """
    SO4 rate (tons/ac) to reclaim a sodic soil.

    %Na base saturation is the source of truth; when given it wins over ppm.
    Formula: rate = CEC * %Na / 100 * 1.7
    """
    if not _finite(cec):
        return _zero_sodic("Non-finite CEC input.")

    cec = max(0.0, float(cec))
    ppm = max(0.0, float(sodium_ppm)) if _finite(sodium_ppm) else None
    pct = max(0.0, float(base_sat_na_pct)) if _finite(base_sat_na_pct) else None

    if cec <= 0:
        return _zero_sodic(
            "CEC must be > 0; returned 0 recommendation.",
            sodium_ppm=ppm or 0.0,
            na_meq_per_l=na_meq_per_litre(ppm) if ppm else 0.0,
        )

    notes = []
    if pct is None:
        if ppm is None:
            return _zero_sodic("Provide either sodium_ppm or base_sat_na_pct.")
        pct = na_pct_from_ppm(ppm, cec)
        notes.append("Base saturation %Na was derived from ppm.")
    if ppm is None:
        ppm = na_ppm_from_pct(pct, cec)

    na_meq_per_100g = cec * (pct / 100)
    rate_tons = clamp0(na_meq_per_100g * NA_DISPLACEMENT_TONS_PER_MEQ)
    return SodicResult(
        base_sat_na_pct=pct,
        sodium_ppm=ppm,
        na_meq_per_l=na_meq_per_litre(ppm),
        na_meq_per_100g=na_meq_per_100g,
        esp=pct / 100,
        rate_tons_per_ac=rate_tons,
        rate_lbs_so4_per_ac=clamp0(tons_to_lbs(rate_tons)),
        notes=notes,
    )
