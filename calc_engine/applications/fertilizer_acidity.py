"""98G needed to offset the acidity generated by N and S fertilizers.

Formula: lbs_98G = (CaCO3_need_from_N + CaCO3_need_from_S) / ENP

MicroEssentials (MES) sulfur units come from the product rate when given,
otherwise from a rate derived from N units and the label %N. Only the
elemental half of MES sulfur acidifies. Elemental sulfur acidifies in full.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional

from calc_engine.data.catalogs import (
    ELEMENTAL_SULFUR,
    MES_ANALYSIS,
    PRODUCT_ANALYSIS,
    get_acidification_coefficient,
)
from calc_engine.data.conversions import round_whole
from calc_engine.errors import UnknownFertilizer

logger = logging.getLogger(__name__)

DEFAULT_ENP_FRACTION = 0.94
MES_ELEMENTAL_FRACTION = 0.5


@dataclass(frozen=True)
class AcidityRow:
    fertilizer: str
    units_n: Optional[float] = None  # lbs N/ac
    units_s: Optional[float] = None  # lbs S/ac, elemental sulfur only
    product_rate_lbs_ac: Optional[float] = None  # MES product rate


@dataclass(frozen=True)
class MesBreakdown:
    rate_from_units_n: Optional[float]
    total_s_units: float
    elemental_s_units: float


@dataclass(frozen=True)
class AcidityRowResult:
    fertilizer: str
    lbs_needed: int
    n_contribution: Optional[int] = None
    s_contribution: Optional[int] = None
    mes: Optional[MesBreakdown] = None


@dataclass(frozen=True)
class AcidityResult:
    total_lbs_needed: int
    rows: List[AcidityRowResult]
    skipped: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _mes_rate(row: AcidityRow, n_pct: float) -> float:
    if row.product_rate_lbs_ac is not None:
        return max(0.0, row.product_rate_lbs_ac)
    if row.units_n is not None and n_pct > 0:
        return max(0.0, row.units_n) / (n_pct / 100)
    return 0.0


def _row_need(row: AcidityRow, enp: float) -> AcidityRowResult:
    coeffs = get_acidification_coefficient(row.fertilizer)

    need_n = 0.0
    if row.units_n is not None and coeffs.n:
        need_n = max(0.0, row.units_n) * coeffs.n

    need_s = 0.0
    mes = None
    if row.fertilizer == ELEMENTAL_SULFUR:
        if row.units_s is not None and coeffs.s:
            need_s = max(0.0, row.units_s) * coeffs.s
    elif row.fertilizer in MES_ANALYSIS and coeffs.s:
        n_pct, s_pct = MES_ANALYSIS[row.fertilizer]
        rate = _mes_rate(row, n_pct)
        if rate > 0:
            total_s = rate * (s_pct / 100)
            elemental_s = total_s * MES_ELEMENTAL_FRACTION
            need_s = elemental_s * coeffs.s
            mes = MesBreakdown(
                rate_from_units_n=None if row.product_rate_lbs_ac is not None else rate,
                total_s_units=total_s,
                elemental_s_units=elemental_s,
            )

    return AcidityRowResult(
        fertilizer=row.fertilizer,
        lbs_needed=round_whole((need_n + need_s) / enp),
        n_contribution=round_whole(need_n / enp) if need_n else None,
        s_contribution=round_whole(need_s / enp) if need_s else None,
        mes=mes,
    )


def run_fertilizer_acidity(
    rows: Iterable[AcidityRow],
    neutralizing_power_fraction: float = DEFAULT_ENP_FRACTION,
) -> AcidityResult:
    """
    Lbs of 98G per acre to neutralize the listed fertilizer applications.

    Rows are rounded individually and the total is the sum of rounded rows.
    Rows naming an unknown fertilizer are skipped and reported in `skipped`.
    """
    enp = neutralizing_power_fraction or 1.0
    results = []
    skipped = []
    for row in rows:
        try:
            results.append(_row_need(row, enp))
        except UnknownFertilizer as exc:
            logger.warning("Skipping acidity row: %s", exc)
            skipped.append(row.fertilizer)

    total = sum(r.lbs_needed for r in results)
    return AcidityResult(total_lbs_needed=total, rows=results, skipped=skipped)


def rows_from_product_rates(rates: Dict[str, float]) -> List[AcidityRow]:
    """
    Convert product rates (lb product/ac) into calculator rows.

    MES rows keep the explicit product rate; elemental sulfur becomes S units;
    everything else becomes N units from the label %N.
    """
    rows = []
    for fertilizer, rate in rates.items():
        if fertilizer not in PRODUCT_ANALYSIS:
            logger.warning("No label analysis for %s; row dropped", fertilizer)
            continue
        rate = rate or 0.0
        n_pct, s_pct = PRODUCT_ANALYSIS[fertilizer]
        units_n = rate * (n_pct / 100) if n_pct else None
        if fertilizer in MES_ANALYSIS:
            rows.append(AcidityRow(fertilizer, units_n=units_n, product_rate_lbs_ac=rate))
        elif fertilizer == ELEMENTAL_SULFUR:
            rows.append(AcidityRow(fertilizer, units_s=rate * (s_pct / 100) if s_pct else rate))
        else:
            rows.append(AcidityRow(fertilizer, units_n=units_n))
    return rows


def acidifying_unit_totals(rows: Iterable[AcidityRow], result: AcidityResult) -> Dict[str, float]:
    """Total N units and acidifying S units behind an acidity result."""
    total_n = 0.0
    total_acid_s = 0.0
    for row in rows:
        if row.fertilizer == ELEMENTAL_SULFUR:
            if row.units_s is not None:
                total_acid_s += max(0.0, row.units_s)
        elif row.units_n is not None:
            total_n += max(0.0, row.units_n)

    for row_result in result.rows:
        if row_result.mes is not None:
            total_acid_s += max(0.0, row_result.mes.elemental_s_units)

    return {"total_n_units": total_n, "total_acidifying_s_units": total_acid_s}
