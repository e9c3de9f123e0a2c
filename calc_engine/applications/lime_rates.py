"""Lime application rate calculation for 98G pelletized lime and Aglime."""

import logging
from dataclasses import asdict, dataclass
from typing import List, Optional

from calc_engine.data.conversions import (
    clamp0,
    lbs_to_tons,
    round_half_up,
    round_to_step,
    tons_to_lbs,
)
from calc_engine.data.equations import (
    EQUATION_TABLE,
    INSTITUTIONS,
    MAINTENANCE,
    MATERIAL_98G,
    MATERIAL_AGLIME,
    normalize_institution,
    normalize_material,
    normalize_tillage,
    normalize_use_case,
)
from calc_engine.errors import NoMatchingEquation

logger = logging.getLogger(__name__)

MAINTENANCE_98G_LBS_AC = 250.0
DISPLAY_LBS_STEP = 50.0


@dataclass(frozen=True)
class LimeRate:
    material: str
    tons_ac: float
    lbs_ac: float
    tons_ac_display: float
    lbs_ac_display: float
    equation: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class LimeEconomics:
    """
    Per-acre economics for one liming product.

    `roi` is the value of the yield response (yield increase * price).
    `net` is cost minus that value: positive means the treatment costs more
    than the yield gain returns.
    """

    cost_per_ac: float
    roi: float
    net: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class LimeComparison:
    rate_98g: Optional[LimeRate]
    rate_aglime: Optional[LimeRate]
    economics_98g: LimeEconomics
    economics_aglime: LimeEconomics

    def to_dict(self) -> dict:
        return asdict(self)


def _from_tons(material: str, tons: float, equation: Optional[str]) -> LimeRate:
    lbs = tons_to_lbs(tons)
    return LimeRate(
        material=material,
        tons_ac=tons,
        lbs_ac=lbs,
        tons_ac_display=round_half_up(tons, 2),
        lbs_ac_display=round_to_step(lbs, DISPLAY_LBS_STEP),
        equation=equation,
    )


def list_target_phs(material: str, institution: str, tillage: str) -> List[float]:
    """Sorted, distinct target pH values that have a correction equation."""
    return EQUATION_TABLE.target_phs(
        normalize_material(material), normalize_institution(institution), normalize_tillage(tillage)
    )


def list_98g_target_phs(tillage: str) -> List[float]:
    """98G target pH options, shared across equation sets."""
    found = set()
    for institution in INSTITUTIONS:
        found.update(list_target_phs(MATERIAL_98G, institution, tillage))
    return sorted(found)


def calc_98g(
    institution: str,
    tillage: str,
    soil_ph: float,
    buffer_ph: float,
    target_ph: Optional[float] = None,
    use_case: str = "Correction",
) -> LimeRate:
    """
    98G rate. Maintenance is always 250 lb/ac; correction equations return lb/ac.

    Raises:
        NoMatchingEquation: no correction row for the selection.
    """
    if normalize_use_case(use_case) == MAINTENANCE:
        return _from_tons(MATERIAL_98G, lbs_to_tons(MAINTENANCE_98G_LBS_AC), None)

    if target_ph is None:
        raise ValueError("target_ph is required for 98G correction")
    row, evaluate = EQUATION_TABLE.lookup(
        MATERIAL_98G, normalize_institution(institution), normalize_tillage(tillage), target_ph
    )
    lbs = clamp0(evaluate(buffer_ph, soil_ph))
    return _from_tons(MATERIAL_98G, lbs_to_tons(lbs), row.equation)


def calc_98g_with_fallback(
    institution: str,
    tillage: str,
    soil_ph: float,
    buffer_ph: float,
    target_ph: float,
) -> LimeRate:
    """
    98G correction rate, trying the selected equation set first, then the others.

    98G targets are shared across institutions, so a selection without 98G
    rows borrows them from another set.

    Raises:
        NoMatchingEquation: no equation set has the target (reported for `institution`).
    """
    institution = normalize_institution(institution)
    first_error = None
    for candidate in [institution] + [i for i in INSTITUTIONS if i != institution]:
        try:
            rate = calc_98g(candidate, tillage, soil_ph, buffer_ph, target_ph)
        except NoMatchingEquation as exc:
            first_error = first_error or exc
            continue
        if candidate != institution:
            logger.info("98G target pH %s not in %s equations, used %s", target_ph, institution, candidate)
        return rate
    raise first_error


def calc_aglime(
    institution: str,
    tillage: str,
    soil_ph: float,
    buffer_ph: float,
    target_ph: float,
    ecce_percent: Optional[float] = None,
) -> LimeRate:
    """
    Aglime rate in tons/ac.

    Formula: rate = base_rate / (ECCE / 100) when ECCE > 0, else base_rate.
    Lower ECCE (or NI) raises the rate.
    """
    row, evaluate = EQUATION_TABLE.lookup(
        MATERIAL_AGLIME, normalize_institution(institution), normalize_tillage(tillage), target_ph
    )
    base_tons = clamp0(evaluate(buffer_ph, soil_ph))
    if ecce_percent is not None and ecce_percent > 0:
        tons = base_tons / (ecce_percent / 100)
    else:
        tons = base_tons
    return _from_tons(MATERIAL_AGLIME, clamp0(tons), row.equation)


def calculate_lime_rate(
    material: str,
    institution: str,
    tillage: str,
    use_case: str,
    soil_ph: float,
    buffer_ph: float,
    target_ph: Optional[float] = None,
    ecce_percent: Optional[float] = None,
) -> LimeRate:
    """Dispatch to the 98G or Aglime calculator."""
    material = normalize_material(material)
    use_case = normalize_use_case(use_case)
    if material == MATERIAL_98G:
        return calc_98g(institution, tillage, soil_ph, buffer_ph, target_ph, use_case=use_case)
    if use_case == MAINTENANCE:
        raise ValueError("Maintenance use case applies to 98G only")
    if target_ph is None:
        raise ValueError("target_ph is required for Aglime correction")
    return calc_aglime(institution, tillage, soil_ph, buffer_ph, target_ph, ecce_percent)


def economics(
    rate_tons_ac: float,
    cost_per_ton: float,
    yield_increase: float,
    price_per_unit: float,
) -> LimeEconomics:
    """Formula: cost = rate * cost_per_ton; roi = yield * price; net = cost - roi."""
    cost_ac = rate_tons_ac * cost_per_ton
    roi = yield_increase * price_per_unit
    return LimeEconomics(cost_per_ac=cost_ac, roi=roi, net=cost_ac - roi)


def compare_lime_products(
    institution: str,
    tillage: str,
    soil_ph: float,
    buffer_ph: float,
    target_ph_98g: Optional[float],
    target_ph_aglime: Optional[float],
    ecce_percent: float,
    cost_98g_per_ton: float,
    cost_aglime_per_ton: float,
    yield_increase_98g: float,
    yield_increase_aglime: float,
    price_per_bu: float,
    use_case_98g: str = "Correction",
) -> LimeComparison:
    """
    Side-by-side 98G vs Aglime recommendation for one soil test.

    98G correction tries the selected equation set first, then the other one,
    since 98G targets are shared across institutions. A side without a valid
    target has no rate and is costed at zero tons.
    """
    institution = normalize_institution(institution)

    rate_98g = None
    if normalize_use_case(use_case_98g) == MAINTENANCE:
        rate_98g = calc_98g(institution, tillage, soil_ph, buffer_ph, use_case=MAINTENANCE)
    elif target_ph_98g is not None:
        try:
            rate_98g = calc_98g_with_fallback(institution, tillage, soil_ph, buffer_ph, target_ph_98g)
        except NoMatchingEquation as exc:
            logger.warning("%s", exc)

    rate_aglime = None
    if target_ph_aglime is not None:
        try:
            rate_aglime = calc_aglime(institution, tillage, soil_ph, buffer_ph, target_ph_aglime, ecce_percent)
        except NoMatchingEquation as exc:
            logger.warning("%s", exc)

    econ_98g = economics(rate_98g.tons_ac if rate_98g else 0.0, cost_98g_per_ton, yield_increase_98g, price_per_bu)
    econ_aglime = economics(
        rate_aglime.tons_ac if rate_aglime else 0.0, cost_aglime_per_ton, yield_increase_aglime, price_per_bu
    )
    return LimeComparison(rate_98g, rate_aglime, econ_98g, econ_aglime)
