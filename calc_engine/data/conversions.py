"""Unit constants and conversions shared by the rate calculators."""

import math

LBS_PER_TON = 2000.0

# 1 cmol(+)/kg of exchangeable Mg is taken as 120.4 mg/kg
MG_PPM_PER_CMOLC = 120.4
# ppm Na per meq/100 g, used for % base saturation
NA_PPM_PER_MEQ_100G = 230.0
# mg Na per meq, ppm -> meq/L
NA_MG_PER_MEQ = 23.0


def tons_to_lbs(tons: float) -> float:
    return tons * LBS_PER_TON


def lbs_to_tons(lbs: float) -> float:
    return lbs / LBS_PER_TON


def clamp0(value: float) -> float:
    """Floor negative values at zero."""
    return value if value > 0 else 0.0


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties going up, matching the displayed spreadsheet values."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_whole(value: float) -> int:
    return int(math.floor(value + 0.5))


def round_to_step(value: float, step: float) -> float:
    """Round to the nearest multiple of `step` (e.g. 50 lb/ac)."""
    return math.floor(value / step + 0.5) * step


def mg_pct_from_ppm(mg_ppm: float, cec: float) -> float:
    """Mg % base saturation from ppm Mg and CEC (cmolc/kg)."""
    if cec <= 0:
        return 0.0
    return (mg_ppm / MG_PPM_PER_CMOLC) / cec * 100


def mg_ppm_from_pct(mg_pct: float, cec: float) -> float:
    return (mg_pct / 100) * cec * MG_PPM_PER_CMOLC


def na_pct_from_ppm(na_ppm: float, cec: float) -> float:
    """Na % base saturation: ((ppm / 230) / CEC) * 100."""
    if cec <= 0:
        return 0.0
    return ((na_ppm / NA_PPM_PER_MEQ_100G) / cec) * 100


def na_ppm_from_pct(na_pct: float, cec: float) -> float:
    return (na_pct / 100) * cec * NA_PPM_PER_MEQ_100G


def na_meq_per_litre(na_ppm: float) -> float:
    return na_ppm / NA_MG_PER_MEQ
