"""Batch rate calculation over a table of soil tests."""

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from calc_engine.applications.gypsum_rates import (
    MG_DISPLACEMENT_TONS_PER_MEQ,
    NA_DISPLACEMENT_TONS_PER_MEQ,
)
from calc_engine.applications.lime_rates import calc_98g_with_fallback, calc_aglime
from calc_engine.applications.sulfur_rates import CROP_YIELD_COEF, SO4_S_PCT
from calc_engine.data.conversions import LBS_PER_TON
from calc_engine.data.soil_tests import load_soil_tests
from calc_engine.errors import NoMatchingEquation

logger = logging.getLogger(__name__)


def add_lime_rates(
    df: pd.DataFrame,
    institution: str = "UW",
    tillage: str = "Conventional",
    target_ph_98g: Optional[float] = 6.0,
    target_ph_aglime: Optional[float] = 6.5,
    ecce_percent: float = 68.8,
) -> pd.DataFrame:
    """
    Append `lime_98g_lbs_ac` and `lime_aglime_tons_ac` columns.

    98G uses the same equation-set fallback as `compare_lime_products`.
    Rows missing soil or buffer pH get NaN. A target pH with no equation
    leaves only that material's column NaN.
    """
    out = df.copy()
    out["lime_98g_lbs_ac"] = np.nan
    out["lime_aglime_tons_ac"] = np.nan
    if out.empty or "soil_ph" not in out.columns or "buffer_ph" not in out.columns:
        return out

    valid = out["soil_ph"].notna() & out["buffer_ph"].notna()
    use_98g = target_ph_98g is not None
    use_aglime = target_ph_aglime is not None
    for idx in out.index[valid]:
        soil_ph, buffer_ph = out.at[idx, "soil_ph"], out.at[idx, "buffer_ph"]
        if use_98g:
            try:
                out.at[idx, "lime_98g_lbs_ac"] = calc_98g_with_fallback(
                    institution, tillage, soil_ph, buffer_ph, target_ph_98g
                ).lbs_ac
            except NoMatchingEquation as exc:
                logger.warning("98G rates skipped: %s", exc)
                use_98g = False
        if use_aglime:
            try:
                out.at[idx, "lime_aglime_tons_ac"] = calc_aglime(
                    institution, tillage, soil_ph, buffer_ph, target_ph_aglime, ecce_percent
                ).tons_ac
            except NoMatchingEquation as exc:
                logger.warning("Aglime rates skipped: %s", exc)
                use_aglime = False
    return out


def add_sodic_rates(df: pd.DataFrame) -> pd.DataFrame:
    """
    Append `sodic_so4_tons_ac` and `sodic_so4_lbs_ac` from `cec` and `na_pct`.

    Formula: rate = CEC * %Na / 100 * 1.7, 0 where CEC <= 0.
    """
    out = df.copy()
    if "cec" not in out.columns or "na_pct" not in out.columns:
        out["sodic_so4_tons_ac"] = np.nan
        out["sodic_so4_lbs_ac"] = np.nan
        return out

    cec = out["cec"].to_numpy(dtype="float64")
    na_pct = out["na_pct"].to_numpy(dtype="float64")
    mask = np.isnan(cec) | np.isnan(na_pct)

    rate = np.clip(cec, 0, None) * (np.clip(na_pct, 0, None) / 100) * NA_DISPLACEMENT_TONS_PER_MEQ
    rate = np.where(cec <= 0, 0.0, rate)
    rate[mask] = np.nan

    out["sodic_so4_tons_ac"] = rate
    out["sodic_so4_lbs_ac"] = rate * LBS_PER_TON
    return out


def add_high_mg_rates(df: pd.DataFrame, desired_mg_pct: float = 15.0) -> pd.DataFrame:
    """
    Append `high_mg_so4_tons_ac` and `high_mg_so4_lbs_ac` from `cec` and `mg_pct`.

    Formula: rate = CEC * min(Mg%, 100) / 100 * min(1, (Mg% - desired) / Mg%) * 0.68
    """
    out = df.copy()
    if "cec" not in out.columns or "mg_pct" not in out.columns:
        out["high_mg_so4_tons_ac"] = np.nan
        out["high_mg_so4_lbs_ac"] = np.nan
        return out

    cec = out["cec"].to_numpy(dtype="float64")
    current = np.clip(out["mg_pct"].to_numpy(dtype="float64"), 0, None)
    mask = np.isnan(cec) | np.isnan(current)

    meq_mg = cec * (np.minimum(current, 100.0) / 100)
    to_lower = np.clip(current - max(0.0, desired_mg_pct), 0, None)
    with np.errstate(divide="ignore", invalid="ignore"):
        fraction = np.where(current > 0, np.minimum(1.0, to_lower / current), 0.0)
    rate = np.clip(meq_mg * fraction * MG_DISPLACEMENT_TONS_PER_MEQ, 0, None)
    rate = np.where(cec <= 0, 0.0, rate)
    rate[mask] = np.nan

    out["high_mg_so4_tons_ac"] = rate
    out["high_mg_so4_lbs_ac"] = rate * LBS_PER_TON
    return out


def add_sulfur_rates(df: pd.DataFrame, default_crop: str = "Corn") -> pd.DataFrame:
    """
    Append `sulfur_so4_lbs_ac` from `yield_goal`, `sulfur_ppm`, `om_pct` and `crop`.

    Rows with a crop outside the sulfur crop list get NaN.
    """
    out = df.copy()
    needed = ["yield_goal", "sulfur_ppm", "om_pct"]
    if any(c not in out.columns for c in needed):
        out["sulfur_so4_lbs_ac"] = np.nan
        return out

    crops = out["crop"].fillna(default_crop) if "crop" in out.columns else pd.Series(default_crop, index=out.index)
    coef = crops.map(CROP_YIELD_COEF).to_numpy(dtype="float64")
    alfalfa = (crops == "Alfalfa").to_numpy()
    unknown = sorted(set(crops[np.isnan(coef)]))
    if unknown:
        logger.warning("No sulfur coefficients for crops: %s", ", ".join(map(str, unknown)))

    yield_goal = out["yield_goal"].to_numpy(dtype="float64")
    sulfur_ppm = out["sulfur_ppm"].to_numpy(dtype="float64")
    om = out["om_pct"].to_numpy(dtype="float64")

    sulfur_term = np.where(alfalfa, sulfur_ppm * 0.2 * 2, sulfur_ppm * 0.3 * 8)
    pre = yield_goal * coef - sulfur_term - om * 3
    rate = pre * 100 / SO4_S_PCT
    out["sulfur_so4_lbs_ac"] = np.where(rate > 0, rate, np.where(np.isnan(rate), np.nan, 0.0))
    return out


def run_soil_test_batch(
    df: pd.DataFrame,
    institution: str = "UW",
    tillage: str = "Conventional",
    target_ph_98g: Optional[float] = 6.0,
    target_ph_aglime: Optional[float] = 6.5,
    ecce_percent: float = 68.8,
    desired_mg_pct: float = 15.0,
    default_crop: str = "Corn",
) -> pd.DataFrame:
    """Run lime, sodic, high-Mg and sulfur calculators over cleaned soil tests."""
    out = add_lime_rates(df, institution, tillage, target_ph_98g, target_ph_aglime, ecce_percent)
    out = add_sodic_rates(out)
    out = add_high_mg_rates(out, desired_mg_pct)
    return add_sulfur_rates(out, default_crop)


def run_batch_file(
    input_csv: Union[str, Path],
    output_csv: Union[str, Path],
    **kwargs,
) -> pd.DataFrame:
    """Load, clean and rate a soil-test CSV, writing the result next to the inputs."""
    soil = load_soil_tests(input_csv)
    print(f"Loaded {len(soil)} soil tests from {input_csv}")
    rated = run_soil_test_batch(soil, **kwargs)
    output_csv = Path(output_csv)
    output_csv.parent.mkdir(parents=True, exist_ok=True)
    rated.to_csv(output_csv, index=False)
    print(f"Rates: {output_csv}")
    return rated
