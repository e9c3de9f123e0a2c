"""Tests for high-Mg and sodic SO4 rates."""

from decimal import Decimal

import numpy as np
import pytest

from calc_engine.applications.gypsum_rates import run_high_mg, run_sodic


class TestHighMg:
    def test_percent_basis(self):
        result = run_high_mg(cec=20, current_mg=25, desired_mg=15)
        assert abs(result.details.meq_mg - 5.0) < 1e-9
        assert abs(result.details.meq_to_displace - 2.0) < 1e-9
        assert abs(result.rate_ton_ac - 1.36) < 1e-9
        assert abs(result.rate_lbs_ac - 2720.0) < 1e-6
        assert result.notes == []

    def test_ppm_basis(self):
        # 240.8 ppm at CEC 10 is 20 % Mg saturation
        result = run_high_mg(cec=10, current_mg=240.8, desired_mg=10, basis="ppm", desired_basis="percent")
        assert abs(result.details.current_mg_pct - 20.0) < 1e-9
        assert abs(result.rate_ton_ac - 0.68) < 1e-9

    def test_desired_follows_basis_by_default(self):
        result = run_high_mg(cec=10, current_mg=240.8, desired_mg=120.4, basis="ppm")
        assert abs(result.details.desired_mg_pct - 10.0) < 1e-9

    def test_desired_above_current(self):
        result = run_high_mg(cec=20, current_mg=12, desired_mg=15)
        assert result.rate_ton_ac == 0.0
        assert result.notes == ["Desired Mg is at or above current Mg; no reduction needed."]

    @pytest.mark.parametrize("cec", [0, -4])
    def test_nonpositive_cec(self, cec):
        result = run_high_mg(cec=cec, current_mg=25, desired_mg=15)
        assert result.rate_ton_ac == 0.0
        assert result.rate_lbs_ac == 0.0
        assert result.notes == ["CEC must be > 0; returned 0 recommendation."]

    def test_numeric_types_accepted(self):
        result = run_high_mg(cec=np.int64(20), current_mg=Decimal("25"), desired_mg=np.float64(15))
        assert abs(result.rate_ton_ac - 1.36) < 1e-9

    def test_unknown_basis(self):
        with pytest.raises(ValueError):
            run_high_mg(cec=20, current_mg=25, desired_mg=15, basis="meq")


class TestSodic:
    def test_from_ppm(self):
        result = run_sodic(cec=10, sodium_ppm=230)
        assert abs(result.base_sat_na_pct - 10.0) < 1e-9
        assert abs(result.na_meq_per_100g - 1.0) < 1e-9
        assert abs(result.na_meq_per_l - 10.0) < 1e-9
        assert abs(result.rate_tons_per_ac - 1.7) < 1e-9
        assert abs(result.rate_lbs_so4_per_ac - 3400.0) < 1e-6
        assert result.notes == ["Base saturation %Na was derived from ppm."]

    def test_percent_wins_over_ppm(self):
        result = run_sodic(cec=10, sodium_ppm=999, base_sat_na_pct=5)
        assert abs(result.rate_tons_per_ac - 0.85) < 1e-9
        assert result.sodium_ppm == 999
        assert result.notes == []

    def test_ppm_derived_from_percent(self):
        result = run_sodic(cec=10, base_sat_na_pct=5)
        assert abs(result.sodium_ppm - 115.0) < 1e-9
        assert abs(result.esp - 0.05) < 1e-12

    def test_zero_cec_keeps_ppm_diagnostics(self):
        result = run_sodic(cec=0, sodium_ppm=46)
        assert result.rate_tons_per_ac == 0.0
        assert result.sodium_ppm == 46
        assert abs(result.na_meq_per_l - 2.0) < 1e-9
        assert result.notes == ["CEC must be > 0; returned 0 recommendation."]

    def test_non_finite_cec(self):
        result = run_sodic(cec=float("nan"), sodium_ppm=230)
        assert result.rate_tons_per_ac == 0.0
        assert result.notes == ["Non-finite CEC input."]

    @pytest.mark.parametrize("cec", [np.int64(10), Decimal("10"), np.float32(10)])
    def test_numeric_types_accepted(self, cec):
        result = run_sodic(cec=cec, sodium_ppm=np.int64(230))
        assert abs(result.rate_tons_per_ac - 1.7) < 1e-9
        assert result.notes == ["Base saturation %Na was derived from ppm."]

    def test_non_numeric_cec(self):
        result = run_sodic(cec="ten", sodium_ppm=230)
        assert result.notes == ["Non-finite CEC input."]

    def test_no_sodium_input(self):
        result = run_sodic(cec=10)
        assert result.rate_tons_per_ac == 0.0
        assert result.notes == ["Provide either sodium_ppm or base_sat_na_pct."]

    def test_to_dict(self):
        data = run_sodic(cec=10, sodium_ppm=230).to_dict()
        assert data["rate_lbs_so4_per_ac"] == pytest.approx(3400.0)
