"""Tests for 98G and Aglime rate calculation."""

import pytest

from calc_engine.applications.lime_rates import (
    calc_98g,
    calc_98g_with_fallback,
    calc_aglime,
    calculate_lime_rate,
    compare_lime_products,
    economics,
    list_98g_target_phs,
    list_target_phs,
)
from calc_engine.data.equations import EQUATION_TABLE
from calc_engine.errors import NoMatchingEquation

UW_PHS = [5.2, 5.4, 5.6, 5.8, 6.0, 6.3, 6.5, 6.6, 6.8]


class TestTargetPhs:
    def test_isu_aglime(self):
        assert list_target_phs("Aglime", "ISU", "Conventional") == [6.0, 6.5, 6.8]

    def test_uw_aglime(self):
        assert list_target_phs("Aglime", "UW", "No-Till") == UW_PHS

    def test_isu_98g_empty(self):
        assert list_target_phs("98G", "ISU", "Conventional") == []

    def test_98g_union_across_institutions(self):
        assert list_98g_target_phs("notill") == UW_PHS


class Test98G:
    def test_maintenance_is_250_lbs(self):
        rate = calc_98g("UW", "Conventional", 5.5, 6.0, use_case="Maintenance")
        assert rate.lbs_ac == 250.0
        assert rate.tons_ac == 0.125
        assert rate.lbs_ac_display == 250.0
        assert rate.equation is None

    def test_maintenance_ignores_institution_equations(self):
        rate = calculate_lime_rate("98G", "ISU", "No-Till", "Maintenance", 5.5, 6.0)
        assert rate.lbs_ac == 250.0

    def test_uw_conventional_correction(self):
        rate = calc_98g("UW", "Conventional", 5.7, 6.4, 6.0)
        assert abs(rate.lbs_ac - 928.08) < 1e-6
        assert abs(rate.tons_ac - 0.46404) < 1e-9
        assert rate.lbs_ac_display == 950.0
        assert rate.tons_ac_display == 0.46

    def test_negative_clamped_to_zero(self):
        rate = calc_98g("UW", "Conventional", 7.0, 7.0, 5.2)
        assert rate.lbs_ac == 0.0
        assert rate.tons_ac == 0.0

    def test_isu_has_no_98g_equations(self):
        with pytest.raises(NoMatchingEquation):
            calc_98g("ISU", "Conventional", 5.7, 6.4, 6.0)

    def test_correction_without_target(self):
        with pytest.raises(ValueError):
            calc_98g("UW", "Conventional", 5.7, 6.4)

    def test_fallback_to_other_institution(self):
        rate = calc_98g_with_fallback("isu", "Conventional", 5.7, 6.4, 6.0)
        assert rate == calc_98g("UW", "Conventional", 5.7, 6.4, 6.0)

    def test_fallback_keeps_selected_institution_first(self):
        rate = calc_98g_with_fallback("UW", "No-Till", 5.7, 6.4, 6.0)
        assert rate == calc_98g("UW", "No-Till", 5.7, 6.4, 6.0)

    def test_fallback_reports_selected_institution(self):
        with pytest.raises(NoMatchingEquation) as exc:
            calc_98g_with_fallback("ISU", "Conventional", 5.7, 6.4, 6.1)
        assert exc.value.institution == "ISU"


class TestAglime:
    def test_uw_with_ecce(self):
        rate = calc_aglime("UW", "Conventional", 5.7, 6.4, 6.5, ecce_percent=68.8)
        assert abs(rate.tons_ac - 8.359 / 0.688) < 1e-6
        assert rate.lbs_ac == rate.tons_ac * 2000

    def test_lower_ecce_raises_rate(self):
        high = calc_aglime("UW", "Conventional", 5.7, 6.4, 6.5, ecce_percent=90)
        low = calc_aglime("UW", "Conventional", 5.7, 6.4, 6.5, ecce_percent=60)
        assert low.tons_ac > high.tons_ac

    @pytest.mark.parametrize("ecce", [None, 0, -5])
    def test_missing_or_nonpositive_ecce_uses_base_rate(self, ecce):
        rate = calc_aglime("ISU", "Conventional", 5.7, 6.4, 6.0, ecce_percent=ecce)
        assert abs(rate.tons_ac - 0.382263) < 1e-6

    def test_isu_no_till_half_depth(self):
        conv = calc_aglime("ISU", "Conventional", 5.7, 6.4, 6.0)
        no_till = calc_aglime("ISU", "No-Till", 5.7, 6.4, 6.0)
        assert abs(no_till.tons_ac * 2 - conv.tons_ac) < 1e-9

    def test_unlisted_target(self):
        with pytest.raises(NoMatchingEquation):
            calc_aglime("UW", "Conventional", 5.7, 6.4, 6.1)

    def test_maintenance_rejected(self):
        with pytest.raises(ValueError):
            calculate_lime_rate("Aglime", "UW", "Conventional", "Maintenance", 5.7, 6.4, 6.5)


class TestRateInvariants:
    def test_every_equation_row(self):
        for row in EQUATION_TABLE.rows:
            rate = calculate_lime_rate(
                row.material, row.institution, row.tillage, "Correction", 5.5, 6.2, row.target_ph, 80
            )
            assert rate.tons_ac >= 0
            assert rate.lbs_ac == rate.tons_ac * 2000
            assert rate.lbs_ac_display % 50 == 0

    def test_idempotent(self):
        a = calculate_lime_rate("Aglime", "UW", "No-Till", "Correction", 5.6, 6.3, 6.3, 75)
        b = calculate_lime_rate("Aglime", "UW", "No-Till", "Correction", 5.6, 6.3, 6.3, 75)
        assert a == b


class TestEconomics:
    def test_net_is_cost_minus_return(self):
        econ = economics(2.0, 40.0, 5.0, 4.0)
        assert econ.cost_per_ac == 80.0
        assert econ.roi == 20.0
        assert econ.net == 60.0

    def test_zero_rate(self):
        econ = economics(0.0, 295.0, 8.0, 4.0)
        assert econ.cost_per_ac == 0.0
        assert econ.net == -32.0


class TestCompareLimeProducts:
    def _compare(self, institution="UW", **kwargs):
        params = dict(
            institution=institution, tillage="Conventional", soil_ph=5.7, buffer_ph=6.4,
            target_ph_98g=6.0, target_ph_aglime=6.5, ecce_percent=68.8,
            cost_98g_per_ton=295.0, cost_aglime_per_ton=40.0,
            yield_increase_98g=8.0, yield_increase_aglime=0.0, price_per_bu=4.0,
        )
        params.update(kwargs)
        return compare_lime_products(**params)

    def test_both_sides(self):
        comp = self._compare()
        assert abs(comp.economics_98g.cost_per_ac - 0.46404 * 295.0) < 1e-6
        assert comp.economics_98g.roi == 32.0
        assert abs(comp.economics_aglime.cost_per_ac - comp.rate_aglime.tons_ac * 40.0) < 1e-9

    def test_98g_falls_back_to_other_institution(self):
        comp = self._compare(institution="ISU")
        expected = calc_98g("UW", "Conventional", 5.7, 6.4, 6.0)
        assert comp.rate_98g == expected
        assert comp.rate_aglime.equation.startswith("((49886")

    def test_missing_aglime_target_costed_at_zero(self):
        comp = self._compare(institution="ISU", target_ph_aglime=5.2)
        assert comp.rate_aglime is None
        assert comp.economics_aglime.cost_per_ac == 0.0

    def test_no_98g_target(self):
        comp = self._compare(target_ph_98g=None)
        assert comp.rate_98g is None
        assert comp.economics_98g.net == -32.0

    def test_maintenance_98g(self):
        comp = self._compare(use_case_98g="Maintenance")
        assert comp.rate_98g.lbs_ac == 250.0

    def test_to_dict(self):
        data = self._compare().to_dict()
        assert set(data) == {"rate_98g", "rate_aglime", "economics_98g", "economics_aglime"}
        assert data["rate_98g"]["material"] == "98G"
