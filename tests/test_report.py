"""Tests for plain-text result formatting."""

from dataclasses import replace

from calc_engine.applications.fertilizer_acidity import AcidityRow, run_fertilizer_acidity
from calc_engine.applications.gypsum_rates import run_high_mg, run_sodic
from calc_engine.applications.lime_rates import calc_98g
from calc_engine.applications.ph_efficiency import FertChoice, run_ph_efficiency
from calc_engine.evaluation.report import (
    format_acidity,
    format_high_mg,
    format_lime_rate,
    format_ph_efficiency,
    format_sodic,
    format_table,
)


class TestFormatTable:
    def test_alignment(self):
        text = format_table("T", ["Name", "Value"], [["a", "1"], ["long", "100"]])
        lines = text.splitlines()
        assert lines[0] == "T"
        assert lines[2] == "Name  Value"
        assert lines[4] == "a         1"
        assert lines[5] == "long    100"


class TestFormatResults:
    def test_lime_rate(self):
        text = format_lime_rate(calc_98g("UW", "Conventional", 5.7, 6.4, 6.0))
        assert "950" in text
        assert "0.46" in text

    def test_maintenance_label(self):
        text = format_lime_rate(calc_98g("UW", "Conventional", 5.7, 6.4, use_case="Maintenance"))
        assert "maintenance" in text

    def test_acidity_lists_skipped(self):
        result = run_fertilizer_acidity([AcidityRow("Urea", units_n=100), AcidityRow("Compost", units_n=5)])
        text = format_acidity(result)
        assert "Total" in text
        assert "191" in text
        assert text.endswith("Skipped unknown fertilizers: Compost")

    def test_ph_efficiency(self, corn_inputs):
        text = format_ph_efficiency(run_ph_efficiency(corn_inputs))
        assert "$179.04" in text
        assert "pH 6.0" in text

    def test_ph_efficiency_lists_skipped(self, corn_inputs):
        text = format_ph_efficiency(run_ph_efficiency(replace(corn_inputs, k=FertChoice("Potash", 400))))
        assert text.endswith("Skipped unknown fertilizers: Potash")

    def test_notes_rendered(self):
        assert "Note: CEC must be > 0" in format_high_mg(run_high_mg(0, 25, 15))
        assert "Note: Base saturation %Na was derived from ppm." in format_sodic(run_sodic(10, sodium_ppm=230))
