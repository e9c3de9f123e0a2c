"""Shared test fixtures for calc-engine tests."""

import pandas as pd
import pytest

from calc_engine.applications.ph_efficiency import FertChoice, PhEfficiencyInput


@pytest.fixture
def corn_inputs():
    """Corn grain at 200 bu/ac, pH 6.0, with common N/P/K/S products."""
    return PhEfficiencyInput(
        crop="Corn Grain",
        yield_goal=200,
        soil_ph=6.0,
        n=FertChoice("Urea46", 500),
        p=FertChoice("MAP11-52", 850),
        k=FertChoice("KCl60", 400),
        s=FertChoice("AMS-21-24S", 550),
    )


@pytest.fixture
def soil_tests():
    """Three cleaned soil tests, one missing its buffer pH."""
    return pd.DataFrame({
        "site_id": ["N1", "N2", "S1"],
        "soil_ph": [5.7, 6.1, 5.4],
        "buffer_ph": [6.4, 6.6, None],
        "cec": [20.0, 10.0, 0.0],
        "mg_pct": [25.0, 12.0, 30.0],
        "na_pct": [10.0, 4.0, 8.0],
        "yield_goal": [200.0, 60.0, 5.0],
        "sulfur_ppm": [10.0, 4.0, 10.0],
        "om_pct": [3.0, 2.0, 2.0],
        "crop": ["Corn", "Soybean", "Alfalfa"],
    })
