"""Static fertilizer, utilization and crop removal tables."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from calc_engine.errors import UnknownFertilizer

NUTRIENTS = ("N", "P2O5", "K2O", "S")


@dataclass(frozen=True)
class Analysis:
    """Guaranteed analysis, percent by weight."""

    N: float = 0.0
    P2O5: float = 0.0
    K2O: float = 0.0
    S: float = 0.0

    def get(self, nutrient: str) -> float:
        if nutrient not in NUTRIENTS:
            raise ValueError(f"Unknown nutrient '{nutrient}'. Expected one of: {', '.join(NUTRIENTS)}")
        return getattr(self, nutrient)

    @property
    def total(self) -> float:
        return self.N + self.P2O5 + self.K2O + self.S


@dataclass(frozen=True)
class FertilizerEntry:
    id: str
    label: str
    analysis: Analysis
    primary: Tuple[str, ...]
    default_price: float  # $/ton


def _entry(fid: str, label: str, n: float, p: float, k: float, s: float,
           primary: str, price: float) -> Tuple[str, FertilizerEntry]:
    return fid, FertilizerEntry(fid, label, Analysis(n, p, k, s), (primary,), price)


FERT_CATALOG: Dict[str, FertilizerEntry] = dict([
    # N
    _entry("NH3", "Anhydrous Ammonia (82-0-0)", 82, 0, 0, 0, "N", 550),
    _entry("Urea46", "Urea (46-0-0)", 46, 0, 0, 0, "N", 500),
    _entry("UAN32", "32 % UAN (32-0-0)", 32, 0, 0, 0, "N", 350),
    _entry("UAN28", "28 % UAN (28-0-0)", 28, 0, 0, 0, "N", 330),
    _entry("AN34", "Ammonium Nitrate (34-0-0)", 34, 0, 0, 0, "N", 520),
    # P
    _entry("MAP11-52", "Monoammonium Phosphate (MAP 11-52-0)", 11, 52, 0, 0, "P2O5", 850),
    _entry("DAP18-46", "Diammonium Phosphate (DAP 18-46-0)", 18, 46, 0, 0, "P2O5", 820),
    _entry("APP-10-34-0", "Ammonium Polyphosphate (10-34-0)", 10, 34, 0, 0, "P2O5", 780),
    _entry("MES-S10", "MicroEssentials S10 (12-40-0-10S)", 12, 40, 0, 10, "P2O5", 900),
    _entry("MES-S15", "MicroEssentials S15 (13-33-0-15S)", 13, 33, 0, 15, "P2O5", 900),
    _entry("MES-SZ", "MicroEssentials SZ (12-40-0-10S)", 12, 40, 0, 10, "P2O5", 900),
    _entry("FortyRock", "40 Rock (0-28-0)", 0, 28, 0, 0, "P2O5", 500),
    _entry("SSP", "Single Superphosphate (0-20-0-12S)", 0, 20, 0, 12, "P2O5", 520),
    _entry("TSP", "Triple Superphosphate (0-46-0)", 0, 46, 0, 0, "P2O5", 780),
    _entry("Croplex-12-40-0", "Croplex 12-40-0", 12, 40, 0, 0, "P2O5", 880),
    _entry("Croplex-13-33-0", "Croplex 13-33-0", 13, 33, 0, 0, "P2O5", 870),
    # K
    _entry("KCl60", "Potassium Chloride 60 %", 0, 0, 60, 0, "K2O", 400),
    _entry("KCl62", "Potassium Chloride 62 %", 0, 0, 62, 0, "K2O", 420),
    _entry("K2SO4-50", "Potassium Sulfate (0-0-50-18S)", 0, 0, 50, 18, "K2O", 600),
    _entry("KTS-0-0-25-17S", "Potassium Thiosulfate (0-0-25-17S)", 0, 0, 25, 17, "K2O", 580),
    # S
    _entry("AMS-21-24S", "Ammonium Sulfate (21-0-0-24S)", 21, 0, 0, 24, "S", 550),
    _entry("ATS-12-0-0-26S", "Ammonium Thiosulfate (12-0-0-26S)", 12, 0, 0, 26, "S", 520),
    _entry("SO4-17S", "SO4 Pelletized Gypsum (0-0-0-17S)", 0, 0, 0, 17, "S", 150),
    _entry("ElemS-90", "Elemental Sulfur 90 %", 0, 0, 0, 90, "S", 400),
    _entry("ElemS-85", "Elemental Sulfur 85 %", 0, 0, 0, 85, "S", 380),
])

DEFAULT_PRICE: Dict[str, float] = {fid: e.default_price for fid, e in FERT_CATALOG.items()}


def get_fertilizer(fertilizer_id: str) -> FertilizerEntry:
    try:
        return FERT_CATALOG[fertilizer_id]
    except KeyError:
        raise UnknownFertilizer(fertilizer_id) from None


def list_fertilizers_for(nutrient: str) -> List[Dict[str, str]]:
    """Products listed in the menu for one nutrient, in catalog order."""
    if nutrient not in NUTRIENTS:
        raise ValueError(f"Unknown nutrient '{nutrient}'. Expected one of: {', '.join(NUTRIENTS)}")
    return [
        {"id": fid, "label": entry.label}
        for fid, entry in FERT_CATALOG.items()
        if nutrient in entry.primary
    ]


# Supported soil pH menu, ascending
ALLOWED_PHS = (5.0, 5.2, 5.4, 5.6, 5.8, 6.0, 6.3, 6.5, 6.8)

# Fraction of applied nutrient utilized at each soil pH bucket
UTILIZATION: Dict[float, Dict[str, float]] = {
    5.0: {"N": 0.53, "P2O5": 0.34, "K2O": 0.52, "S": 0.85},
    5.2: {"N": 0.58, "P2O5": 0.40, "K2O": 0.55, "S": 0.86},
    5.4: {"N": 0.63, "P2O5": 0.48, "K2O": 0.58, "S": 0.88},
    5.6: {"N": 0.68, "P2O5": 0.57, "K2O": 0.63, "S": 0.90},
    5.8: {"N": 0.73, "P2O5": 0.66, "K2O": 0.70, "S": 0.92},
    6.0: {"N": 0.78, "P2O5": 0.75, "K2O": 0.78, "S": 0.95},
    6.3: {"N": 0.85, "P2O5": 0.86, "K2O": 0.88, "S": 0.98},
    6.5: {"N": 0.90, "P2O5": 0.92, "K2O": 0.93, "S": 1.00},
    6.8: {"N": 0.95, "P2O5": 0.96, "K2O": 0.96, "S": 1.00},
}

# lbs nutrient removed per unit yield (bu/ac; tons/ac for alfalfa)
CROP_REMOVAL: Dict[str, Dict[str, float]] = {
    "Corn Grain": {"N": 1.00, "P2O5": 0.32, "K2O": 0.22, "S": 0.08},
    "Soybean": {"N": 0.00, "P2O5": 0.80, "K2O": 1.40, "S": 0.10},
    "Wheat": {"N": 1.20, "P2O5": 0.60, "K2O": 0.35, "S": 0.08},
    "Alfalfa": {"N": 0.00, "P2O5": 1.30, "K2O": 5.50, "S": 0.25},
}
CROPS = tuple(CROP_REMOVAL)


@dataclass(frozen=True)
class AcidificationCoefficient:
    """lbs CaCO3 required per lb of N applied and per lb of acidifying S."""

    n: Optional[float] = None
    s: Optional[float] = None


ELEMENTAL_SULFUR = "Elemental Sulfur (ES)"
MES_SZ = "MicroEssentials SZ (MES-SZ)"
MES_S10 = "MicroEssentials S10 (MES-S10)"
MES_S15 = "MicroEssentials S15 (MES-S15)"

ACIDIFICATION_COEFFICIENTS: Dict[str, AcidificationCoefficient] = {
    "Anhydrous Ammonia (AA)": AcidificationCoefficient(n=1.8),
    "Urea": AcidificationCoefficient(n=1.8),
    "Ammonium Sulfate (AMS)": AcidificationCoefficient(n=5.4),
    "Monoammonium Phosphate (MAP)": AcidificationCoefficient(n=5.4),
    "Diammonium Phosphate (DAP)": AcidificationCoefficient(n=3.6),
    "Ammonium Nitrate (AN)": AcidificationCoefficient(n=1.8),
    "Urea Ammonium Nitrate (UAN)": AcidificationCoefficient(n=1.8),
    MES_SZ: AcidificationCoefficient(n=5.4, s=3.0),
    MES_S10: AcidificationCoefficient(n=5.4, s=3.0),
    MES_S15: AcidificationCoefficient(n=5.4, s=3.0),
    ELEMENTAL_SULFUR: AcidificationCoefficient(s=3.0),
}

# Label analyses (%N, %S) for MES products; half of their S is elemental
MES_ANALYSIS: Dict[str, Tuple[float, float]] = {
    MES_SZ: (12.0, 10.0),   # 12-40-0-10S-1Zn
    MES_S10: (12.0, 10.0),  # 12-40-0-10S
    MES_S15: (13.0, 15.0),  # 13-33-0-15S
}

# Label analyses (%N, %S) used to turn product rates into nutrient units
PRODUCT_ANALYSIS: Dict[str, Tuple[Optional[float], Optional[float]]] = {
    "Anhydrous Ammonia (AA)": (82.0, None),
    "Urea": (46.0, None),
    "Ammonium Sulfate (AMS)": (21.0, 24.0),  # sulfate S does not acidify
    "Monoammonium Phosphate (MAP)": (11.0, None),
    "Diammonium Phosphate (DAP)": (18.0, None),
    "Ammonium Nitrate (AN)": (34.0, None),
    "Urea Ammonium Nitrate (UAN)": (32.0, None),
    MES_SZ: (12.0, 10.0),
    MES_S10: (12.0, 10.0),
    MES_S15: (13.0, 15.0),
    ELEMENTAL_SULFUR: (None, 90.0),
}


def get_acidification_coefficient(fertilizer: str) -> AcidificationCoefficient:
    try:
        return ACIDIFICATION_COEFFICIENTS[fertilizer]
    except KeyError:
        raise UnknownFertilizer(fertilizer) from None
