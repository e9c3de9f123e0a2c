"""Lime requirement equations (98G and Aglime correction) keyed by selection.

Each equation is text over buffer pH (``BpH``) and water pH (``WpH``). 98G
equations return lbs/ac; Aglime equations return tons/ac before the ECCE
adjustment. Rows are compiled when this module is imported so malformed data
fails at load, not during a calculation.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from calc_engine.applications.expression import Evaluator, compile_equation
from calc_engine.errors import NoMatchingEquation

CORRECTION = "Correction"
MAINTENANCE = "Maintenance"
USE_CASES = (CORRECTION, MAINTENANCE)

MATERIAL_98G = "98G"
MATERIAL_AGLIME = "Aglime"
MATERIALS = (MATERIAL_98G, MATERIAL_AGLIME)

INSTITUTIONS = ("UW", "ISU")

CONVENTIONAL = "Conventional"
NO_TILL = "No-Till"
TILLAGES = (CONVENTIONAL, NO_TILL)

_TILLAGE_ALIASES = {
    "conventional": CONVENTIONAL,
    "no-till": NO_TILL,
    "notill": NO_TILL,
    "no_till": NO_TILL,
}


def _check_choice(value: str, allowed: Tuple[str, ...], what: str) -> str:
    if value not in allowed:
        raise ValueError(f"Unknown {what} '{value}'. Expected one of: {', '.join(allowed)}")
    return value


def normalize_material(material: str) -> str:
    return _check_choice(material, MATERIALS, "material")


def normalize_institution(institution: str) -> str:
    return _check_choice(str(institution).upper(), INSTITUTIONS, "institution")


def normalize_tillage(tillage: str) -> str:
    key = str(tillage).strip().lower()
    if key not in _TILLAGE_ALIASES:
        raise ValueError(f"Unknown tillage '{tillage}'. Expected one of: {', '.join(TILLAGES)}")
    return _TILLAGE_ALIASES[key]


def normalize_use_case(use_case: str) -> str:
    return _check_choice(use_case, USE_CASES, "use case")


def _ph_key(target_ph: float) -> float:
    # Target pH menus are quoted to one or two decimals
    return round(float(target_ph), 2)


@dataclass(frozen=True)
class EquationRow:
    """One lime correction equation."""

    use_case: str
    material: str
    institution: str
    tillage: str
    target_ph: float
    equation: str

    @property
    def key(self) -> Tuple[str, str, str, float]:
        return (self.material, self.institution, self.tillage, _ph_key(self.target_ph))


def _row(material: str, institution: str, tillage: str, target_ph: float, equation: str) -> EquationRow:
    return EquationRow(CORRECTION, material, institution, tillage, target_ph, equation)


EQUATIONS: Tuple[EquationRow, ...] = (
    _row("Aglime", "ISU", "Conventional", 6.0, "((38619 - (5915 * BpH)) * (6 * 0.167)) / 2000"),
    _row("Aglime", "ISU", "Conventional", 6.5, "((49886 - (7245 * BpH)) * (6 * 0.167)) / 2000"),
    _row("Aglime", "ISU", "Conventional", 6.8, "((58776 - (8244 * BpH)) * (6 * 0.167)) / 2000"),
    _row("Aglime", "ISU", "No-Till", 6.0, "((38619 - (5915 * BpH)) * (3 * 0.167)) / 2000"),
    _row("Aglime", "ISU", "No-Till", 6.5, "((49886 - (7245 * BpH)) * (3 * 0.167)) / 2000"),
    _row("Aglime", "ISU", "No-Till", 6.8, "((58776 - (8244 * BpH)) * (3 * 0.167)) / 2000"),
    _row("Aglime", "UW", "Conventional", 5.2, "(36.1 - (3.29 * BpH) - (2.67 * WpH))"),
    _row("Aglime", "UW", "Conventional", 5.4, "(48.2 - (4.84 * BpH) - (3.03 * WpH))"),
    _row("Aglime", "UW", "Conventional", 5.6, "(51 - (5.4 * BpH) - (2.67 * WpH))"),
    _row("Aglime", "UW", "Conventional", 5.8, "(57.2 - (5.55 * BpH) - (3.5 * WpH))"),
    _row("Aglime", "UW", "Conventional", 6.0, "(72.7 - (7.59 * BpH) - (3.78 * WpH))"),
    _row("Aglime", "UW", "Conventional", 6.3, "(103 - (12.6 * BpH) - (3.18 * WpH))"),
    _row("Aglime", "UW", "Conventional", 6.5, "(134 - (17.2 * BpH) - (2.73 * WpH))"),
    _row("Aglime", "UW", "Conventional", 6.6, "(152 - (20.3 * BpH) - (2.17 * WpH))"),
    _row("Aglime", "UW", "Conventional", 6.8, "(195 - (28.4 * BpH) + (0.144 * WpH))"),
    _row("Aglime", "UW", "No-Till", 5.2, "(36.1 - (3.29 * BpH) - (2.67 * WpH)) * 0.5"),
    _row("Aglime", "UW", "No-Till", 5.4, "(48.2 - (4.84 * BpH) - (3.03 * WpH)) * 0.5"),
    _row("Aglime", "UW", "No-Till", 5.6, "(51 - (5.4 * BpH) - (2.67 * WpH)) * 0.5"),
    _row("Aglime", "UW", "No-Till", 5.8, "(57.2 - (5.55 * BpH) - (3.5 * WpH)) * 0.5"),
    _row("Aglime", "UW", "No-Till", 6.0, "(72.7 - (7.59 * BpH) - (3.78 * WpH)) * 0.5"),
    _row("Aglime", "UW", "No-Till", 6.3, "(103 - (12.6 * BpH) - (3.18 * WpH)) * 0.5"),
    _row("Aglime", "UW", "No-Till", 6.5, "(134 - (17.2 * BpH) - (2.73 * WpH)) * 0.5"),
    _row("Aglime", "UW", "No-Till", 6.6, "(152 - (20.3 * BpH) - (2.17 * WpH)) * 0.5"),
    _row("Aglime", "UW", "No-Till", 6.8, "(195 - (28.4 * BpH) + (0.144 * WpH)) * 0.5"),
    _row("98G", "UW", "Conventional", 5.2, "(36.1 - (3.29 * BpH) - (2.67 * WpH)) * 2000 * 0.18"),
    _row("98G", "UW", "Conventional", 5.4, "(48.2 - (4.84 * BpH) - (3.03 * WpH)) * 2000 * 0.18"),
    _row("98G", "UW", "Conventional", 5.6, "(51 - (5.4 * BpH) - (2.67 * WpH)) * 2000 * 0.18"),
    _row("98G", "UW", "Conventional", 5.8, "(57.2 - (5.55 * BpH) - (3.5 * WpH)) * 2000 * 0.18"),
    _row("98G", "UW", "Conventional", 6.0, "(72.7 - (7.59 * BpH) - (3.78 * WpH)) * 2000 * 0.18"),
    _row("98G", "UW", "Conventional", 6.3, "(103 - (12.6 * BpH) - (3.18 * WpH)) * 2000 * 0.18"),
    _row("98G", "UW", "Conventional", 6.5, "(134 - (17.2 * BpH) - (2.73 * WpH)) * 2000 * 0.18"),
    _row("98G", "UW", "Conventional", 6.6, "(152 - (20.3 * BpH) - (2.17 * WpH)) * 2000 * 0.18"),
    _row("98G", "UW", "Conventional", 6.8, "(195 - (28.4 * BpH) + (0.144 * WpH)) * 2000 * 0.18"),
    _row("98G", "UW", "No-Till", 5.2, "(36.1 - (3.29 * BpH) - (2.67 * WpH)) * 2000 * 0.1"),
    _row("98G", "UW", "No-Till", 5.4, "(48.2 - (4.84 * BpH) - (3.03 * WpH)) * 2000 * 0.1"),
    _row("98G", "UW", "No-Till", 5.6, "(51 - (5.4 * BpH) - (2.67 * WpH)) * 2000 * 0.1"),
    _row("98G", "UW", "No-Till", 5.8, "(57.2 - (5.55 * BpH) - (3.5 * WpH)) * 2000 * 0.1"),
    _row("98G", "UW", "No-Till", 6.0, "(72.7 - (7.59 * BpH) - (3.78 * WpH)) * 2000 * 0.1"),
    _row("98G", "UW", "No-Till", 6.3, "(103 - (12.6 * BpH) - (3.18 * WpH)) * 2000 * 0.1"),
    _row("98G", "UW", "No-Till", 6.5, "(134 - (17.2 * BpH) - (2.73 * WpH)) * 2000 * 0.1"),
    _row("98G", "UW", "No-Till", 6.6, "(152 - (20.3 * BpH) - (2.17 * WpH)) * 2000 * 0.1"),
    _row("98G", "UW", "No-Till", 6.8, "(195 - (28.4 * BpH) + (0.144 * WpH)) * 2000 * 0.1"),
)


class EquationTable:
    """Compiled lookup over equation rows, unique per selection key."""

    def __init__(self, rows):
        self._rows: Dict[Tuple[str, str, str, float], EquationRow] = {}
        self._compiled: Dict[Tuple[str, str, str, float], Evaluator] = {}
        for row in rows:
            if row.use_case != CORRECTION:
                raise ValueError(f"Only {CORRECTION} rows belong in the equation table, got {row.use_case!r}")
            normalize_material(row.material)
            normalize_institution(row.institution)
            if row.tillage not in TILLAGES:
                raise ValueError(f"Unknown tillage {row.tillage!r} in equation table")
            if row.key in self._rows:
                raise ValueError(f"Duplicate equation row for {row.key}")
            self._compiled[row.key] = compile_equation(row.equation)
            self._rows[row.key] = row

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def rows(self) -> List[EquationRow]:
        return list(self._rows.values())

    def find(self, material: str, institution: str, tillage: str, target_ph: float) -> Optional[EquationRow]:
        return self._rows.get((material, institution, tillage, _ph_key(target_ph)))

    def lookup(self, material: str, institution: str, tillage: str, target_ph: float) -> Tuple[EquationRow, Evaluator]:
        """Return the matching row and its compiled evaluator or raise NoMatchingEquation."""
        key = (material, institution, tillage, _ph_key(target_ph))
        if key not in self._rows:
            raise NoMatchingEquation(material, institution, tillage, target_ph)
        return self._rows[key], self._compiled[key]

    def target_phs(self, material: str, institution: str, tillage: str) -> List[float]:
        found = {
            key[3] for key in self._rows
            if key[0] == material and key[1] == institution and key[2] == tillage
        }
        return sorted(found)


EQUATION_TABLE = EquationTable(EQUATIONS)
