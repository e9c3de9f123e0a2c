"""Error types raised by the calculators."""


class CalcEngineError(Exception):
    """Base class for calculator errors."""


class NoMatchingEquation(CalcEngineError, LookupError):
    """No equation row exists for the requested lime selection."""

    def __init__(self, material: str, institution: str, tillage: str, target_ph: float):
        self.material = material
        self.institution = institution
        self.tillage = tillage
        self.target_ph = target_ph
        super().__init__(
            f"No {material} equation for {institution} ({tillage}) at target pH {target_ph}"
        )


class UnsafeExpression(CalcEngineError, ValueError):
    """Equation text contains a token outside the allowed grammar."""


class NonFiniteResult(CalcEngineError, ArithmeticError):
    """Equation evaluated to NaN or infinity."""


class UnknownFertilizer(CalcEngineError, KeyError):
    """Fertilizer id is not present in the relevant catalog."""

    def __init__(self, fertilizer: str):
        self.fertilizer = fertilizer
        super().__init__(fertilizer)

    def __str__(self) -> str:
        return f"Unknown fertilizer: {self.fertilizer}"
