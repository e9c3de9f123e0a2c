"""Tests for the restricted equation compiler."""

import pytest

from calc_engine.applications.expression import compile_equation
from calc_engine.errors import NonFiniteResult, UnsafeExpression


class TestCompileEquation:
    def test_linear_equation(self):
        f = compile_equation("(36.1 - (3.29 * BpH) - (2.67 * WpH))")
        assert abs(f(6.4, 5.7) - (-0.175)) < 1e-9

    def test_buffer_and_water_ph_bound_by_position(self):
        f = compile_equation("BpH - WpH")
        assert f(6.0, 5.0) == 1.0

    def test_unary_minus(self):
        assert compile_equation("-BpH + 10")(4.0, 0.0) == 6.0

    def test_math_namespace_functions(self):
        assert compile_equation("Math.sqrt(BpH)")(4.0, 0.0) == 2.0
        assert compile_equation("math.pow(WpH, 2)")(0.0, 3.0) == 9.0
        assert compile_equation("Math.max(BpH, WpH, 7)")(6.0, 5.0) == 7.0

    def test_math_round_ties_up(self):
        assert compile_equation("Math.round(BpH)")(2.5, 0.0) == 3.0
        assert compile_equation("Math.round(BpH)")(-2.5, 0.0) == -2.0

    def test_math_constant(self):
        f = compile_equation("Math.PI * 2")
        assert abs(f(0.0, 0.0) - 6.283185307) < 1e-8

    def test_integer_literals_evaluate_as_float(self):
        value = compile_equation("1 / 2")(0.0, 0.0)
        assert isinstance(value, float)
        assert value == 0.5


class TestRejectedExpressions:
    @pytest.mark.parametrize("source", [
        "BpH ** 2",
        "x + 1",
        "__import__('os').system('ls')",
        "os.system('ls')",
        "Math.foo(1)",
        "Math.sqrt",
        "Math.sqrt()",
        "Math.max(BpH, key=1)",
        "'6.0'",
        "True + BpH",
        "BpH if WpH else 0",
        "[BpH]",
        "BpH < WpH",
        "lambda: 1",
        "BpH % 2",
    ])
    def test_disallowed_syntax(self, source):
        with pytest.raises(UnsafeExpression):
            compile_equation(source)

    def test_empty_text(self):
        with pytest.raises(UnsafeExpression):
            compile_equation("   ")

    def test_parse_error(self):
        with pytest.raises(UnsafeExpression):
            compile_equation("1 +")

    def test_unsafe_expression_is_value_error(self):
        with pytest.raises(ValueError):
            compile_equation("x")


class TestNonFiniteResults:
    def test_division_by_zero(self):
        f = compile_equation("1 / (BpH - WpH)")
        with pytest.raises(NonFiniteResult):
            f(6.0, 6.0)

    def test_domain_error(self):
        f = compile_equation("Math.log(BpH - WpH)")
        with pytest.raises(NonFiniteResult):
            f(6.0, 6.0)

    def test_overflow(self):
        f = compile_equation("Math.exp(BpH)")
        with pytest.raises(NonFiniteResult):
            f(1000.0, 0.0)

    def test_finite_inputs_still_evaluate(self):
        f = compile_equation("1 / (BpH - WpH)")
        assert f(6.0, 5.0) == 1.0
