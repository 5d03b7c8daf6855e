import math

import pytest

from sasmvm.arithmetic import add, divide, modulo, multiply, subtract
from sasmvm.errors import DivisionByZeroError, InvalidTypeForOperationError
from sasmvm.values import (
    ValueType,
    double_value,
    float_value,
    int_value,
    nil_value,
    string_value,
    to_float32,
)

NUMBERS = [
    int_value(7),
    int_value(-3),
    float_value(2.5),
    float_value(-0.75),
    double_value(1.25),
    double_value(-8.5),
]

REJECTED = [
    (string_value("a"), int_value(1), "STRING"),
    (int_value(1), string_value("a"), "STRING"),
    (nil_value(), float_value(1.0), "NIL"),
    (double_value(1.0), nil_value(), "NIL"),
    (string_value("a"), nil_value(), "STRING"),
    (nil_value(), string_value("a"), "STRING"),
]


@pytest.mark.parametrize("value", NUMBERS)
def test_add_zero_is_identity(value):
    zero = {
        ValueType.INT: int_value(0),
        ValueType.FLOAT: float_value(0.0),
        ValueType.DOUBLE: double_value(0.0),
    }[value.type]
    assert add(zero, value) == value
    assert add(value, zero) == value


@pytest.mark.parametrize("a", NUMBERS)
@pytest.mark.parametrize("b", NUMBERS)
def test_add_and_multiply_commute(a, b):
    assert add(a, b) == add(b, a)
    assert multiply(a, b) == multiply(b, a)


@pytest.mark.parametrize(
    "a, b, expected_type",
    [
        (int_value(1), int_value(2), ValueType.INT),
        (int_value(1), float_value(2.0), ValueType.FLOAT),
        (float_value(1.0), float_value(2.0), ValueType.FLOAT),
        (float_value(1.0), double_value(2.0), ValueType.DOUBLE),
        (int_value(1), double_value(2.0), ValueType.DOUBLE),
        (double_value(1.0), double_value(2.0), ValueType.DOUBLE),
    ],
)
def test_result_type_promotion(a, b, expected_type):
    for op in (add, subtract, multiply, divide):
        assert op(a, b).type is expected_type
        assert op(b, a).type is expected_type


def test_subtract_takes_top_from_below():
    assert subtract(int_value(0), int_value(7)) == int_value(7)
    assert subtract(int_value(7), int_value(0)) == int_value(-7)


@pytest.mark.parametrize("top, below", [(3, 10), (-4, 9), (100, -100), (0, 5)])
def test_subtract_then_add_round_trip(top, below):
    difference = subtract(int_value(top), int_value(below))
    assert add(int_value(top), difference) == int_value(below)


def test_integer_overflow_wraps():
    result = add(int_value(2**31 - 1), int_value(1))
    assert result.type is ValueType.INT
    assert result.value == -(2**31)


def test_float_results_are_single_precision():
    result = add(float_value(0.1), float_value(0.2))
    assert result.value == to_float32(result.value)
    assert result.value == to_float32(to_float32(0.1) + to_float32(0.2))


def test_integer_meets_double_through_single_precision():
    big = 2**24 + 1
    result = add(double_value(0.0), int_value(big))
    assert result.type is ValueType.DOUBLE
    assert result.value == to_float32(big)
    assert result.value != float(big)


@pytest.mark.parametrize("value", NUMBERS)
def test_multiply_by_one_and_divide_by_one(value):
    one = {
        ValueType.INT: int_value(1),
        ValueType.FLOAT: float_value(1.0),
        ValueType.DOUBLE: double_value(1.0),
    }[value.type]
    assert multiply(one, value) == value
    assert divide(one, value) == value


@pytest.mark.parametrize(
    "divisor, dividend",
    [(3, 7), (3, -7), (-3, 7), (-3, -7), (5, 25), (7, 2), (-7, -2), (1, -9)],
)
def test_integer_division_and_modulo_agree(divisor, dividend):
    a, b = int_value(divisor), int_value(dividend)
    quotient = divide(a, b)
    remainder = modulo(a, b)
    assert add(multiply(quotient, a), remainder) == b
    assert abs(remainder.value) < abs(divisor)
    assert remainder.value == 0 or (remainder.value < 0) == (dividend < 0)


def test_integer_division_truncates_toward_zero():
    assert divide(int_value(2), int_value(-7)) == int_value(-3)


def test_real_division_inverts_multiplication():
    a = double_value(4.0)
    b = double_value(10.0)
    assert multiply(a, divide(a, b)) == b


@pytest.mark.parametrize(
    "zero", [int_value(0), float_value(0.0), double_value(0.0), double_value(-0.0)]
)
@pytest.mark.parametrize("dividend", NUMBERS)
def test_divide_by_zero_raises(zero, dividend):
    with pytest.raises(DivisionByZeroError):
        divide(zero, dividend)


def test_zero_dividend_is_allowed():
    assert divide(double_value(2.0), double_value(0.0)) == double_value(0.0)


def test_modulo_by_zero_raises():
    with pytest.raises(DivisionByZeroError):
        modulo(int_value(0), int_value(5))


@pytest.mark.parametrize(
    "a, b",
    [
        (float_value(2.0), int_value(5)),
        (int_value(2), double_value(5.0)),
        (string_value("x"), int_value(5)),
        (nil_value(), int_value(5)),
        (float_value(0.0), int_value(5)),
    ],
)
def test_modulo_requires_integers(a, b):
    with pytest.raises(InvalidTypeForOperationError) as info:
        modulo(a, b)
    assert info.value.operation == "MOD"
    assert "Only INT is supported" in str(info.value)


@pytest.mark.parametrize("a, b, type_name", REJECTED)
def test_add_rejects_strings_and_nil(a, b, type_name):
    with pytest.raises(InvalidTypeForOperationError) as info:
        add(a, b)
    assert info.value.operation == "ADD"
    assert info.value.type_name == type_name


@pytest.mark.parametrize("a, b, type_name", REJECTED)
def test_subtract_rejects_strings_and_nil(a, b, type_name):
    with pytest.raises(InvalidTypeForOperationError) as info:
        subtract(a, b)
    assert info.value.operation == "SUB"
    assert info.value.type_name == type_name


@pytest.mark.parametrize("a, b, type_name", REJECTED)
def test_multiply_rejects_strings_and_nil(a, b, type_name):
    with pytest.raises(InvalidTypeForOperationError) as info:
        multiply(a, b)
    assert info.value.operation == "MUL"
    assert info.value.type_name == type_name


@pytest.mark.parametrize("a, b, type_name", REJECTED)
def test_divide_rejects_strings_and_nil(a, b, type_name):
    with pytest.raises(InvalidTypeForOperationError) as info:
        divide(a, b)
    assert info.value.operation == "DIV"
    assert info.value.type_name == type_name


def test_divide_checks_types_before_zero():
    with pytest.raises(InvalidTypeForOperationError):
        divide(int_value(0), string_value("a"))


def test_nan_propagates_through_doubles():
    result = add(double_value(math.nan), int_value(1))
    assert result.type is ValueType.DOUBLE
    assert math.isnan(result.value)


def test_float_overflow_becomes_infinity():
    huge = float_value(3.0e38)
    result = multiply(huge, huge)
    assert result.type is ValueType.FLOAT
    assert math.isinf(result.value) and result.value > 0