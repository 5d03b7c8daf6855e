"""Arithmetic on tagged values, following the machine's promotion rules.

Every operation takes ``top`` (the value popped first) and ``below`` (the
value popped second). Subtraction, division and modulo compute
``below <op> top``. A double on either side makes the result a double. Failing
that, a float on either side makes it a float. Otherwise the result is a 32-bit
integer that wraps on overflow. An integer mixed with a double is first
rounded to single precision, as the machine does.
"""

from __future__ import annotations

import operator

from .errors import DivisionByZeroError, InvalidTypeForOperationError
from .values import (
    ValueType,
    double_value,
    float_value,
    int_value,
    to_float32,
)

__all__ = ["add", "subtract", "multiply", "divide", "modulo"]


def _check_operands(name, top, below):
    if ValueType.STRING in (top.type, below.type):
        raise InvalidTypeForOperationError(name, "STRING")
    if ValueType.NIL in (top.type, below.type):
        raise InvalidTypeForOperationError(name, "NIL")


def _as_double(value):
    if value.type is ValueType.DOUBLE:
        return float(value.value)
    # Integers and floats reach double precision through a single-precision value.
    return to_float32(value.value)


def _as_single(value):
    return to_float32(value.value)


def _numeric(top, below, real_op, int_op):
    types = (top.type, below.type)
    if ValueType.DOUBLE in types:
        return double_value(real_op(_as_double(below), _as_double(top)))
    if ValueType.FLOAT in types:
        return float_value(real_op(_as_single(below), _as_single(top)))
    return int_value(int_op(below.value, top.value))


def _is_zero(value):
    return value.type in (ValueType.INT, ValueType.FLOAT, ValueType.DOUBLE) and value.value == 0


def _truncated_div(dividend, divisor):
    quotient = abs(dividend) // abs(divisor)
    return quotient if (dividend < 0) == (divisor < 0) else -quotient


def _truncated_mod(dividend, divisor):
    return dividend - divisor * _truncated_div(dividend, divisor)


def add(a, b):
    """Sum of ``a`` (top of stack) and ``b`` (the value below it)."""
    _check_operands("ADD", a, b)
    return _numeric(a, b, operator.add, operator.add)


def subtract(a, b):
    """``b - a``, where ``a`` is the top of the stack."""
    _check_operands("SUB", a, b)
    return _numeric(a, b, operator.sub, operator.sub)


def multiply(a, b):
    """Product of ``a`` (top of stack) and ``b`` (the value below it)."""
    _check_operands("MUL", a, b)
    return _numeric(a, b, operator.mul, operator.mul)


def divide(a, b):
    """``b / a``, where ``a`` is the top of the stack.

    Integer division truncates toward zero. A zero divisor of any numeric
    type raises :class:`DivisionByZeroError`.
    """
    _check_operands("DIV", a, b)
    if _is_zero(a):
        raise DivisionByZeroError()
    return _numeric(a, b, operator.truediv, _truncated_div)


def modulo(a, b):
    """``b % a`` on integers, with the sign of the dividend ``b``."""
    if a.type is not ValueType.INT or b.type is not ValueType.INT:
        raise InvalidTypeForOperationError("MOD", "!= than INT. Only INT is supported")
    if a.value == 0:
        raise DivisionByZeroError()
    return int_value(_truncated_mod(b.value, a.value))