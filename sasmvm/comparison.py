"""Comparisons on tagged values, as the machine's comparison primitives do them.

Every function takes ``a`` (the value popped first, the top of the stack) and
``b`` (the value popped second) and returns an integer value, 1 for true and
0 for false, for ``a <op> b``.

Two strings compare lexicographically. A string against any other type makes
``equal`` give 0 and ``not_equal`` give 1, and the ordering comparisons raise
:class:`InvalidTypeForOperationError`. Nulls behave the same way against other
types; two nulls are equal to each other. Numbers are promoted as in
arithmetic: a double on either side compares as doubles, else a float on
either side compares as single-precision floats, else as integers. An integer
or float mixed with a double reaches double precision through a
single-precision value.
"""

from __future__ import annotations

import operator

from .errors import InvalidTypeForOperationError
from .values import ValueType, int_value, to_float32

__all__ = [
    "equal",
    "not_equal",
    "greater",
    "greater_equal",
    "less",
    "less_equal",
]


def _as_double(value):
    if value.type is ValueType.DOUBLE:
        return float(value.value)
    return to_float32(value.value)


def _flag(condition):
    return int_value(1 if condition else 0)


def _constant(result):
    """A mismatch handler that yields a fixed truth value."""

    def handle(_type_name):
        return _flag(result)

    return handle


def _refuse(string_name, nil_name):
    """A mismatch handler that raises, naming the operation as the machine does."""

    def handle(type_name):
        name = string_name if type_name == "STRING" else nil_name
        raise InvalidTypeForOperationError(name, type_name)

    return handle


def _compare(a, b, op, both_nil, on_mismatch):
    types = (a.type, b.type)

    strings = types.count(ValueType.STRING)
    if strings == 1:
        return on_mismatch("STRING")
    if strings == 2:
        return _flag(op(a.value, b.value))

    nils = types.count(ValueType.NIL)
    if nils == 1:
        return on_mismatch("NIL")
    if nils == 2:
        return _flag(both_nil)

    if ValueType.DOUBLE in types:
        return _flag(op(_as_double(a), _as_double(b)))
    if ValueType.FLOAT in types:
        return _flag(op(to_float32(a.value), to_float32(b.value)))
    return _flag(op(a.value, b.value))


def equal(a, b):
    """1 when ``a`` equals ``b``; values of unlike kinds are never equal."""
    return _compare(a, b, operator.eq, True, _constant(False))


def not_equal(a, b):
    """1 when ``a`` differs from ``b``; values of unlike kinds always differ."""
    return _compare(a, b, operator.ne, False, _constant(True))


def greater(a, b):
    """1 when the top ``a`` is greater than ``b``."""
    return _compare(a, b, operator.gt, False, _refuse("GT", "GT"))


def greater_equal(a, b):
    """1 when the top ``a`` is greater than or equal to ``b``."""
    return _compare(a, b, operator.ge, True, _refuse("GTE", "GTE"))


def less(a, b):
    """1 when the top ``a`` is less than ``b``."""
    return _compare(a, b, operator.lt, False, _refuse("GLT", "GTE"))


def less_equal(a, b):
    """1 when the top ``a`` is less than or equal to ``b``."""
    return _compare(a, b, operator.le, True, _refuse("LTE", "GTE"))