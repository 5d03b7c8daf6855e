"""Instruction codes, tagged values and function descriptions."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Union


class Op(IntEnum):
    """Primitive operations of the machine."""

    NOP = 0
    PUSHNULL = 1
    PUSHI = 2
    PUSHF = 3
    PUSHD = 4
    POP = 5
    ADD = 6
    SUB = 7
    MUL = 8
    DIV = 9
    MOD = 10
    EQL = 11
    NEQL = 12
    GT = 13
    GTE = 14
    LT = 15
    LTE = 16
    SWAP = 17
    DUP = 18
    JMP = 19
    JZ = 20
    CALL = 21
    RET = 22
    HALT = 23


class ValueType(Enum):
    """Type tag carried by every value."""

    INT = 0
    FLOAT = 1
    DOUBLE = 2
    STRING = 3
    NIL = 4


class VMStatus(Enum):
    """Run state of the machine."""

    READY = 0
    DONE = 1
    ERROR = 2


def to_float32(value):
    """Round a number to the nearest single-precision float."""
    try:
        return struct.unpack("<f", struct.pack("<f", float(value)))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _wrap_int32(value):
    value = int(value) & 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


Payload = Optional[Union[int, float, str]]


@dataclass(frozen=True)
class TaggedValue:
    """A value together with its type tag."""

    type: ValueType = ValueType.NIL
    value: Payload = None

    def is_nil(self):
        return self.type is ValueType.NIL

    def __str__(self):
        if self.type is ValueType.INT:
            return str(self.value)
        if self.type in (ValueType.FLOAT, ValueType.DOUBLE):
            return f"{self.value:g}"
        if self.type is ValueType.STRING:
            return self.value
        return "NULL"


def int_value(value):
    """A 32-bit signed integer value."""
    return TaggedValue(ValueType.INT, _wrap_int32(value))


def float_value(value):
    """A single-precision float value."""
    return TaggedValue(ValueType.FLOAT, to_float32(value))


def double_value(value):
    """A double-precision float value."""
    return TaggedValue(ValueType.DOUBLE, float(value))


def string_value(value):
    """A string value."""
    return TaggedValue(ValueType.STRING, str(value))


def nil_value():
    """The null value."""
    return TaggedValue()


@dataclass
class FunctionInfo:
    """A declared function: its name, parameters and start address."""

    function_name: str
    param_names: List[str] = field(default_factory=list)
    param_types: List[ValueType] = field(default_factory=list)
    address: int = 0