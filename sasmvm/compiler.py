"""Turns lexed instruction lines into a loadable program."""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .errors import (
    EmptyInstructionLineError,
    FunctionNotDefinedError,
    InvalidOperandError,
    InvalidPrimitiveError,
)
from .values import (
    FunctionInfo,
    Op,
    TaggedValue,
    ValueType,
    double_value,
    float_value,
    int_value,
    string_value,
    to_float32,
)

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

_INT_RE = re.compile(r"\s*([+-]?\d+)")
_FLOAT_RE = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)

_TYPE_WORDS = ("INT", "FLOAT", "DOUBLE", "STRING", "NIL")
_CALL_OPS = frozenset({"CALL", "call"})
_JUMP_OPS = frozenset(
    {
        "JUMP", "JMP", "jump", "jmp",
        "jump_if_zero", "JUMP_IF_ZERO", "JMP_IF_ZERO", "jmp_if_zero", "jz", "JZ",
    }
)
_PUSHI_OPS = frozenset({"PUSHI", "pushi"})
_PUSHF_OPS = frozenset({"PUSHF", "pushf"})
_PUSHD_OPS = frozenset({"PUSHD", "pushd"})
_HIDDEN_IN_FUNCTION = _PUSHI_OPS | _PUSHF_OPS | _PUSHD_OPS

_PARAM_TYPES = {
    "int": ValueType.INT,
    "INT": ValueType.INT,
    "float": ValueType.FLOAT,
    "FLOAT": ValueType.FLOAT,
    "double": ValueType.DOUBLE,
    "DOUBLE": ValueType.DOUBLE,
    "string": ValueType.STRING,
    "STRING": ValueType.STRING,
    "nil": ValueType.NIL,
    "null": ValueType.NIL,
    "NIL": ValueType.NIL,
}

_PRIMITIVES = (
    (("halt", "HALT"), Op.HALT),
    (("POP",), Op.POP),
    (("+", "add", "ADD"), Op.ADD),
    (("-", "sub", "SUB"), Op.SUB),
    (("*", "mul", "MUL"), Op.MUL),
    (("/", "div", "DIV"), Op.DIV),
    (("%", "mod", "MOD"), Op.MOD),
    (("=", "eql", "EQL"), Op.EQL),
    (("!=", "neql", "NEQL"), Op.NEQL),
    ((">", "gt", "GT"), Op.GT),
    ((">=", "gte", "GTE"), Op.GTE),
    (("<", "lt", "LT"), Op.LT),
    (("<=", "lte", "LTE"), Op.LTE),
    (("swap", "SWAP"), Op.SWAP),
    (("dup", "DUP"), Op.DUP),
    (("jump", "JUMP", "JMP", "jmp"), Op.JMP),
    (tuple(_JUMP_OPS - {"JUMP", "JMP", "jump", "jmp"}), Op.JZ),
    (("call", "CALL"), Op.CALL),
    (("ret", "RET"), Op.RET),
)
_PUSH_PRIMITIVES = (
    ("PUSHNULL", Op.PUSHNULL),
    ("PUSHI", Op.PUSHI),
    ("PUSHF", Op.PUSHF),
    ("PUSHD", Op.PUSHD),
)


def is_primitive(text):
    """True when ``text`` is accepted as an operation name.

    Every non-empty name passes, except one that starts with lower-case
    ``push`` and holds no upper-case ``PUSH``.
    """
    if not text:
        return False
    return "PUSH" in text or not text.startswith("push")


def is_label(token):
    """True for a token that ends or starts with a colon."""
    return bool(token) and (token.endswith(":") or token.startswith(":"))


def is_creating_function(token):
    """True for the marker that opens a function definition, such as ``F@``."""
    return bool(token) and token[0] in "fF" and token.endswith("@")


def is_calling_function(token):
    """True for the ``CALL`` keyword."""
    return token == "CALL"


def tokenize(line):
    """Split an instruction line on white space."""
    return line.split()


def _up_to_closing(tokens):
    """Join tokens with a leading space each, cutting each at its first ')'."""
    parts = []
    for token in tokens:
        cut = token.find(")")
        parts.append(" " + (token if cut < 0 else token[: cut + 1]))
    return "".join(parts)


def analyze_line(line):
    """Split a line into its (label, operation, operand) parts."""
    tokens = tokenize(line)
    if not tokens:
        return ("", "", "")

    if len(tokens) > 1 and is_creating_function(tokens[1]):
        signature = tokens[2] if len(tokens) > 2 else ""
        paren = signature.find("(")
        if paren < 0:
            label, operation = signature, ""
        else:
            label, operation = signature[:paren], signature[paren:]
        if len(tokens) > 2:
            operation += _up_to_closing(tokens[3:])
        else:
            operation = "()"
        return (label, operation, tokens[0])

    if is_label(tokens[0]):
        head = tokens[0]
        label = head[:-1] if head.endswith(":") else head
        operation = tokens[1] if len(tokens) > 1 else ""
        operand = tokens[2] if len(tokens) > 2 else ""
        return (label, operation, operand)

    operation = tokens[0]
    operand = ""
    if is_calling_function(operation):
        if len(tokens) > 1:
            operand = _up_to_closing(tokens[1:])
        else:
            operation = "()"
    elif len(tokens) > 1:
        operand = tokens[1]
    return ("", operation, operand)


def convert_to_primitive(text):
    """Map an operation name to its :class:`Op`."""
    if text in ("halt", "HALT"):
        return Op.HALT
    for marker, op in _PUSH_PRIMITIVES:
        if marker in text:
            return op
    for names, op in _PRIMITIVES:
        if text in names:
            return op
    raise InvalidPrimitiveError(text)


def _between_parens(text):
    """The text between the first '(' and the first ')', as the loader reads it."""
    start = text.find("(")
    end = text.find(")")
    if start < 0:
        return text[:end] if end >= 0 else text
    if end > start:
        return text[start + 1 : end]
    return text[start + 1 :]


def create_function_info(label, operation, address):
    """Describe a function from its name and parenthesised parameter list."""
    names = []
    types = []
    words = iter(_between_parens(operation).split())
    var = ""
    for type_name in words:
        var = next(words, var)
        if var.endswith(","):
            var = var[:-1]
        names.append(var)
        if type_name in _PARAM_TYPES:
            types.append(_PARAM_TYPES[type_name])
    return FunctionInfo(label, names, types, address)


def _parse_int(text):
    match = _INT_RE.match(text)
    if match is None:
        raise ValueError(f"not an integer: {text!r}")
    number = int(match.group(1))
    if not _INT32_MIN <= number <= _INT32_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return number


def _parse_real(text):
    match = _FLOAT_RE.match(text)
    if match is None:
        raise ValueError(f"not a number: {text!r}")
    number = float(match.group(1))
    if math.isinf(number) and "inf" not in match.group(1).lower():
        raise ValueError(f"number out of range: {text!r}")
    return number


def _parse_float32(text):
    number = _parse_real(text)
    single = to_float32(number)
    if math.isinf(single) and not math.isinf(number):
        raise ValueError(f"number out of range: {text!r}")
    return single


def _call_arguments(text):
    """Integers separated by single characters, read until one fails."""
    values = []
    pos = 0
    while True:
        match = _INT_RE.match(text, pos)
        if match is None:
            break
        number = int(match.group(1))
        if not _INT32_MIN <= number <= _INT32_MAX:
            break
        values.append(int_value(number))
        pos = match.end()
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if pos >= len(text):
            break
        pos += 1
    return values


def _format_value(value):
    if value.type is ValueType.DOUBLE:
        # The listing shows a double through its integer view.
        low = struct.pack("<d", value.value)[:4]
        return str(struct.unpack("<i", low)[0])
    return str(value)


@dataclass
class Program:
    """Compiled instruction lines with their label and function tables."""

    lines: List[List[TaggedValue]] = field(default_factory=list)
    labels: Dict[str, int] = field(default_factory=dict)
    functions: Dict[str, FunctionInfo] = field(default_factory=dict)

    def format_program(self):
        """The instruction listing, one line per instruction line."""
        rows = [""]
        for number, line in enumerate(self.lines):
            values = "".join(_format_value(value) + " " for value in line)
            rows.append(f"Instruction @ Line {number}: {values}")
        return "\n".join(rows) + "\n"

    def format_labels(self):
        """The label table, sorted by label."""
        rows = ["", "Map contents:"]
        rows.extend(
            f"Label: {label}, PC Address: {address}"
            for label, address in sorted(self.labels.items())
        )
        return "\n".join(rows) + "\n"


def _compile_operand(program, operation, operand, in_function, line):
    if operand in _TYPE_WORDS:
        return
    if operation in _CALL_OPS:
        stripped = operand.lstrip()
        paren = stripped.find("(")
        name = stripped if paren < 0 else stripped[:paren]
        line.append(string_value(name))
        values = _call_arguments(_between_parens(operand))
        info = program.functions.get(name)
        if info is None:
            raise FunctionNotDefinedError(name)
        for _, param_type, value in zip(info.param_names, info.param_types, values):
            if param_type is not ValueType.NIL:
                line.append(value)
    elif operation in _JUMP_OPS:
        line.append(string_value(operand))
    elif operation in _HIDDEN_IN_FUNCTION:
        if operation in _PUSHI_OPS:
            parse, make = _parse_int, int_value
        elif operation in _PUSHF_OPS:
            parse, make = _parse_float32, float_value
        else:
            parse, make = _parse_real, double_value
        try:
            line.append(make(parse(operand)))
        except ValueError:
            # Inside a function the operand may name a parameter.
            if not in_function:
                raise
    else:
        raise InvalidOperandError(operation)


def compile_program(lexemes):
    """Compile lexed instruction lines into a :class:`Program`."""
    program = Program()
    in_function = False

    for number, lexeme in enumerate(lexemes):
        line = []
        label, operation, operand = analyze_line(lexeme)

        if label:
            program.labels[label] = number

        if operation:
            if operation.startswith("("):
                in_function = True
                program.functions[label] = create_function_info(label, operation, number)
            elif is_primitive(operation):
                if in_function and operation not in _HIDDEN_IN_FUNCTION:
                    line.append(string_value(operation))
            else:
                raise InvalidPrimitiveError(operation)

        if operand:
            _compile_operand(program, operation, operand, in_function, line)

        if not label and not operation:
            raise EmptyInstructionLineError()

        program.lines.append(line)

    last = program.lines[-1] if program.lines else []
    if not (last and last[0] == string_value("HALT")):
        program.lines.append([string_value("HALT")])
    return program