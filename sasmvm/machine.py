"""The stack machine: loads compiled programs and executes them."""

from __future__ import annotations

import struct
import sys
from functools import partial

from .arithmetic import add, divide, modulo, multiply, subtract
from .comparison import (
    equal,
    greater,
    greater_equal,
    less,
    less_equal,
    not_equal,
)
from .compiler import (
    Program,
    analyze_line,
    compile_program,
    convert_to_primitive,
    is_primitive,
)
from .errors import (
    AddressNotDeclaredError,
    FunctionNotDefinedError,
    InvalidPrimitiveError,
    InvalidTypeError,
    InvalidTypeForOperationError,
    PopEmptyStackError,
    ShortOnElementsOnStackError,
    TopStackNotZeroError,
)
from .values import (
    Op,
    TaggedValue,
    ValueType,
    VMStatus,
    double_value,
    float_value,
    int_value,
    nil_value,
)

__all__ = ["StackVM"]

_DATA_MASK = 0x3FFFFFFF  # integers carry 30 bits of data

# name, symbol, function, whether the value below the top is shown first
_ARITHMETIC = {
    Op.ADD: ("ADD", "+", add, False),
    Op.SUB: ("SUB", "-", subtract, True),
    Op.MUL: ("MUL", "*", multiply, False),
    Op.DIV: ("DIV", "/", divide, True),
}

_COMPARISONS = {
    Op.EQL: ("EQL", "==", equal),
    Op.NEQL: ("NEQL", "!=", not_equal),
    Op.GT: ("GT", ">", greater),
    Op.GTE: ("GTE", ">=", greater_equal),
    Op.LT: ("LT", "<", less),
    Op.LTE: ("LTE", "<=", less_equal),
}


def _display(value):
    """A value as the machine's trace shows it; doubles through their integer view."""
    if value.type is ValueType.DOUBLE:
        low = struct.pack("<d", value.value)[:4]
        return str(struct.unpack("<i", low)[0])
    return str(value)


def _data(token):
    if token.type is ValueType.INT:
        return int_value(token.value & _DATA_MASK)
    return token


class StackVM:
    """A stack machine running compiled instruction lines.

    Trace output goes to ``out``, or to standard output when it is None.
    """

    START_PC = 10

    def __init__(self, out=None):
        self._out = out
        self.stack = []
        self.program = Program()
        self.pc = self.START_PC
        self.tc = 0
        self.next_pc = 0
        self.data = nil_value()
        self.running = True
        self.status = VMStatus.READY

    def _write(self, text):
        (sys.stdout if self._out is None else self._out).write(text)

    # Loading

    def load_instructions(self, lexemes):
        """Compile ``lexemes`` into the machine's program and print the listing."""
        lexemes = list(lexemes)
        for lexeme in lexemes:
            label, operation, operand = analyze_line(lexeme)
            if label or operation or operand:
                self._write(
                    f"Label: {label}   Operat: {operation}   Operand: {operand}\n"
                )
        self.program = compile_program(lexemes)
        self._write(self.program.format_program())
        self._write(self.program.format_labels())
        return self.program

    # Execution

    def _current_line(self):
        return self.program.lines[self.pc]

    def _next_token(self):
        self.tc += 1
        line = self._current_line()
        if self.tc >= len(line):
            raise InvalidTypeError()
        return line[self.tc]

    def _operand(self, expected):
        token = self._next_token()
        if token.type is not expected:
            self._write(f"Error: Type expected {expected.name}.\n")
            raise InvalidTypeError()
        return token.value

    def execute(self, token):
        """Run a primitive token, or push a data token onto the stack."""
        if token.type is ValueType.STRING and is_primitive(token.value):
            self.do_primitive(convert_to_primitive(token.value))
        else:
            self._write(_display(token) + "\t")
            self.stack.append(_data(token))

    def do_primitive(self, op):
        """Carry out one primitive operation."""
        self._write(f"PC: {self.pc}\t")
        handlers = {
            Op.HALT: self._halt,
            Op.PUSHNULL: self.push_null,
            Op.PUSHI: self.push_int,
            Op.PUSHF: self.push_float,
            Op.PUSHD: self.push_double,
            Op.POP: self.pop,
            Op.MOD: self._modulo,
            Op.SWAP: self.swap,
            Op.DUP: self.dup,
            Op.JMP: self.jump,
            Op.JZ: self.jump_if_zero,
            Op.CALL: self.call_function,
            Op.RET: self.ret,
        }
        handlers.update({code: partial(self._arithmetic, code) for code in _ARITHMETIC})
        handlers.update({code: partial(self._compare, code) for code in _COMPARISONS})
        handler = handlers.get(op)
        if handler is None:
            raise InvalidPrimitiveError("")
        handler()

    def _halt(self):
        self._write("HALT\n")
        self.running = False
        self.status = VMStatus.DONE

    def push_null(self):
        """Push the null value."""
        self._write("PUSH NULL\t")
        self.stack.append(nil_value())

    def push_int(self):
        """Push the integer that follows in the instruction line."""
        self._write("PUSH INT: ")
        value = int_value(self._operand(ValueType.INT))
        self.stack.append(value)
        self._write(f"{value}\t")

    def push_float(self):
        """Push the single-precision float that follows in the instruction line."""
        self._write("PUSH FLOAT: ")
        value = float_value(self._operand(ValueType.FLOAT))
        self.stack.append(value)
        self._write(f"{value}\t")

    def push_double(self):
        """Push the double that follows in the instruction line."""
        self._write("PUSH DOUBLE: ")
        value = double_value(self._operand(ValueType.DOUBLE))
        self.stack.append(value)
        self._write(f"{value}\t")

    def pop(self):
        """Discard the top of the stack."""
        if not self.stack:
            raise PopEmptyStackError()
        self._write(f"POP: {self.stack[-1]}\t")
        self.stack.pop()

    def _take_two(self, name):
        if len(self.stack) < 2:
            raise ShortOnElementsOnStackError(name)
        top = self.stack.pop()
        below = self.stack.pop()
        return top, below

    def _arithmetic(self, op):
        name, symbol, function, below_first = _ARITHMETIC[op]
        top, below = self._take_two(name)
        try:
            result = function(top, below)
        except InvalidTypeForOperationError:
            if op is not Op.ADD:
                raise
            # ADD drops mistyped operands and stops the machine instead of raising.
            self.status = VMStatus.ERROR
            return
        self.stack.append(result)
        left, right = (below, top) if below_first else (top, below)
        self._write(
            f"{name} ({result.type.name.lower()}): {left} {symbol} {right} = {result}\t"
        )

    def _modulo(self):
        top, below = self._take_two("MOD")
        result = modulo(top, below)
        self.stack.append(result)
        self._write(f"MOD: {below} % {top} = {result}\t")

    def _compare(self, op):
        name, symbol, function = _COMPARISONS[op]
        top, below = self._take_two(name)
        result = function(top, below)
        self.stack.append(result)
        self._write(
            f"{name} ({top.type.name.lower()}): {top} {symbol} {below} ? {result}\n"
        )

    def swap(self):
        """Exchange the two values on top of the stack."""
        top, below = self._take_two("SWAP")
        self.stack.append(top)
        self.stack.append(below)
        self._write(f"SWAP: {top} <--> {below}")

    def dup(self):
        """Push a copy of the top of the stack."""
        if not self.stack:
            raise ShortOnElementsOnStackError("DUP")
        top = self.stack[-1]
        self.stack.append(top)
        self._write(f"DUP: {top}")

    def jump(self):
        """Run the line at the label that follows, then carry on here."""
        token = self._next_token()
        if token.type is not ValueType.STRING or "label" not in token.value:
            return
        key = token.value
        if key not in self.program.labels:
            raise AddressNotDeclaredError()
        target = self.program.labels[key]
        current = self.pc
        self.pc = target
        self._write(f"Jumping to Label '{key}' @ PC Address: {target}\n")
        self.step(self.program.lines[self.pc])
        self.pc = current

    def jump_if_zero(self):
        """Jump when the top of the stack is a numeric zero."""
        if not self.stack:
            raise ShortOnElementsOnStackError("JZ")
        top = self.stack[-1]
        numeric = (ValueType.INT, ValueType.FLOAT, ValueType.DOUBLE)
        if top.type not in numeric or top.value != 0:
            raise TopStackNotZeroError()
        self.jump()

    def call_function(self):
        """Push the call's arguments and move to the named function."""
        name = self._operand(ValueType.STRING)
        if name not in self.program.labels:
            raise FunctionNotDefinedError(name)
        info = self.program.functions.get(name)
        pushers = {
            ValueType.INT: self.push_int,
            ValueType.FLOAT: self.push_float,
            ValueType.DOUBLE: self.push_double,
        }
        if info is not None:
            for param_type in info.param_types[: len(info.param_names)]:
                pusher = pushers.get(param_type)
                if pusher is not None:
                    pusher()
        self.next_pc = self.pc + 1
        target = self.program.labels[name]
        self._write(f"CALL: Jumping to function {name}\t")
        self.pc = target

    def ret(self):
        """Return to the line after the last call."""
        if not self.stack:
            raise PopEmptyStackError()
        self.pc = self.next_pc - 1
        self._write(f"RET: Returning to address {self.pc}\t")

    def step(self, instruction_line):
        """Execute every token of one instruction line, then advance."""
        self.tc = 0
        while self.tc < len(instruction_line):
            token = instruction_line[self.tc]
            self.data = _data(token)
            self.execute(token)
            self.tc += 1
        self._write(self.format_stack())
        self.pc += 1

    def run(self):
        """Step through the program until it halts or fails."""
        while self.running and self.status is VMStatus.READY:
            self.step(self.program.lines[self.pc])

    def format_stack(self):
        """A line describing the top of the stack."""
        if self.stack:
            return f"    Top of Stack: {_display(self.stack[-1])}\n"
        return "    Stack is empty.\n"