"""Errors raised while compiling or running a stack-machine program."""


class VMError(Exception):
    """Base class for every error reported by the virtual machine."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class EmptyInstructionLineError(VMError):
    """An instruction line holds neither a label nor an operation."""

    def __init__(self):
        super().__init__(
            "Error 1: EmptyInstructionLineException -- The instruction line does not "
            "contain neither a Label nor an Operation!"
        )


class InvalidPrimitiveError(VMError):
    """An operation name is not a known primitive."""

    def __init__(self, operation):
        self.operation = operation
        super().__init__(
            f"Error 2: InvalidPrimitiveException -- Primitive {operation} not identified!"
        )


class InvalidOperandError(VMError):
    """An operation was given an operand it does not accept."""

    def __init__(self, operation):
        self.operation = operation
        super().__init__(
            f"Error 3: InvalideOperandException -- Operation {operation} "
            "does NOT accept an operand!"
        )


class InvalidTypeError(VMError):
    """A value carries a type the machine does not know."""

    def __init__(self):
        super().__init__("Error 4: InvalidTypeException -- Type not identified!")


class InvalidTypeForOperationError(VMError):
    """An operation was applied to a value of an unsupported type."""

    def __init__(self, operation, type_name):
        self.operation = operation
        self.type_name = type_name
        super().__init__(
            f"Error 5: InvalidTypeForOperationException -- Cannot perform {operation} "
            f"operation with a type {type_name}!"
        )


class ShortOnElementsOnStackError(VMError):
    """The stack holds too few values for an operation."""

    def __init__(self, operation):
        self.operation = operation
        super().__init__(
            "Error 6: ShortOnElementsOnStackException -- Stack has not enough elements "
            f"to perform the {operation} operation."
        )


class PopEmptyStackError(VMError):
    """A value was popped from an empty stack."""

    def __init__(self):
        super().__init__(
            "Error 7: PopEmptyStackException -- Stack is Empty and cannot perform POP operation!"
        )


class DivisionByZeroError(VMError):
    """A division or modulo had a zero divisor."""

    def __init__(self):
        super().__init__(
            "Error 8: DivisionByZeroException -- Cannot perform Division by Zero."
        )


class AddressNotDeclaredError(VMError):
    """A jump named a label that was never declared."""

    def __init__(self):
        super().__init__(
            "Error 9: AddressNotDecleredException -- Label was not decleared before "
            "this JMP operation."
        )


class TopStackNotZeroError(VMError):
    """A jump-if-zero found a non-zero value on top of the stack."""

    def __init__(self):
        super().__init__(
            "Error 10: TopStackNotZeroException --  Cannot perform JZ (JUMP_IF-ZERO) "
            "because Top of the Stack is not Zero."
        )


class FunctionNotDefinedError(VMError):
    """A call named a function that was never defined."""

    def __init__(self, function_name):
        self.function_name = function_name
        super().__init__(
            "Error 11: FunctionNotDefinedException --  Cannot CALL the function "
            f"'{function_name}', make sure the function is defined before it's called."
        )