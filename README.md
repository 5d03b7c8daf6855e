# sasmvm

A small stack virtual machine for a simple assembly language: a lexer, a
compiler that turns lexed lines into instruction lines with label and
function tables, and a machine that executes them. The package also holds a
tiny UDP multicast pairing demo. It has no dependencies beyond the standard
library.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## The assembly language

A program is a text file with one instruction per line. A line may start
with a label (`loop:`), followed by an operation and, for some operations,
an operand. `//` starts a comment.

Operation names the compiler knows: `PUSHI`, `PUSHF`, `PUSHD`, `PUSHNULL`,
`POP`, `ADD`/`+`, `SUB`/`-`, `MUL`/`*`, `DIV`/`/`, `MOD`/`%`, `EQL`/`=`,
`NEQL`/`!=`, `GT`/`>`, `GTE`/`>=`, `LT`/`<`, `LTE`/`<=`, `SWAP`, `DUP`,
`JMP`/`JUMP`, `JZ`/`JUMP_IF_ZERO`, `CALL`, `RET` and `HALT` (most also in
lower case). A function is declared with a return type, a marker starting
with `F` and ending with `@`, and a parameter list, for example
`INT F@ add(INT a, INT b)`, and called with `CALL add(4, 2)`.

Example:

```
PUSHI 4
PUSHI 2
ADD
HALT
```

## The command

```
sasmvm program.sasm
```

lexes the file, prints every lexeme ("Step 1: PARSING..."), then compiles
it ("Step 2: COMPILING..."), printing each analysed line, the compiled
instruction listing and the label map. It returns 1 on a usage error, when
the file cannot be opened, or when compilation raises an error.

## From Python

```python
from sasmvm.lexer import lex
from sasmvm.compiler import compile_program

program = compile_program(lex("PUSHI 4\nPUSHI 2\nADD\n"))
print(program.format_program())
print(program.format_labels())
```

- `sasmvm.lexer`: `Lexer`, `lex(text)`.
- `sasmvm.compiler`: `analyze_line`, `compile_program`, `convert_to_primitive`,
  `create_function_info` and the `Program` it returns (`lines`, `labels`,
  `functions`). A `HALT` line is added when the program does not end with one.
- `sasmvm.values`: `TaggedValue` with `ValueType` tags (`INT`, `FLOAT`,
  `DOUBLE`, `STRING`, `NIL`), the `Op` codes and constructors such as
  `int_value` and `float_value`. Integers wrap to 32 bits, floats round to
  single precision.
- `sasmvm.arithmetic` and `sasmvm.comparison`: the machine's arithmetic and
  comparison rules on tagged values.
- `sasmvm.machine`: `StackVM`, with `load_instructions`, `step`, `run` and
  the individual stack operations. Its trace goes to the `out` stream given
  to it, or to standard output.
- `sasmvm.errors`: every error is a subclass of `VMError`.

## What it does not do

The `sasmvm` command only lexes and compiles; it does not execute the
program. `StackVM.run` begins at program counter `StackVM.START_PC` (10), so
a program is run from its eleventh instruction line, and a shorter program
cannot be run as is. Outside a function declaration, the compiler records
only operands, not the operation names themselves.

## Multicast pairing demo

Two commands pair a sender with a receiver on the multicast group
`239.255.0.1:4950`. Start a receiver:

```
sasmvm-receiver
```

It pairs with the first sender that registers, replies to the group with
`I'm the receiver for Node: <sender id>`, and ignores later registrations.

Then start a sender:

```
sasmvm-sender
```

It picks a random port in 49152–65535, multicasts `Register from
239.255.0.1:<port>`, and takes the text of the first datagram it receives as
its receiver's id. It then reads lines of the form `ReceiverID|Your message`
until `exit` and sends each one whose receiver id matches the paired one.