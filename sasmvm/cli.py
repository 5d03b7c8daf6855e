"""Command line: lex and compile an assembly file."""

from __future__ import annotations

import sys

from .errors import VMError
from .lexer import Lexer
from .machine import StackVM


def main(argv=None):
    """Lex and compile the file named on the command line; return the exit code."""
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) != 1:
        print("Usage: sasmvm sasm-filename")
        return 1

    path = argv[0]
    try:
        with open(path, encoding="utf-8") as handle:
            contents = "".join(line.rstrip("\n") + "\n" for line in handle)
    except OSError:
        print(f"Error: could not open [{path}]")
        return 1

    lexemes = Lexer(echo=print).lex(contents)

    print()
    print("Step 1: PARSING...")
    for number, lexeme in enumerate(lexemes):
        print(f"Line {number}: {lexeme}")

    vm = StackVM(out=sys.stdout)

    print()
    print("Step 2: COMPILING...")
    try:
        vm.load_instructions(lexemes)
    except VMError as error:
        print(error, file=sys.stderr)
        return 1

    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())