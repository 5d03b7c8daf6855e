"""Splits assembly source into instruction lines."""

from __future__ import annotations

from enum import Enum, auto

_SPACES = frozenset("\n\r\t\v \f")
_CREATE_SUFFIXES = ("IN", "FLOA", "DOUBL", "STRIN", "NI")


class LexState(Enum):
    """States of the lexer's scanner."""

    START = auto()
    READCHAR = auto()
    READBLOCK = auto()
    SKIP = auto()
    DUMP = auto()
    COMMENT = auto()
    END = auto()


def is_space(char):
    """True for the characters the lexer treats as white space."""
    return char in _SPACES


def is_special(char):
    """True for characters that always form a lexeme of their own."""
    return char in ("[", "]")


class Lexer:
    """Turns assembly text into a list of instruction lexemes.

    ``echo``, when given, is called with the text gathered after each label.
    """

    def __init__(self, echo=None):
        self._echo = echo
        self._begin = "\0"
        self._end = "\0"

    def _is_group(self, char):
        self._begin = char
        if char == '"':
            self._end = '"'
            return True
        if char == "(":
            self._end = ")"
            return True
        return char == ")"

    def lex(self, text):
        """Return the lexemes of ``text`` in order."""
        n = len(text)

        def at(k):
            return text[k] if k < n else "\0"

        tokens = []
        lexeme = []
        i = 0
        balance = 0
        state = LexState.START
        label_found = push_mode = jump_mode = creating = calling = False
        self._begin = self._end = "\0"

        def read_while(start, keep):
            k = start
            while k < n and keep(text[k]):
                lexeme.append(text[k])
                k += 1
            return k

        while i < n:
            c = text[i]
            if state is LexState.START:
                if is_space(c):
                    state = LexState.SKIP
                elif self._is_group(c):
                    if c == '"':
                        lexeme.append(c)
                        i += 1
                    state = LexState.READBLOCK
                elif c == "/" and at(i + 1) == "/":
                    i += 2
                    state = LexState.COMMENT
                else:
                    state = LexState.READCHAR

            elif state is LexState.READCHAR:
                if is_space(c):
                    if label_found or push_mode or jump_mode or calling or creating:
                        lexeme.append(c)
                        state = LexState.SKIP
                    else:
                        state = LexState.DUMP
                elif c == "\\":
                    i += 2
                elif self._is_group(c):
                    if c == '"':
                        lexeme.append(c)
                        i += 1
                    state = LexState.READBLOCK
                elif is_special(c):
                    if not lexeme:
                        lexeme.append(c)
                        i += 1
                    state = LexState.DUMP
                elif c == "/" and at(i + 1) == "/":
                    i += 2
                    state = LexState.COMMENT
                else:
                    lexeme.append(c)
                    i += 1
                    word = "".join(lexeme)
                    if word.endswith(_CREATE_SUFFIXES):
                        creating, calling = True, False
                    elif word.endswith("CAL"):
                        creating, calling = False, True
                    if word.endswith(":"):
                        label_found = True
                    if word.endswith("PUSHNUL"):
                        push_mode = False
                    elif word.endswith("PUSH"):
                        push_mode = True
                    elif word.endswith(("JM", "J")):
                        jump_mode = True

            elif state is LexState.READBLOCK:
                if c == self._begin and c != '"':
                    balance += 1
                    lexeme.append(c)
                    i += 1
                elif c == self._end:
                    balance -= 1
                    lexeme.append(c)
                    i += 1
                    if balance <= 0:
                        state = LexState.DUMP
                elif self._end == '"' and c == "\\":
                    i += 2
                else:
                    lexeme.append(c)
                    i += 1

            elif state is LexState.SKIP:
                while is_space(at(i)):
                    i += 1
                if creating:
                    i = read_while(i, lambda ch: ch != "\n")
                    creating = False
                elif calling:
                    i = read_while(i, lambda ch: ch != "\n")
                    calling = False
                elif label_found:
                    i = read_while(i, lambda ch: not is_space(ch))
                    word = "".join(lexeme)
                    if self._echo is not None:
                        self._echo(word)
                    label_found = False
                    if "CALL" in word:
                        calling = True
                    if "PUSHNULL" in word:
                        pass
                    elif "PUSH" in word:
                        push_mode = True
                    elif "JMP" in word or "JZ" in word:
                        jump_mode = True
                elif push_mode:
                    i = read_while(i, lambda ch: not is_space(ch))
                    push_mode = False
                elif jump_mode:
                    i = read_while(i, lambda ch: not is_space(ch))
                    jump_mode = False
                state = LexState.READCHAR

            elif state is LexState.DUMP:
                if lexeme:
                    tokens.append("".join(lexeme))
                    lexeme.clear()
                label_found = push_mode = jump_mode = creating = calling = False
                state = LexState.START

            elif state is LexState.COMMENT:
                if c != "\n":
                    i += 1
                else:
                    state = LexState.READCHAR

            else:
                i = n

        if lexeme:
            tokens.append("".join(lexeme))
        return tokens


def lex(text):
    """Lex ``text`` with a fresh lexer."""
    return Lexer().lex(text)