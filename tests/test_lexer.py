import pytest

from sasmvm.lexer import Lexer, is_space, is_special, lex


@pytest.mark.parametrize("char", ["\n", "\r", "\t", "\v", " ", "\f"])
def test_space_characters(char):
    assert is_space(char)


@pytest.mark.parametrize("char", ["a", "0", "\0", ""])
def test_non_space_characters(char):
    assert not is_space(char)


def test_special_characters():
    assert is_special("[") and is_special("]")
    assert not is_special("(")


def test_simple_program():
    source = "PUSHI 5\nPUSHI 3\nADD\nHALT\n"
    assert lex(source) == ["PUSHI 5", "PUSHI 3", "ADD", "HALT"]


def test_empty_text():
    assert lex("") == []


def test_last_line_without_newline():
    assert lex("ADD") == ["ADD"]


def test_plain_words_split_on_space():
    assert lex("ADD SUB\n") == ["ADD", "SUB"]


def test_label_keeps_push_operand():
    assert lex("label1: PUSHI 10\n") == ["label1: PUSHI 10"]


def test_label_is_echoed():
    seen = []
    Lexer(echo=seen.append).lex("label1: PUSHI 10\n")
    assert seen == ["label1: PUSHI"]


def test_function_definition_kept_whole():
    line = "INT f@ sum(INT a, INT b)"
    assert lex(line + "\n") == [line]


def test_call_kept_whole():
    assert lex("CALL sum(3, 4)\n") == ["CALL sum(3, 4)"]


@pytest.mark.parametrize("line", ["JMP label1", "JZ end"])
def test_jumps_keep_target(line):
    assert lex(line + "\n") == [line]


def test_comment_is_dropped():
    assert lex("// hello\nADD\n") == ["ADD"]


def test_quoted_string_is_one_lexeme():
    assert lex('"hi there"') == ['"hi there"']


def test_nested_parentheses_block():
    assert lex("(a (b))") == ["(a (b))"]


def test_brackets_stand_alone():
    assert lex("[x]") == ["[", "x", "]"]


def test_backslash_skips_next_character():
    assert lex("a\\bc") == ["ac"]


def test_word_with_type_suffix_takes_rest_of_line():
    assert lex("PRINT hello world\n") == ["PRINT hello world"]


def test_block_balance_carries_across_blocks():
    assert lex('"x" (a (b))') == ['"x"', "(a (b)", ")"]


def test_lexer_is_reusable():
    lexer = Lexer()
    assert lexer.lex("ADD\n") == lexer.lex("ADD\n")
    assert lexer.lex("SUB") == ["SUB"]