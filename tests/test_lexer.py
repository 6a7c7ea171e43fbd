"""Tests for the expression lexer."""

import pytest

from obsidian_bases.errors import ErrorKind, LexerError
from obsidian_bases.expressions import Lexer, Token, TokenType


# =============================================================================
# Literals
# =============================================================================


class TestLexerLiterals:
    def test_tokenize_numbers(self):
        tokens = Lexer("42 3.14 0").tokenize()

        assert tokens[0] == Token(TokenType.NUMBER, "42", 0, 2)
        assert tokens[1] == Token(TokenType.NUMBER, "3.14", 3, 7)
        assert tokens[2] == Token(TokenType.NUMBER, "0", 8, 9)
        assert tokens[3] == Token(TokenType.EOF, None, 9, 9)

    def test_number_followed_by_method_keeps_dot_separate(self):
        types = [t.type for t in Lexer("123.toString()").tokenize()]

        assert types == [
            TokenType.NUMBER,
            TokenType.DOT,
            TokenType.IDENTIFIER,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.EOF,
        ]

    def test_tokenize_strings(self):
        tokens = Lexer("\"hello\" 'world'").tokenize()

        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "hello"
        assert tokens[1].value == "world"

    def test_string_escapes(self):
        tokens = Lexer(r'"a\nb" "tab\there" "back\\slash"').tokenize()

        assert tokens[0].value == "a\nb"
        assert tokens[1].value == "tab\there"
        assert tokens[2].value == "back\\slash"

    def test_quote_escape_matches_delimiter(self):
        tokens = Lexer(r'"say \"hi\"" ' + r"'it\'s'").tokenize()

        assert tokens[0].value == 'say "hi"'
        assert tokens[1].value == "it's"

    def test_other_quote_escape_is_rejected(self):
        with pytest.raises(LexerError) as exc_info:
            Lexer(r'"\'"').tokenize()

        assert exc_info.value.kind == ErrorKind.CHARACTER
        assert exc_info.value.found == "'"

    def test_keywords_are_case_sensitive(self):
        tokens = Lexer("true false null TRUE").tokenize()

        assert tokens[0] == Token(TokenType.BOOLEAN, True, 0, 4)
        assert tokens[1] == Token(TokenType.BOOLEAN, False, 5, 10)
        assert tokens[2].type == TokenType.NULL
        assert tokens[2].value is None
        assert tokens[3] == Token(TokenType.IDENTIFIER, "TRUE", 16, 20)

    def test_keyword_prefix_is_an_identifier(self):
        tokens = Lexer("trueish nullable").tokenize()

        assert tokens[0] == Token(TokenType.IDENTIFIER, "trueish", 0, 7)
        assert tokens[1] == Token(TokenType.IDENTIFIER, "nullable", 8, 16)


# =============================================================================
# Operators and punctuation
# =============================================================================


class TestLexerOperators:
    def test_comparison_operators(self):
        types = [t.type for t in Lexer("== != < <= > >=").tokenize()[:-1]]

        assert types == [
            TokenType.EQ,
            TokenType.NEQ,
            TokenType.LT,
            TokenType.LTE,
            TokenType.GT,
            TokenType.GTE,
        ]

    def test_logical_and_arithmetic_operators(self):
        types = [t.type for t in Lexer("&& || ! + - * / %").tokenize()[:-1]]

        assert types == [
            TokenType.AND,
            TokenType.OR,
            TokenType.NOT,
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.MULTIPLY,
            TokenType.DIVIDE,
            TokenType.MODULO,
        ]

    def test_punctuation(self):
        types = [t.type for t in Lexer("(a, b.c)").tokenize()[:-1]]

        assert types == [
            TokenType.LPAREN,
            TokenType.IDENTIFIER,
            TokenType.COMMA,
            TokenType.IDENTIFIER,
            TokenType.DOT,
            TokenType.IDENTIFIER,
            TokenType.RPAREN,
        ]

    def test_unknown_character_becomes_token(self):
        tokens = Lexer("a @ b").tokenize()

        assert tokens[1] == Token(TokenType.UNKNOWN, "@", 2, 3)
        assert tokens[2].type == TokenType.IDENTIFIER


# =============================================================================
# Errors
# =============================================================================


class TestLexerErrors:
    def test_number_running_into_identifier(self):
        with pytest.raises(LexerError) as exc_info:
            Lexer("123abc").tokenize()

        assert exc_info.value.kind == ErrorKind.IDENTIFIER
        assert exc_info.value.position == 3

    def test_tokens_are_produced_lazily(self):
        lexer = Lexer("1 + 2abc")

        assert lexer.next_token().type == TokenType.NUMBER
        assert lexer.next_token().type == TokenType.PLUS
        with pytest.raises(LexerError):
            lexer.next_token()
