"""Lexer/tokenizer for Bases expressions.

Converts expression strings into a stream of tokens for the parser.

Token types:
- Literals: NUMBER, STRING, BOOLEAN, NULL
- Identifiers: IDENTIFIER (property segments, function and method names)
- Operators: comparison, logical, arithmetic
- Punctuation: LPAREN, RPAREN, COMMA, DOT
- UNKNOWN: any other character; the parser reports it with its position

Every token records its start and end offset so the parser can enforce
adjacency rules (``f(x)`` is a call, ``f (x)`` is not).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from obsidian_bases.errors import ErrorKind, LexerError


class TokenType(Enum):
    """Types of tokens in the expression language."""

    # Literals
    NUMBER = auto()
    STRING = auto()
    BOOLEAN = auto()
    NULL = auto()

    # Identifiers
    IDENTIFIER = auto()

    # Comparison operators
    EQ = auto()          # ==
    NEQ = auto()         # !=
    LT = auto()          # <
    LTE = auto()         # <=
    GT = auto()          # >
    GTE = auto()         # >=

    # Logical operators
    AND = auto()         # &&
    OR = auto()          # ||
    NOT = auto()         # !

    # Arithmetic operators
    PLUS = auto()        # +
    MINUS = auto()       # -
    MULTIPLY = auto()    # *
    DIVIDE = auto()      # /
    MODULO = auto()      # %

    # Punctuation
    LPAREN = auto()      # (
    RPAREN = auto()      # )
    COMMA = auto()       # ,
    DOT = auto()         # .

    # A character that starts no token
    UNKNOWN = auto()

    # End of input
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A single token from the lexer.

    Attributes:
        type: The token type
        value: The token's value (number text, string content, identifier name, etc.)
        position: Offset of the first character in the source string
        end: Offset just past the last character
    """

    type: TokenType
    value: str | bool | None
    position: int
    end: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


# Token patterns (order matters - longer matches first)
TOKEN_PATTERNS = [
    # Whitespace (skip)
    (r"[ \t\r\n]+", None),

    # Multi-character operators (before single character)
    (r"==", TokenType.EQ),
    (r"!=", TokenType.NEQ),
    (r"<=", TokenType.LTE),
    (r">=", TokenType.GTE),
    (r"&&", TokenType.AND),
    (r"\|\|", TokenType.OR),

    # Single character operators
    (r"<", TokenType.LT),
    (r">", TokenType.GT),
    (r"!", TokenType.NOT),
    (r"\+", TokenType.PLUS),
    (r"-", TokenType.MINUS),
    (r"\*", TokenType.MULTIPLY),
    (r"/", TokenType.DIVIDE),
    (r"%", TokenType.MODULO),

    # Punctuation
    (r"\(", TokenType.LPAREN),
    (r"\)", TokenType.RPAREN),
    (r",", TokenType.COMMA),
    (r"\.", TokenType.DOT),

    # Numbers: the dot belongs to the number only when a digit follows it
    (r"\d+\.\d+", TokenType.NUMBER),
    (r"\d+", TokenType.NUMBER),

    # Strings (double or single quoted)
    (r'"([^"\\]|\\.)*"', TokenType.STRING),
    (r"'([^'\\]|\\.)*'", TokenType.STRING),

    # Keywords and identifiers (must come after operators)
    (r"[a-zA-Z_][a-zA-Z0-9_]*", TokenType.IDENTIFIER),
]

# Keywords that map to specific token types (case-sensitive)
KEYWORDS = {
    "true": (TokenType.BOOLEAN, True),
    "false": (TokenType.BOOLEAN, False),
    "null": (TokenType.NULL, None),
}

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\"}

_IDENTIFIER_START = re.compile(r"[a-zA-Z_]")


class Lexer:
    """Tokenizer for Bases expressions.

    Tokens are produced on demand, so an error late in the source is only
    raised once the parser gets that far.

    Usage:
        lexer = Lexer('status == "active" && file.hasTag("x")')
        for token in lexer:
            print(token)
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self._compiled_patterns = [
            (re.compile(pattern), token_type)
            for pattern, token_type in TOKEN_PATTERNS
        ]

    def __iter__(self) -> Iterator[Token]:
        """Iterate over all tokens in the source."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def next_token(self) -> Token:
        """Get the next token from the source.

        Raises:
            LexerError: For a number running into an identifier (``123abc``)
                or an unsupported string escape
        """
        while True:
            if self.position >= len(self.source):
                return Token(TokenType.EOF, None, self.position, self.position)

            for pattern, token_type in self._compiled_patterns:
                match = pattern.match(self.source, self.position)
                if match:
                    break
            else:
                # No pattern matched; hand the character to the parser
                start = self.position
                self.position += 1
                return Token(TokenType.UNKNOWN, self.source[start], start, self.position)

            value = match.group()
            start = self.position
            self.position = match.end()

            # Skip whitespace
            if token_type is None:
                continue

            if token_type == TokenType.NUMBER:
                if _IDENTIFIER_START.match(self.source, self.position):
                    raise LexerError(ErrorKind.IDENTIFIER, self.position, self.source)
                return Token(TokenType.NUMBER, value, start, self.position)

            if token_type == TokenType.STRING:
                content = self._unescape_string(value[1:-1], value[0], start + 1)
                return Token(TokenType.STRING, content, start, self.position)

            if token_type == TokenType.IDENTIFIER and value in KEYWORDS:
                keyword_type, keyword_value = KEYWORDS[value]
                return Token(keyword_type, keyword_value, start, self.position)

            return Token(token_type, value, start, self.position)

    def _unescape_string(self, s: str, quote: str, offset: int) -> str:
        """Process escape sequences in a string body starting at ``offset``."""
        result = []
        i = 0
        while i < len(s):
            if s[i] == "\\":
                next_char = s[i + 1]
                if next_char == quote:
                    result.append(quote)
                elif next_char in _ESCAPES:
                    result.append(_ESCAPES[next_char])
                else:
                    raise LexerError(
                        ErrorKind.CHARACTER, offset + i + 1, self.source, found=next_char
                    )
                i += 2
            else:
                result.append(s[i])
                i += 1
        return "".join(result)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source and return list of tokens."""
        return list(self)
