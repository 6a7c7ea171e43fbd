"""Parser for Bases expressions.

Converts a stream of tokens into an Abstract Syntax Tree (AST).
Uses recursive descent parsing with operator precedence.

Operator Precedence (lowest to highest):
1. ||
2. &&
3. == !=
4. < <= > >=
5. + -
6. * / %
7. ! - (unary)
8. . (member access, method call)

All binary operators are left-associative. There are no list, object,
regex or index expressions; ``[``, ``{`` and friends are rejected.
"""

from __future__ import annotations

from obsidian_bases.errors import ErrorKind, ParseError
from obsidian_bases.expressions.ast import (
    BinaryOp,
    BinaryOperator,
    Boolean,
    Expr,
    Float,
    FunctionCall,
    Integer,
    MemberAccess,
    MethodCall,
    Null,
    Property,
    PropertyRef,
    String,
    UnaryOp,
    UnaryOperator,
)
from obsidian_bases.expressions.lexer import Lexer, Token, TokenType

I64_MAX = 2**63 - 1

_EQUALITY_OPS = {
    TokenType.EQ: BinaryOperator.EQ,
    TokenType.NEQ: BinaryOperator.NE,
}

_COMPARISON_OPS = {
    TokenType.GTE: BinaryOperator.GTE,
    TokenType.LTE: BinaryOperator.LTE,
    TokenType.GT: BinaryOperator.GT,
    TokenType.LT: BinaryOperator.LT,
}

_ADDITIVE_OPS = {
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUB,
}

_MULTIPLICATIVE_OPS = {
    TokenType.MULTIPLY: BinaryOperator.MUL,
    TokenType.DIVIDE: BinaryOperator.DIV,
    TokenType.MODULO: BinaryOperator.MOD,
}

# Limit on nested groups, calls and unary operators.
MAX_NESTING_DEPTH = 40


class Parser:
    """Recursive descent parser for Bases expressions.

    Usage:
        parser = Parser('status == "active" && file.hasTag("project")')
        ast = parser.parse()
    """

    def __init__(self, source: str):
        self.source = source
        self.lexer = Lexer(source)
        self.tokens: list[Token] = []
        self.position = 0
        self._last_end = 0
        self._depth = 0

    def parse_expression(self) -> tuple[str, Expr]:
        """Parse one expression.

        Returns:
            The unconsumed trailing whitespace and the AST root

        Raises:
            ParseError: If the source is not a single valid expression
        """
        ast = self._parse_or()

        if not self._is_at_end():
            raise self._error(ErrorKind.TRAILING, self._current())

        return self.source[self._last_end:], ast

    def parse(self) -> Expr:
        """Parse the expression and return the AST root."""
        return self.parse_expression()[1]

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        """Peek at a token without consuming it, lexing on demand."""
        index = self.position + offset
        while len(self.tokens) <= index:
            if self.tokens and self.tokens[-1].type == TokenType.EOF:
                return self.tokens[-1]
            self.tokens.append(self.lexer.next_token())
        return self.tokens[index]

    def _current(self) -> Token:
        """Get current token."""
        return self._peek()

    def _is_at_end(self) -> bool:
        """Check if we've consumed all tokens."""
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        self.position += 1
        self._last_end = token.end
        return token

    def _match(self, *types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self._current().type in types

    def _adjacent(self, token: Token) -> bool:
        """True when ``token`` starts right where the last consumed token ended."""
        return token.position == self._last_end

    def _error(self, kind: ErrorKind, token: Token) -> ParseError:
        """Build an error for ``token``; end of input always reports EOF."""
        if token.type == TokenType.EOF:
            return ParseError(ErrorKind.EOF, token.position, self.source)
        if token.type == TokenType.UNKNOWN:
            return ParseError(
                ErrorKind.CHARACTER, token.position, self.source, found=str(token.value)
            )
        return ParseError(kind, token.position, self.source)

    def _consume_rparen(self) -> Token:
        token = self._current()
        if token.type == TokenType.RPAREN:
            return self._advance()
        raise ParseError(
            ErrorKind.EOF if token.type == TokenType.EOF else ErrorKind.CHARACTER,
            token.position,
            self.source,
            found=self.source[token.position:token.position + 1] or None,
        )

    def _consume_member_name(self) -> str:
        """Consume the identifier that must directly follow a '.'."""
        token = self._current()
        if token.type != TokenType.IDENTIFIER or not self._adjacent(token):
            raise ParseError(ErrorKind.IDENTIFIER, self._last_end, self.source)
        return str(self._advance().value)

    # -------------------------------------------------------------------------
    # Parsing methods (in order of precedence, lowest to highest)
    # -------------------------------------------------------------------------

    def _parse_binary(self, operators: dict[TokenType, BinaryOperator], operand) -> Expr:
        left = operand()

        while self._current().type in operators:
            op = operators[self._advance().type]
            right = operand()
            left = BinaryOp(op, left, right)

        return left

    def _parse_or(self) -> Expr:
        """Parse OR expression (lowest precedence)."""
        left = self._parse_and()

        while self._match(TokenType.OR):
            self._advance()
            right = self._parse_and()
            left = BinaryOp(BinaryOperator.OR, left, right)

        return left

    def _parse_and(self) -> Expr:
        """Parse AND expression."""
        left = self._parse_equality()

        while self._match(TokenType.AND):
            self._advance()
            right = self._parse_equality()
            left = BinaryOp(BinaryOperator.AND, left, right)

        return left

    def _parse_equality(self) -> Expr:
        """Parse equality expression (==, !=)."""
        return self._parse_binary(_EQUALITY_OPS, self._parse_comparison)

    def _parse_comparison(self) -> Expr:
        """Parse comparison expression (<, <=, >, >=)."""
        return self._parse_binary(_COMPARISON_OPS, self._parse_additive)

    def _parse_additive(self) -> Expr:
        """Parse additive expression (+, -)."""
        return self._parse_binary(_ADDITIVE_OPS, self._parse_multiplicative)

    def _parse_multiplicative(self) -> Expr:
        """Parse multiplicative expression (*, /, %)."""
        return self._parse_binary(_MULTIPLICATIVE_OPS, self._parse_unary)

    def _parse_unary(self) -> Expr:
        """Parse unary expression (!, -)."""
        self._depth += 1
        try:
            if self._depth > MAX_NESTING_DEPTH:
                raise ParseError(ErrorKind.DEPTH, self._current().position, self.source)

            if self._match(TokenType.NOT):
                self._advance()
                return UnaryOp(UnaryOperator.NOT, self._parse_unary())

            if self._match(TokenType.MINUS):
                self._advance()
                return UnaryOp(UnaryOperator.NEG, self._parse_unary())

            return self._parse_primary()
        finally:
            self._depth -= 1

    def _parse_primary(self) -> Expr:
        """Parse an atom followed by member accesses and method calls."""
        expr = self._parse_atom()

        while self._match(TokenType.DOT) and self._adjacent(self._current()):
            self._advance()
            name = self._consume_member_name()

            if self._match(TokenType.LPAREN) and self._adjacent(self._current()):
                expr = MethodCall(expr, name, self._parse_arguments())
            else:
                expr = MemberAccess(expr, name)

        return expr

    def _parse_atom(self) -> Expr:
        """Parse literals, grouped expressions, calls and property references."""
        token = self._current()

        if token.type == TokenType.NUMBER:
            self._advance()
            text = str(token.value)
            if "." in text:
                return Float(float(text))
            value = int(text)
            if value > I64_MAX:
                raise ParseError(ErrorKind.DIGIT, token.position, self.source)
            return Integer(value)

        if token.type == TokenType.STRING:
            self._advance()
            return String(str(token.value))

        if token.type == TokenType.BOOLEAN:
            self._advance()
            return Boolean(bool(token.value))

        if token.type == TokenType.NULL:
            self._advance()
            return Null()

        if token.type == TokenType.IDENTIFIER:
            return self._parse_function_or_property()

        # Grouped expression
        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_or()
            self._consume_rparen()
            return expr

        raise self._error(ErrorKind.TOKEN, token)

    def _parse_function_or_property(self) -> Expr:
        """Parse ``name(args)`` or a dotted property chain ``a.b.c``.

        The chain stops before a segment that is immediately called, so
        ``file.name.lower()`` yields the property ``file.name`` and leaves
        ``.lower()`` to the postfix loop.
        """
        name = str(self._advance().value)

        if self._match(TokenType.LPAREN) and self._adjacent(self._current()):
            return FunctionCall(name, self._parse_arguments())

        segments = [name]
        while self._chain_continues():
            self._advance()
            segments.append(str(self._advance().value))

        return Property(PropertyRef.from_segments(segments))

    def _chain_continues(self) -> bool:
        dot = self._peek()
        if dot.type != TokenType.DOT or dot.position != self._last_end:
            return False
        ident = self._peek(1)
        if ident.type != TokenType.IDENTIFIER or ident.position != dot.end:
            return False
        after = self._peek(2)
        return not (after.type == TokenType.LPAREN and after.position == ident.end)

    def _parse_arguments(self) -> tuple[Expr, ...]:
        """Parse a parenthesized, comma separated argument list."""
        self._advance()  # (

        arguments: list[Expr] = []

        if not self._match(TokenType.RPAREN):
            arguments.append(self._parse_or())

            while self._match(TokenType.COMMA):
                self._advance()
                arguments.append(self._parse_or())

        self._consume_rparen()

        return tuple(arguments)


def parse_expression(source: str) -> tuple[str, Expr]:
    """Parse ``source`` and return ``(trailing_whitespace, ast)``.

    Raises:
        ParseError: If the source is not a single valid expression
    """
    return Parser(source).parse_expression()


def parse(source: str) -> Expr:
    """Convenience function to parse an expression string.

    Args:
        source: The expression string

    Returns:
        The AST root node
    """
    return Parser(source).parse()
