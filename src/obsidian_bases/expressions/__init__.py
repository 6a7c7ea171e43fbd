"""Bases expression language.

This module provides:
- Lexer: Tokenizes expression strings
- Parser: Produces AST from tokens
- Evaluator: Evaluates AST against a file context
"""

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
    PropertyNamespace,
    PropertyRef,
    String,
    UnaryOp,
    UnaryOperator,
)
from obsidian_bases.expressions.evaluator import (
    EvaluationContext,
    EvaluationError,
    Evaluator,
    evaluate,
    evaluate_filter,
)
from obsidian_bases.expressions.lexer import Lexer, Token, TokenType
from obsidian_bases.expressions.parser import Parser, parse, parse_expression

__all__ = [
    # AST
    "Expr",
    "String",
    "Float",
    "Integer",
    "Boolean",
    "Null",
    "Property",
    "FunctionCall",
    "BinaryOp",
    "UnaryOp",
    "MemberAccess",
    "MethodCall",
    "PropertyRef",
    "PropertyNamespace",
    "BinaryOperator",
    "UnaryOperator",
    # Evaluator
    "EvaluationContext",
    "EvaluationError",
    "Evaluator",
    "evaluate",
    "evaluate_filter",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Parser
    "Parser",
    "parse",
    "parse_expression",
]
