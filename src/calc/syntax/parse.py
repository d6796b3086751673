"""Calc parser: recursive descent, one method per grammar production.

    Expr    = Sum
    Sum     = Product ( ( '+' | '-' ) Product )*
    Product = Unary ( ( '*' | '/' ) Unary )*
    Unary   = '-' Unary | Primary
    Primary = NUMBER | IDENT '(' ArgList ')' | IDENT | '(' Expr ')'
    ArgList = ( Expr ( ',' Expr )* )?
"""

from __future__ import annotations

from ..errors import ParseError
from .ast import Atom, BinaryOp, Expr, FunctionCall, Ident, Number, OpKind
from .tokens import TK_EOF, TK_IDENT, TK_NUMBER, TK_OP, Token, tokenize


class Parser:
    """Recursive descent parser for calc expressions."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.type == TK_OP and tok.value == value

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def expect(self, value: str) -> Token:
        tok = self.current()
        if not self.at(value):
            raise self.error("expected '" + value + "', got " + _describe(tok))
        return self.advance()

    def expect_eof(self) -> None:
        if not self.at_type(TK_EOF):
            raise self.error("unexpected " + _describe(self.current()))

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    # ── Entry Points ─────────────────────────────────────────

    def parse_program(self) -> Expr:
        expr = self.parse_expr()
        self.expect_eof()
        return expr

    # ── Expressions ──────────────────────────────────────────

    def parse_expr(self) -> Expr:
        return self.parse_sum()

    def parse_sum(self) -> Expr:
        """Sum = Product ( ( '+' | '-' ) Product )*"""
        left = self.parse_product()
        while self.at("+") or self.at("-"):
            op = OpKind.from_symbol(self.advance().value)
            right = self.parse_product()
            left = BinaryOp(op, left, right)
        return left

    def parse_product(self) -> Expr:
        """Product = Unary ( ( '*' | '/' ) Unary )*"""
        left = self.parse_unary()
        while self.at("*") or self.at("/"):
            op = OpKind.from_symbol(self.advance().value)
            right = self.parse_unary()
            left = BinaryOp(op, left, right)
        return left

    def parse_unary(self) -> Expr:
        """Unary = '-' Unary | Primary

        There is no negation node: '-' on a literal folds into the literal,
        anything else becomes 0 - operand.
        """
        if self.at("-"):
            self.advance()
            if self.at_type(TK_NUMBER):
                return Number(-float(self.advance().value))
            operand = self.parse_unary()
            return BinaryOp(OpKind.SUBTRACT, Number(0.0), operand)
        return self.parse_primary()

    def parse_primary(self) -> Expr:
        tok = self.current()
        if tok.type == TK_NUMBER or tok.type == TK_IDENT:
            if tok.type == TK_IDENT and self.peek(1).value == "(":
                return self.parse_function_call()
            return self.parse_atom()
        if self.at("("):
            self.advance()
            inner = self.parse_expr()
            self.expect(")")
            return inner
        raise self.error("expected expression, got " + _describe(tok))

    def parse_atom(self) -> Atom:
        tok = self.current()
        if tok.type == TK_NUMBER:
            self.advance()
            return Number(float(tok.value))
        if tok.type == TK_IDENT:
            self.advance()
            return Ident(tok.value)
        raise self.error("expected number or identifier, got " + _describe(tok))

    def parse_function_call(self) -> FunctionCall:
        """FunctionCall = IDENT '(' ArgList ')'"""
        tok = self.current()
        if tok.type != TK_IDENT:
            raise self.error("expected function name, got " + _describe(tok))
        self.advance()
        self.expect("(")
        args = self.parse_arg_list()
        self.expect(")")
        return FunctionCall(tok.value, args)

    def parse_arg_list(self) -> list[Expr]:
        """ArgList = ( Expr ( ',' Expr )* )?"""
        args: list[Expr] = []
        if self.at(")"):
            return args
        args.append(self.parse_expr())
        while self.at(","):
            self.advance()
            args.append(self.parse_expr())
        return args


def _describe(tok: Token) -> str:
    if tok.type == TK_EOF:
        return "end of input"
    if tok.type == TK_OP:
        return "'" + tok.value + "'"
    return tok.type.lower() + " '" + tok.value + "'"


def parse(source: str) -> Expr:
    """Parse a complete calc expression."""
    return Parser(tokenize(source)).parse_program()


def parse_expr(source: str) -> Expr:
    return parse(source)


def parse_atom(source: str) -> Atom:
    """Parse source that must be exactly one number or identifier."""
    parser = Parser(tokenize(source))
    result = parser.parse_atom()
    parser.expect_eof()
    return result


def parse_function_call(source: str) -> FunctionCall:
    """Parse source that must be exactly one function call."""
    parser = Parser(tokenize(source))
    result = parser.parse_function_call()
    parser.expect_eof()
    return result
