"""The language's parser and AST representation."""

from __future__ import annotations

from .ast import (
    Atom as Atom,
    BinaryOp as BinaryOp,
    Expr as Expr,
    FunctionCall as FunctionCall,
    Ident as Ident,
    Number as Number,
    OpKind as OpKind,
    add as add,
    atom as atom,
    call as call,
    div as div,
    mult as mult,
    sub as sub,
)
from .emit import to_source as to_source
from .parse import (
    Parser as Parser,
    parse as parse,
    parse_atom as parse_atom,
    parse_expr as parse_expr,
    parse_function_call as parse_function_call,
)
from .tokens import tokenize as tokenize
