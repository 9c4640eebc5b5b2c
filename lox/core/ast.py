"""Abstract syntax tree for lox.

Nodes are immutable and compared by identity, not structure: two syntactically identical variable references at
different places in the source are different keys in the resolver's side table.

Every node dispatches to its visitor through accept(). An expression class Foo calls visitor.visit_foo_expr(node)
and a statement class Foo calls visitor.visit_foo_stmt(node).
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional

from lox.core.tokens import Token


def _snake(name):
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


class Node:
    """Superclass of every AST node."""
    _category = ""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls._category:
            cls._visit = f"visit_{_snake(cls.__name__)}_{cls._category}"

    def accept(self, visitor):
        return getattr(visitor, self._visit)(self)


class Expr(Node):
    _category = "expr"


class Stmt(Node):
    _category = "stmt"


# --- Expressions ---


@dataclass(frozen=True, eq=False)
class Literal(Expr):
    value: Any


@dataclass(frozen=True, eq=False)
class Variable(Expr):
    name: Token


@dataclass(frozen=True, eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(frozen=True, eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to locate runtime faults
    arguments: List[Expr]


@dataclass(frozen=True, eq=False)
class Get(Expr):
    object: Expr
    name: Token


@dataclass(frozen=True, eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class This(Expr):
    keyword: Token


@dataclass(frozen=True, eq=False)
class Super(Expr):
    keyword: Token
    method: Token


# --- Statements ---


@dataclass(frozen=True, eq=False)
class Expression(Stmt):
    expression: Expr


@dataclass(frozen=True, eq=False)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True, eq=False)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(frozen=True, eq=False)
class Block(Stmt):
    statements: List[Stmt]


@dataclass(frozen=True, eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(frozen=True, eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt


@dataclass(frozen=True, eq=False)
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]


@dataclass(frozen=True, eq=False)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(frozen=True, eq=False)
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: List[Function]
