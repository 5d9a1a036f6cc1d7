"""Abstract syntax tree for lox.

Two closed families of nodes, Expr and Stmt. Every node is an immutable dataclass that owns its children (the AST is a
strict tree). Nodes compare and hash by identity, not by value: the resolver keys its resolution table on the node
objects themselves, so two textually identical references in different scopes must stay distinct.

```
<expr> ::= Literal | Grouping | Unary | Binary | Logical | Variable | Assign | Call | Get | Set | This | Super
<stmt> ::= Expression | Print | Var | Block | If | While | Function | Return | Class
```
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from lox.core.tokens import Token


LiteralValue = Union[None, bool, float, str]


def node(cls):
    """Marks cls as an AST node: frozen, identity-hashed dataclass."""
    return dataclass(frozen=True, eq=False)(cls)


class Expr:
    """Base of all expression nodes."""


class Stmt:
    """Base of all statement nodes."""


# -- expressions ------------------------------------------------------------------------------------------------------

@node
class Literal(Expr):
    value: LiteralValue


@node
class Grouping(Expr):
    expression: Expr


@node
class Unary(Expr):
    operator: Token
    right: Expr


@node
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@node
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr


@node
class Variable(Expr):
    name: Token


@node
class Assign(Expr):
    name: Token
    value: Expr


@node
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used for error lines
    arguments: Tuple[Expr, ...]


@node
class Get(Expr):
    object: Expr
    name: Token


@node
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@node
class This(Expr):
    keyword: Token


@node
class Super(Expr):
    keyword: Token
    method: Token


# -- statements -------------------------------------------------------------------------------------------------------

@node
class Expression(Stmt):
    expression: Expr


@node
class Print(Stmt):
    expression: Expr


@node
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@node
class Block(Stmt):
    statements: Tuple[Stmt, ...]


@node
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@node
class While(Stmt):
    condition: Expr
    body: Stmt


@node
class Function(Stmt):
    name: Token
    params: Tuple[Token, ...]
    body: Tuple[Stmt, ...]


@node
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@node
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: Tuple[Function, ...]
