"""Abstract syntax tree for Lox: a closed set of expression and statement node types built by Parser and walked by
Resolver, Interpreter and the debug printers.

Nodes are frozen: nothing mutates them after parsing. They also compare and hash by identity rather than by
structure, because the resolution table is keyed on the exact node a variable reference came from; two structurally
identical references in different scopes must stay distinct keys.
"""

from dataclasses import dataclass

from lox.lang.tokens import Token


@dataclass(frozen=True, eq=False)
class Expr:
    """Superclass of every expression node."""


@dataclass(frozen=True, eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class Ternary(Expr):
    condition: Expr
    then_branch: Expr
    else_branch: Expr


@dataclass(frozen=True, eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(frozen=True, eq=False)
class Literal(Expr):
    value: object


@dataclass(frozen=True, eq=False)
class Variable(Expr):
    name: Token


@dataclass(frozen=True, eq=False)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to locate runtime errors
    arguments: tuple


@dataclass(frozen=True, eq=False)
class FunctionLiteral(Expr):
    """Parameters and body shared by named function declarations, methods and anonymous functions."""
    params: tuple
    body: tuple


@dataclass(frozen=True, eq=False)
class Get(Expr):
    target: Expr
    name: Token


@dataclass(frozen=True, eq=False)
class Set(Expr):
    target: Expr
    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class This(Expr):
    keyword: Token


@dataclass(frozen=True, eq=False)
class Super(Expr):
    keyword: Token
    method: Token


@dataclass(frozen=True, eq=False)
class Stmt:
    """Superclass of every statement node."""


@dataclass(frozen=True, eq=False)
class ExpressionStmt(Stmt):
    expression: Expr


@dataclass(frozen=True, eq=False)
class VarDeclaration(Stmt):
    name: Token
    initializer: Expr = None


@dataclass(frozen=True, eq=False)
class Block(Stmt):
    statements: tuple


@dataclass(frozen=True, eq=False)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True, eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt = None


@dataclass(frozen=True, eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt


@dataclass(frozen=True, eq=False)
class FunctionDecl(Stmt):
    name: Token
    function: FunctionLiteral


@dataclass(frozen=True, eq=False)
class ClassDecl(Stmt):
    name: Token
    superclass: Variable  # None if the class has no superclass
    methods: tuple        # of FunctionDecl


@dataclass(frozen=True, eq=False)
class Break(Stmt):
    keyword: Token


@dataclass(frozen=True, eq=False)
class Return(Stmt):
    keyword: Token
    value: Expr = None
