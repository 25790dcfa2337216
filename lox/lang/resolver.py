"""Static resolution pass. Walks the parsed statements once, before anything runs, and

    1. records, for every local variable reference, how many scopes separate it from its declaration (the resolution
       table, consulted by Interpreter), and
    2. reports the errors that can be found without running: reading a variable in its own initializer, declaring a
       name twice in one scope, and 'return', 'this' or 'super' where they make no sense.

References that are not found in any enclosing scope are left out of the table: they are globals, looked up by name
at runtime. The table only depends on the lexical structure, so resolving the same statements again writes the same
entries.
"""

from enum import Enum

from lox.lang.ast import (Assign, Binary, Block, Break, Call, ClassDecl, ExpressionStmt, FunctionDecl, FunctionLiteral,
                          Get, Grouping, If, Literal, Logical, Print, Return, Set, Super, Ternary, This, Unary,
                          VarDeclaration, Variable, While)
from lox.lang.error import ResolveError


class FunctionType(Enum):
    NONE = "none"
    FUNCTION = "function"
    METHOD = "method"


class ClassType(Enum):
    NONE = "none"
    CLASS = "class"
    SUBCLASS = "subclass"


class Resolver:
    """Resolves statements into table, a mapping of expression node: scope distance."""

    def __init__(self, table, error_handler):
        self.table = table
        self.error_handler = error_handler

        self.scopes = []  # innermost last; each is a dict of name: whether or not its initializer has been resolved
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements):
        for stmt in statements:
            self._resolve_stmt(stmt)

    def resolve_expression(self, expr):
        """Resolves a lone expression, as typed into the shell."""
        self._resolve_expr(expr)

    # ---- Statements ----------------------------------------------------------

    def _resolve_stmt(self, stmt):
        if isinstance(stmt, Block):
            self._begin_scope()
            self.resolve(stmt.statements)
            self._end_scope()

        elif isinstance(stmt, VarDeclaration):
            self._declare(stmt.name)
            if stmt.initializer is not None:
                self._resolve_expr(stmt.initializer)
            self._define(stmt.name)

        elif isinstance(stmt, FunctionDecl):
            self._declare(stmt.name)
            self._define(stmt.name)  # defined before the body so the function can recurse
            self._resolve_function(stmt.function, FunctionType.FUNCTION)

        elif isinstance(stmt, ClassDecl):
            self._resolve_class(stmt)

        elif isinstance(stmt, (ExpressionStmt, Print)):
            self._resolve_expr(stmt.expression)

        elif isinstance(stmt, If):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self._resolve_stmt(stmt.else_branch)

        elif isinstance(stmt, While):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.body)

        elif isinstance(stmt, Return):
            if self.current_function is FunctionType.NONE:
                self._error(stmt.keyword, "Can't return from top-level code.")
            if stmt.value is not None:
                self._resolve_expr(stmt.value)

        elif isinstance(stmt, Break):
            pass  # legality was checked by the parser

        else:
            raise TypeError(f"unknown statement node '{type(stmt).__name__}'")

    def _resolve_class(self, stmt):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self._error(stmt.superclass.name, "A class can't inherit from itself.")

            self.current_class = ClassType.SUBCLASS
            self._resolve_expr(stmt.superclass)

            self._begin_scope()
            self.scopes[-1]["super"] = True

        self._begin_scope()
        self.scopes[-1]["this"] = True

        for method in stmt.methods:
            self._resolve_function(method.function, FunctionType.METHOD)

        self._end_scope()
        if stmt.superclass is not None:
            self._end_scope()

        self.current_class = enclosing_class

    def _resolve_function(self, function, function_type):
        enclosing_function = self.current_function
        self.current_function = function_type

        self._begin_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        self.resolve(function.body)
        self._end_scope()

        self.current_function = enclosing_function

    # ---- Expressions ---------------------------------------------------------

    def _resolve_expr(self, expr):
        if isinstance(expr, Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self._error(expr.name, "Can't read local variable in its own initializer.")
            self._resolve_local(expr, expr.name)

        elif isinstance(expr, Assign):
            self._resolve_expr(expr.value)
            self._resolve_local(expr, expr.name)

        elif isinstance(expr, (Binary, Logical)):
            self._resolve_expr(expr.left)
            self._resolve_expr(expr.right)

        elif isinstance(expr, Ternary):
            self._resolve_expr(expr.condition)
            self._resolve_expr(expr.then_branch)
            self._resolve_expr(expr.else_branch)

        elif isinstance(expr, Grouping):
            self._resolve_expr(expr.expression)

        elif isinstance(expr, Unary):
            self._resolve_expr(expr.right)

        elif isinstance(expr, Call):
            self._resolve_expr(expr.callee)
            for argument in expr.arguments:
                self._resolve_expr(argument)

        elif isinstance(expr, FunctionLiteral):
            self._resolve_function(expr, FunctionType.FUNCTION)

        elif isinstance(expr, Get):
            self._resolve_expr(expr.target)

        elif isinstance(expr, Set):
            self._resolve_expr(expr.value)
            self._resolve_expr(expr.target)

        elif isinstance(expr, This):
            if self.current_class is ClassType.NONE:
                self._error(expr.keyword, "Can't use 'this' outside of a class.")
            self._resolve_local(expr, expr.keyword)

        elif isinstance(expr, Super):
            if self.current_class is ClassType.NONE:
                self._error(expr.keyword, "Can't use 'super' outside of a class.")
            elif self.current_class is ClassType.CLASS:
                self._error(expr.keyword, "Can't use 'super' in a class with no superclass.")
            self._resolve_local(expr, expr.keyword)

        elif isinstance(expr, Literal):
            pass

        else:
            raise TypeError(f"unknown expression node '{type(expr).__name__}'")

    # ---- Scopes --------------------------------------------------------------

    def _begin_scope(self):
        self.scopes.append({})

    def _end_scope(self):
        self.scopes.pop()

    def _declare(self, name):
        if not self.scopes:
            return  # globals may be redeclared

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self._error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def _define(self, name):
        if self.scopes:
            self.scopes[-1][name.lexeme] = True

    def _resolve_local(self, expr, name):
        for distance, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.table[expr] = distance
                return

    def _error(self, token, msg):
        self.error_handler.throw(ResolveError(msg, token))
