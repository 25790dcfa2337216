"""Tree-walking evaluator for Lox. Executes resolved statements against a chain of Environments.

Lexical scoping comes entirely from the environment chain: blocks and calls swap self.environment for a new frame and
restore the previous one when they finish, however they finish. Local variables are found by walking exactly as many
frames as the resolver recorded; anything the resolver did not record is a global.
"""

import math
import sys
import time

from lox.lang.ast import (Assign, Binary, Block, Break, Call, ClassDecl, ExpressionStmt, FunctionDecl, FunctionLiteral,
                          Get, Grouping, If, Literal, Logical, Print, Return, Set, Super, Ternary, This, Unary,
                          VarDeclaration, Variable, While)
from lox.lang.error import LoxRuntimeError
from lox.lang.tokens import TokenType
from lox.runtime.environment import Environment
from lox.runtime.values import (BreakSignal, LoxCallable, LoxClass, LoxFunction, LoxInstance, NativeFunction,
                                ReturnSignal, is_equal, is_truthy, stringify)


class Interpreter:
    """Holds the state that outlives a single run: globals and the resolution table. out is the stream 'print' writes
    to (None means sys.stdout).
    """
    RECURSION_LIMIT = 15000  # each Lox call takes about 7 Python frames

    def __init__(self, error_handler, out=None):
        self.error_handler = error_handler
        self.out = out

        if sys.getrecursionlimit() < Interpreter.RECURSION_LIMIT:
            sys.setrecursionlimit(Interpreter.RECURSION_LIMIT)

        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}  # resolution table, expression node: distance

        self.globals.define("clock", NativeFunction("clock", 0, time.time))

    def interpret(self, statements):
        """Executes statements in order. A runtime error is reported and ends the run; statements after it are not
        executed.
        """
        try:
            for stmt in statements:
                try:
                    self.execute(stmt)
                except BreakSignal:
                    pass  # 'break' in a function called outside any loop ends the statement that called it
        except LoxRuntimeError as error:
            self.error_handler.throw(error)

    def evaluate_and_print(self, expr):
        """Evaluates a single expression and prints its value."""
        try:
            print(stringify(self.evaluate(expr)), file=self.out)
        except LoxRuntimeError as error:
            self.error_handler.throw(error)

    # ---- Statements ----------------------------------------------------------

    def execute(self, stmt):
        if isinstance(stmt, ExpressionStmt):
            self.evaluate(stmt.expression)

        elif isinstance(stmt, Print):
            print(stringify(self.evaluate(stmt.expression)), file=self.out)

        elif isinstance(stmt, VarDeclaration):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)

        elif isinstance(stmt, Block):
            self.execute_block(stmt.statements, Environment(self.environment))

        elif isinstance(stmt, If):
            if is_truthy(self.evaluate(stmt.condition)):
                self.execute(stmt.then_branch)
            elif stmt.else_branch is not None:
                self.execute(stmt.else_branch)

        elif isinstance(stmt, While):
            try:
                while is_truthy(self.evaluate(stmt.condition)):
                    self.execute(stmt.body)
            except BreakSignal:
                pass

        elif isinstance(stmt, FunctionDecl):
            function = LoxFunction(stmt.name.lexeme, stmt.function, self.environment)
            self.environment.define(stmt.name.lexeme, function)

        elif isinstance(stmt, ClassDecl):
            self._class(stmt)

        elif isinstance(stmt, Return):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            raise ReturnSignal(value)

        elif isinstance(stmt, Break):
            raise BreakSignal()

        else:
            raise TypeError(f"unknown statement node '{type(stmt).__name__}'")

    def execute_block(self, statements, environment):
        """Executes statements in environment, restoring the current environment afterwards."""
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                self.execute(stmt)
        finally:
            self.environment = previous

    def _class(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        # methods close over a frame holding 'super', so super.method() is found relative to this class
        environment = self.environment
        if superclass is not None:
            environment = Environment(environment)
            environment.define("super", superclass)

        methods = {}
        for method in stmt.methods:
            name = method.name.lexeme
            methods[name] = LoxFunction(name, method.function, environment, name == LoxClass.INITIALIZER)

        self.environment.assign(stmt.name, LoxClass(stmt.name.lexeme, superclass, methods))

    # ---- Expressions ---------------------------------------------------------

    def evaluate(self, expr):
        if isinstance(expr, Literal):
            return expr.value

        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression)

        if isinstance(expr, (Variable, This)):
            return self._look_up_variable(expr.name if isinstance(expr, Variable) else expr.keyword, expr)

        if isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            distance = self.locals.get(expr)
            if distance is not None:
                self.environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value

        if isinstance(expr, Unary):
            return self._unary(expr)

        if isinstance(expr, Binary):
            return self._binary(expr)

        if isinstance(expr, Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type is TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)

        if isinstance(expr, Ternary):
            if is_truthy(self.evaluate(expr.condition)):
                return self.evaluate(expr.then_branch)
            return self.evaluate(expr.else_branch)

        if isinstance(expr, Call):
            return self._call(expr)

        if isinstance(expr, FunctionLiteral):
            return LoxFunction(None, expr, self.environment)

        if isinstance(expr, Get):
            target = self.evaluate(expr.target)
            if isinstance(target, LoxInstance):
                return target.get(expr.name)
            raise LoxRuntimeError(expr.name, "Only instances have properties.")

        if isinstance(expr, Set):
            target = self.evaluate(expr.target)
            if not isinstance(target, LoxInstance):
                raise LoxRuntimeError(expr.name, "Only instances have fields.")
            value = self.evaluate(expr.value)
            target.set(expr.name, value)
            return value

        if isinstance(expr, Super):
            return self._super(expr)

        raise TypeError(f"unknown expression node '{type(expr).__name__}'")

    def _look_up_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def _unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.type is TokenType.MINUS:
            check_number_operands(expr.operator, right)
            return -right
        return not is_truthy(right)

    def _binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        op = operator.type

        if op is TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            if isinstance(left, str) and isinstance(right, float):
                return left + stringify(right)
            raise LoxRuntimeError(operator, "Operands of '+' must be two numbers or two strings.")

        if op is TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if op is TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        check_number_operands(operator, left, right)
        if op is TokenType.MINUS:
            return left - right
        if op is TokenType.STAR:
            return left * right
        if op is TokenType.SLASH:
            return divide(left, right)
        if op is TokenType.GREATER:
            return left > right
        if op is TokenType.GREATER_EQUAL:
            return left >= right
        if op is TokenType.LESS:
            return left < right
        if op is TokenType.LESS_EQUAL:
            return left <= right

        raise TypeError(f"unknown binary operator '{operator.lexeme}'")

    def _call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None

    def _super(self, expr):
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, "super")
        instance = self.environment.get_at(distance - 1, "this")  # 'this' is always one frame inside 'super'

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(instance)


def check_number_operands(operator, *operands):
    if all(isinstance(operand, float) for operand in operands):
        return
    if len(operands) == 1:
        raise LoxRuntimeError(operator, "Operand must be a number.")
    raise LoxRuntimeError(operator, "Operands must be numbers.")


def divide(left, right):
    """IEEE-754 division: dividing by zero gives an infinity (or nan for 0/0) rather than an error."""
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
