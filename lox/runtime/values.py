"""Runtime value model for Lox.

Lox values map onto Python values as follows:

```
nil      -> None
boolean  -> bool
number   -> float (always: integers in source are floats too)
string   -> str
function -> LoxFunction (closures, methods) or NativeFunction
class    -> LoxClass
instance -> LoxInstance
```

Also holds the two control-flow signals, return and break, which unwind the Python stack to the call or loop that
handles them. They are not errors and never reach ErrorHandler.
"""

import math
from abc import ABC, abstractmethod

from lox.lang.error import LoxRuntimeError
from lox.runtime.environment import Environment


class Signal(Exception):
    """Non-local exit out of statement execution."""


class ReturnSignal(Signal):
    """Unwinds to the enclosing LoxFunction.call, carrying the returned value."""

    def __init__(self, value):
        super().__init__()
        self.value = value


class BreakSignal(Signal):
    """Unwinds to the enclosing while loop."""


class LoxCallable(ABC):
    """Anything that can be called from Lox: functions, methods, native functions and classes."""

    @abstractmethod
    def arity(self):
        """Number of arguments this callable expects."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Calls this object with a list of already evaluated arguments. Arity has already been checked."""


class NativeFunction(LoxCallable):
    """Function implemented in Python, such as clock."""

    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(*arguments)

    def __str__(self):
        return "<native fn>"


class LoxFunction(LoxCallable):
    """A closure: a function literal paired with the environment it was defined in. name is None for anonymous
    functions and is only used for display.
    """

    def __init__(self, name, declaration, closure, is_initializer=False):
        self.name = name
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def bind(self, instance):
        """Returns a copy of this method whose closure has one more frame, binding 'this' to instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.name, self.declaration, environment, self.is_initializer)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        try:
            interpreter.execute_block(self.declaration.body, environment)
        except ReturnSignal as signal:
            if self.is_initializer:
                return self.closure.get_at(0, "this")
            return signal.value

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        return None

    def __str__(self):
        if self.name is None:
            return "<lambda fn>"
        return f"<fn {self.name}>"


class LoxClass(LoxCallable):
    """A class. Calling it creates a LoxInstance and runs its 'init' method, if any, on it."""
    INITIALIZER = "init"

    def __init__(self, name, superclass, methods):
        self.name = name
        self.superclass = superclass
        self.methods = methods  # dict of name: LoxFunction

    def find_method(self, name):
        """Looks name up in this class, then up the superclass chain. Returns None if no class defines it."""
        if name in self.methods:
            return self.methods[name]
        if self.superclass is not None:
            return self.superclass.find_method(name)
        return None

    def arity(self):
        initializer = self.find_method(LoxClass.INITIALIZER)
        return initializer.arity() if initializer is not None else 0

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)
        initializer = self.find_method(LoxClass.INITIALIZER)
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self):
        return self.name


class LoxInstance:
    """An instance of a LoxClass. Fields are created on first assignment; there is no schema."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Fields shadow methods. Methods are bound to self on access, not when the instance is created."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"


def is_truthy(value):
    """nil and false are falsy, everything else (including 0 and "") is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """Lox equality: values of different types are never equal, so neither are 1 and true. Numbers compare by value
    except that nan equals nan and 0 does not equal -0.
    """
    if left is None or right is None:
        return left is right
    if type(left) is not type(right):
        return False
    if isinstance(left, float):
        if math.isnan(left) or math.isnan(right):
            return math.isnan(left) and math.isnan(right)
        return left == right and math.copysign(1.0, left) == math.copysign(1.0, right)
    return left == right


def stringify(value):
    """Textual form of value, as printed by 'print'."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)
