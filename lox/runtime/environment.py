"""Runtime scopes. An Environment maps names to values and links to the Environment it is nested in, forming a chain
that ends at the globals. Frames are shared, not copied: every closure created in a frame holds a reference to it, so an
assignment made through one closure is seen by all of them.
"""

from lox.lang.error import LoxRuntimeError


class Environment:

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        """Binds name in this frame, replacing any previous binding of name here."""
        self.values[name] = value

    def get(self, name):
        """Looks up token name along the chain, raising a LoxRuntimeError if it is unbound everywhere."""
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.enclosing is not None:
            return self.enclosing.get(name)
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        """Rebinds token name in the nearest frame that binds it. Never creates a binding."""
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
        elif self.enclosing is not None:
            self.enclosing.assign(name, value)
        else:
            raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance):
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Reads str name from the frame distance links up. The resolver guarantees it is bound there."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self):
        return f"Environment({self.values}, enclosing={self.enclosing!r})"
