"""Debug renderings of the syntax tree, used by `lox --dump` to check what the parser produced.

- AstPrinter: parenthesized prefix form, e.g. `(* (- 123) (group 45.67))`
- RpnPrinter: postfix (reverse Polish) form, e.g. `1 2 + 4 3 - *`
"""

from lox.lang.ast import (Assign, Binary, Block, Break, Call, ClassDecl, ExpressionStmt, FunctionDecl, FunctionLiteral,
                          Get, Grouping, If, Literal, Logical, Print, Return, Set, Super, Ternary, This, Unary,
                          VarDeclaration, Variable, While)
from lox.runtime.values import stringify


def literal(value):
    """Strings are quoted so they can be told apart from identifiers."""
    if isinstance(value, str):
        return f'"{value}"'
    return stringify(value)


class AstPrinter:
    """Renders any expression or statement as a parenthesized prefix expression."""

    def print(self, node):
        if isinstance(node, Literal):
            return literal(node.value)
        if isinstance(node, Variable):
            return node.name.lexeme
        if isinstance(node, This):
            return "this"
        if isinstance(node, Super):
            return self.parenthesize("super", node.method.lexeme)
        if isinstance(node, (Binary, Logical)):
            return self.parenthesize(node.operator.lexeme, node.left, node.right)
        if isinstance(node, Unary):
            return self.parenthesize(node.operator.lexeme, node.right)
        if isinstance(node, Grouping):
            return self.parenthesize("group", node.expression)
        if isinstance(node, Ternary):
            return self.parenthesize("?:", node.condition, node.then_branch, node.else_branch)
        if isinstance(node, Assign):
            return self.parenthesize("=", node.name.lexeme, node.value)
        if isinstance(node, Call):
            return self.parenthesize("call", node.callee, *node.arguments)
        if isinstance(node, Get):
            return self.parenthesize(".", node.target, node.name.lexeme)
        if isinstance(node, Set):
            return self.parenthesize("=", self.parenthesize(".", node.target, node.name.lexeme), node.value)
        if isinstance(node, FunctionLiteral):
            return self.parenthesize("fun", self._params(node), *node.body)

        if isinstance(node, ExpressionStmt):
            return self.parenthesize(";", node.expression)
        if isinstance(node, Print):
            return self.parenthesize("print", node.expression)
        if isinstance(node, VarDeclaration):
            if node.initializer is None:
                return self.parenthesize("var", node.name.lexeme)
            return self.parenthesize("var", node.name.lexeme, node.initializer)
        if isinstance(node, Block):
            return self.parenthesize("block", *node.statements)
        if isinstance(node, If):
            if node.else_branch is None:
                return self.parenthesize("if", node.condition, node.then_branch)
            return self.parenthesize("if", node.condition, node.then_branch, node.else_branch)
        if isinstance(node, While):
            return self.parenthesize("while", node.condition, node.body)
        if isinstance(node, FunctionDecl):
            return self.parenthesize("fun", node.name.lexeme, self._params(node.function), *node.function.body)
        if isinstance(node, ClassDecl):
            parts = [node.name.lexeme]
            if node.superclass is not None:
                parts.append(self.parenthesize("<", node.superclass))
            return self.parenthesize("class", *parts, *node.methods)
        if isinstance(node, Break):
            return "(break)"
        if isinstance(node, Return):
            if node.value is None:
                return "(return)"
            return self.parenthesize("return", node.value)

        raise TypeError(f"unknown node '{type(node).__name__}'")

    def parenthesize(self, name, *parts):
        """parts may be nodes or already rendered strings."""
        rendered = [part if isinstance(part, str) else self.print(part) for part in parts]
        return "(" + " ".join([name] + rendered) + ")"

    @staticmethod
    def _params(function):
        return "(" + " ".join(param.lexeme for param in function.params) + ")"


class RpnPrinter:
    """Renders expressions in postfix order. Statements are rendered as their expression followed by the keyword, and
    nested statement bodies are left out: the point is to check operator precedence.
    """

    def print(self, node):
        if isinstance(node, Literal):
            return literal(node.value)
        if isinstance(node, Variable):
            return node.name.lexeme
        if isinstance(node, This):
            return "this"
        if isinstance(node, Super):
            return f"super {node.method.lexeme} ."
        if isinstance(node, (Binary, Logical)):
            return f"{self.print(node.left)} {self.print(node.right)} {node.operator.lexeme}"
        if isinstance(node, Unary):
            return f"{self.print(node.right)} {node.operator.lexeme}"
        if isinstance(node, Grouping):
            return self.print(node.expression)
        if isinstance(node, Ternary):
            return f"{self.print(node.condition)} {self.print(node.then_branch)} {self.print(node.else_branch)} ?:"
        if isinstance(node, Assign):
            return f"{self.print(node.value)} {node.name.lexeme} ="
        if isinstance(node, Call):
            parts = [self.print(node.callee)] + [self.print(argument) for argument in node.arguments]
            return " ".join(parts) + f" call/{len(node.arguments)}"
        if isinstance(node, Get):
            return f"{self.print(node.target)} {node.name.lexeme} ."
        if isinstance(node, Set):
            return f"{self.print(node.target)} {self.print(node.value)} {node.name.lexeme} .="
        if isinstance(node, FunctionLiteral):
            return f"<fun/{len(node.params)}>"

        if isinstance(node, ExpressionStmt):
            return self.print(node.expression)
        if isinstance(node, Print):
            return f"{self.print(node.expression)} print"
        if isinstance(node, VarDeclaration):
            value = "nil" if node.initializer is None else self.print(node.initializer)
            return f"{value} {node.name.lexeme} var"
        if isinstance(node, Return):
            value = "nil" if node.value is None else self.print(node.value)
            return f"{value} return"
        if isinstance(node, (If, While)):
            return f"{self.print(node.condition)} {type(node).__name__.lower()}"
        if isinstance(node, Block):
            return "{ " + " ; ".join(self.print(stmt) for stmt in node.statements) + " }"
        if isinstance(node, FunctionDecl):
            return f"<fun {node.name.lexeme}/{len(node.function.params)}>"
        if isinstance(node, ClassDecl):
            return f"<class {node.name.lexeme}>"
        if isinstance(node, Break):
            return "break"

        raise TypeError(f"unknown node '{type(node).__name__}'")
