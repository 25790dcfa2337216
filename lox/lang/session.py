"""Session control for the Lox interpreter: runs units of source code (a file, or what is typed into the shell)
through the scanner, parser, resolver and interpreter, stopping before execution if anything static went wrong.
"""

from lox.lang.error import LoxError
from lox.lang.parser import Parser
from lox.lang.printer import AstPrinter, RpnPrinter
from lox.lang.resolver import Resolver
from lox.lang.scanner import Scanner
from lox.runtime.interpreter import Interpreter


class Session:
    """Governs a Lox session. Globals defined by one run are visible to the next runs of the same session."""
    PRINTERS = {"ast": AstPrinter, "rpn": RpnPrinter}

    def __init__(self, error_handler, out=None):
        self.error_handler = error_handler
        self.out = out  # program output; None means sys.stdout
        self.interpreter = Interpreter(error_handler, out)

    @staticmethod
    def read(path):
        """Returns the contents of the file at path."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                return file.read()
        except OSError:
            raise LoxError(f"'{path}' could not be opened")

    def parse(self, source, repl=False):
        """Scans and parses source. Returns (statements, expression), where expression is only set for a lone
        expression typed into the shell (see Parser.parse_repl).
        """
        tokens = Scanner(source, self.error_handler).scan()
        parser = Parser(tokens, self.error_handler)
        if repl:
            return parser.parse_repl()
        return parser.parse(), None

    def run(self, source, repl=False):
        """Runs source and returns the error handler, whose had_error and had_runtime_error flags describe how the run
        went. Errors from previous runs are forgotten first.
        """
        self.error_handler.reset(source)

        statements, expression = self.parse(source, repl)
        if self.error_handler.had_error:
            return self.error_handler

        resolver = Resolver(self.interpreter.locals, self.error_handler)
        if expression is not None:
            resolver.resolve_expression(expression)
        else:
            resolver.resolve(statements)
        if self.error_handler.had_error:
            return self.error_handler

        if expression is not None:
            self.interpreter.evaluate_and_print(expression)
        else:
            self.interpreter.interpret(statements)
        return self.error_handler

    def run_file(self, path):
        return self.run(Session.read(path))

    def dump(self, source, form="ast"):
        """Prints each top-level statement of source in debug form ('ast' or 'rpn') instead of running it."""
        self.error_handler.reset(source)

        statements, __ = self.parse(source)
        if self.error_handler.had_error:
            return self.error_handler

        printer = Session.PRINTERS[form]()
        for stmt in statements:
            print(printer.print(stmt), file=self.out)
        return self.error_handler
