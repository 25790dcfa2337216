"""Error handling for the Lox interpreter. Every stage (scanner, parser, resolver, interpreter) reports through a single
ErrorHandler, which accumulates the diagnostics of the current run and exposes whether a static or a runtime error
happened. Only LoxErrors should be encountered during running: if another type of error is raised and makes it all the
way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys
from dataclasses import dataclass

from termcolor import colored


class LoxError(Exception):
    """Base class for every error that is reported to the user. token is the offending token, if there is one."""

    def __init__(self, msg, token=None, line=None):
        super().__init__(msg)
        self.msg = msg
        self.token = token
        self.line = token.line if line is None and token is not None else line

    @property
    def where(self):
        """Location of the error relative to its token: empty if there is no token."""
        if self.token is None:
            return ""
        if not self.token.lexeme:
            return " at end"
        return f" at '{self.token.lexeme}'"


class ScanError(LoxError):
    """Lexical error: unterminated string or unexpected character."""


class ParseError(LoxError):
    """Syntax error. Also raised inside the parser to unwind to the nearest statement boundary."""


class ResolveError(LoxError):
    """Static semantic error found by the resolver."""


class LoxRuntimeError(LoxError):
    """Error raised while evaluating. Always anchored to a token."""

    def __init__(self, token, msg):
        super().__init__(msg, token)


@dataclass(frozen=True)
class Diagnostic:
    """A reported error, as recorded by ErrorHandler."""
    kind: str
    line: int
    where: str
    message: str
    lexeme: str = ""

    def __str__(self):
        label = "Runtime error" if self.kind == ErrorHandler.RUNTIME else "Error"
        prefix = f"[line {self.line}] " if self.line is not None else ""
        return f"{prefix}{label}{self.where}: {self.message}"


class ErrorHandler:
    """Accumulates the errors of one run. Also a context manager that will report any error escaping its block instead
    of letting it crash the process.
    """
    STATIC = "static"
    RUNTIME = "runtime"

    ERROR = "red"
    RUNTIME_ERROR = "magenta"

    def __init__(self, fatal=True, out=None, color=True, verbose=False):
        self.fatal = fatal      # whether internal errors exit the process
        self.out = out          # stream diagnostics are written to (None means sys.stderr)
        self.color = color
        self.verbose = verbose  # whether to show the offending source line under each error

        self.lines = []
        self.diagnostics = []
        self.had_error = False
        self.had_runtime_error = False

    def reset(self, source=""):
        """Forgets previous errors. Should be called before every independent run; source is used for diagnosis."""
        self.lines = source.splitlines()
        self.diagnostics = []
        self.had_error = False
        self.had_runtime_error = False

    def _paint(self, text, color=None, attrs=None):
        return colored(text, color, attrs=attrs) if self.color else text

    def diagnose(self, diagnostic, color):
        """Returns the source line of diagnostic with the offending lexeme highlighted and underlined."""
        if not diagnostic.line or diagnostic.line > len(self.lines):
            return None

        line = self.lines[diagnostic.line - 1]
        start = line.find(diagnostic.lexeme) if diagnostic.lexeme else -1
        if start == -1:
            return "  " + line

        end = start + len(diagnostic.lexeme)
        diagnosis = "  " + line[:start] + self._paint(line[start:end], color, ["bold"]) + line[end:] + "\n"
        diagnosis += "  " + " " * start + self._paint("^" + "~" * (end - start - 1), color, ["bold"])
        return diagnosis

    def throw(self, error):
        """Reports error, a LoxError, and records it. Runtime errors set had_runtime_error, everything else had_error.
        Never raises: recovery is up to the stage that detected the error.
        """
        runtime = isinstance(error, LoxRuntimeError)
        lexeme = error.token.lexeme if error.token is not None else ""
        diagnostic = Diagnostic(ErrorHandler.RUNTIME if runtime else ErrorHandler.STATIC,
                                error.line, error.where, error.msg, lexeme)

        self.diagnostics.append(diagnostic)
        if runtime:
            self.had_runtime_error = True
        else:
            self.had_error = True

        color = ErrorHandler.RUNTIME_ERROR if runtime else ErrorHandler.ERROR
        print(self._paint(str(diagnostic), color, ["bold"]), file=self.out or sys.stderr)

        if self.verbose:
            diagnosis = self.diagnose(diagnostic, color)
            if diagnosis:
                print(diagnosis, file=self.out or sys.stderr)

    def internal(self, msg):
        """Reports a failure of the interpreter itself (not of the Lox program)."""
        self.had_error = True
        error_msg = self._paint("[internal] ", ErrorHandler.ERROR, ["bold"])
        error_msg += self._paint("error: ", ErrorHandler.ERROR, ["bold"]) + msg
        print(error_msg, file=self.out or sys.stderr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            print(self._paint("keyboard interrupt", ErrorHandler.ERROR, ["bold"]), file=self.out or sys.stderr)
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is not None and issubclass(exc_type, LoxError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.internal(f"unknown error: '{exc_type.__name__}: {exc_val}'")
            if self.fatal:
                sys.exit(70)

        return not do_exit
