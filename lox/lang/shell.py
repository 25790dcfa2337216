"""Handles interactive/command-line mode for the Lox interpreter. Uses cmd as backend."""

import cmd
import io

from lox.lang.error import ErrorHandler
from lox.lang.scanner import Scanner
from lox.lang.tokens import TokenType


class Shell(cmd.Cmd):
    """Lox interpreter shell. Each complete unit typed in is run through the session, which keeps its globals."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess
        self._tmp_line = ""

    @staticmethod
    def is_open(source):
        """Whether or not source has more opening braces/parentheses than closing ones. Only tokens count, so brackets
        inside strings and comments are ignored. Scan errors are left for the actual run to report.
        """
        depth = 0
        for token in Scanner(source, ErrorHandler(out=io.StringIO(), color=False)).scan():
            if token.type in (TokenType.LEFT_BRACE, TokenType.LEFT_PAREN):
                depth += 1
            elif token.type in (TokenType.RIGHT_BRACE, TokenType.RIGHT_PAREN):
                depth -= 1
        return depth > 0

    def default(self, line):
        """Executes arbitrary Lox source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            source = self._tmp_line + line + "\n"

            if Shell.is_open(source):
                self._tmp_line = source
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            self.sess.run(source, repl=True)

    def do_help(self, arg):
        """Prints a short introduction to Lox and to the shell, whatever arg is."""
        print("Welcome to the Lox interpreter!\n\n"
              "Lox is a small dynamically-typed language with closures and classes. Statements \n"
              "end with ';', and a lone expression is evaluated and printed.\n\n"
              "Try it out by typing 'var greeting = \"hi\";', then 'greeting + \" there\"'. \n"
              "Blocks and calls may span several lines: the prompt changes to '. ' until \n"
              "every '{' and '(' is closed.", file=self.stdout)

    def emptyline(self):
        """An empty line repeats nothing. Inside an unfinished block it is kept, so line numbers stay right."""
        if self._tmp_line:
            self._tmp_line += "\n"
        return ""

    def do_EOF(self, arg):
        """Ctrl-D: leaves the shell on a fresh line."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Leaves the shell. Globals defined in the session are lost."""
        return True
