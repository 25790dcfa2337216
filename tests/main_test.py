import io
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from lox.main import EX_DATAERR, EX_SOFTWARE, in_worker, main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)

    def lox(self, source, *options):
        path = os.path.join(self.directory.name, "script.lox")
        with open(path, "w", encoding="utf-8") as file:
            file.write(source)

        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main([path, "--no-color", *options])
        return code, out.getvalue().splitlines(), err.getvalue().splitlines()

    def test_ok(self):
        code, out, err = self.lox("var greeting = \"hello\";\nprint greeting + \" world\";\n")
        self.assertEqual(0, code)
        self.assertEqual(["hello world"], out)
        self.assertEqual([], err)

    def test_static_error(self):
        code, out, err = self.lox("print 1;\nvar = 2;\n")
        self.assertEqual(EX_DATAERR, code)
        self.assertEqual([], out)
        self.assertEqual(["[line 2] Error at '=': Expect variable name."], err)

    def test_runtime_error(self):
        code, out, err = self.lox("print 1;\nprint 1 + nil;\nprint 2;\n")
        self.assertEqual(EX_SOFTWARE, code)
        self.assertEqual(["1"], out)
        self.assertEqual(["[line 2] Runtime error at '+': Operands of '+' must be two numbers or two strings."], err)

    def test_verbose(self):
        code, out, err = self.lox("print nope;\n", "--verbose")
        self.assertEqual(EX_SOFTWARE, code)
        self.assertEqual(["[line 1] Runtime error at 'nope': Undefined variable 'nope'.",
                          "  print nope;",
                          "        ^~~~"], err)

    def test_dump(self):
        code, out, __ = self.lox("print -1 * (2 + 3);\n", "--dump", "ast")
        self.assertEqual(0, code)
        self.assertEqual(["(print (* (- 1) (group (+ 2 3))))"], out)

        code, out, __ = self.lox("print -1 * (2 + 3);\n", "--dump", "rpn")
        self.assertEqual(["1 - 2 3 + * print"], out)

    def test_deep_recursion(self):
        code, out, err = self.lox("fun count(n) { if (n == 0) return 0; return 1 + count(n - 1); }\n"
                                  "print count(1500);\n")
        self.assertEqual(0, code)
        self.assertEqual(["1500"], out)

        code, out, err = self.lox("fun forever(n) { return forever(n + 1); }\nforever(0);\nprint \"unreached\";\n")
        self.assertEqual(EX_SOFTWARE, code)
        self.assertEqual([], out)
        self.assertEqual(["[line 1] Runtime error at ')': Stack overflow."], err)

    def test_worker_exit_codes(self):
        def exits():
            sys.exit(EX_SOFTWARE)

        self.assertEqual(3, in_worker(lambda value: value + 1, 2))
        self.assertEqual(EX_SOFTWARE, in_worker(exits))

    def test_missing_file(self):
        err = io.StringIO()
        with redirect_stderr(err):
            code = main([os.path.join(self.directory.name, "missing.lox"), "--no-color"])
        self.assertEqual(EX_DATAERR, code)
        self.assertIn("could not be opened", err.getvalue())


if __name__ == '__main__':
    unittest.main()
