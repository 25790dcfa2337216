import io
import unittest

from lox.lang.ast import Break, ExpressionStmt, FunctionDecl, Print, VarDeclaration, While
from lox.lang.error import ErrorHandler
from lox.lang.parser import Parser
from lox.lang.printer import AstPrinter
from lox.lang.scanner import Scanner


def parse(source, repl=False):
    error_handler = ErrorHandler(out=io.StringIO(), color=False)
    parser = Parser(Scanner(source, error_handler).scan(), error_handler)
    result = parser.parse_repl() if repl else parser.parse()
    return result, error_handler


def messages(error_handler):
    return [diagnostic.message for diagnostic in error_handler.diagnostics]


class ParserTestCase(unittest.TestCase):

    def assertParses(self, cases):
        printer = AstPrinter()
        for case, expected in cases.items():
            statements, error_handler = parse(case)
            self.assertFalse(error_handler.had_error, (case, messages(error_handler)))
            self.assertEqual(expected, [printer.print(stmt) for stmt in statements], case)

    def test_precedence(self):
        self.assertParses({
            "1 + 2 * 3;": ["(; (+ 1 (* 2 3)))"],
            "(1 + 2) * 3;": ["(; (* (group (+ 1 2)) 3))"],
            "-a - -b;": ["(; (- (- a) (- b)))"],
            "!true == false;": ["(; (== (! true) false))"],
            "1 < 2 == 3 >= 4;": ["(; (== (< 1 2) (>= 3 4)))"],
            "a or b and c;": ["(; (or a (and b c)))"],
            "8 / 4 / 2;": ["(; (/ (/ 8 4) 2))"],
        })

    def test_assignment_and_ternary(self):
        self.assertParses({
            "a = b = c;": ["(; (= a (= b c)))"],
            "a ? b : c ? d : e;": ["(; (?: a b (?: c d e)))"],
            "a or b ? 1 : 2;": ["(; (?: (or a b) 1 2))"],
            "x = a ? b : c;": ["(; (= x (?: a b c)))"],
            "a.b = 1;": ["(; (= (. a b) 1))"],
            "a.b.c = d.e;": ["(; (= (. (. a b) c) (. d e)))"],
        })

    def test_calls_and_members(self):
        self.assertParses({
            "f();": ["(; (call f))"],
            "f(1, \"two\")(3);": ["(; (call (call f 1 \"two\") 3))"],
            "a.b(c).d(e);": ["(; (call (. (call (. a b) c) d) e))"],
            "super.m(); this.x;": ["(; (call (super m)))", "(; (. this x))"],
        })

    def test_statements(self):
        self.assertParses({
            "var a; var b = 1;": ["(var a)", "(var b 1)"],
            "print nil;": ["(print nil)"],
            "{ var a = 1; print a; }": ["(block (var a 1) (print a))"],
            "if (a) print 1; else print 2;": ["(if a (print 1) (print 2))"],
            "if (a) if (b) print 1; else print 2;": ["(if a (if b (print 1) (print 2)))"],
            "while (a) a = a - 1;": ["(while a (; (= a (- a 1))))"],
            "fun add(a, b) { return a + b; }": ["(fun add (a b) (return (+ a b)))"],
            "fun f() { return; }": ["(fun f () (return))"],
            "var f = fun (a) { print a; };": ["(var f (fun (a) (print a)))"],
            "fun (x) {};": ["(; (fun (x)))"],
            "class A {}": ["(class A)"],
            "class B < A { init(x) { this.x = x; } get() { return this.x; } }":
                ["(class B (< A) (fun init (x) (; (= (. this x) x))) (fun get () (return (. this x))))"],
        })

    def test_for_desugaring(self):
        self.assertParses({
            "for (var i = 0; i < 3; i = i + 1) print i;":
                ["(block (var i 0) (while (< i 3) (block (print i) (; (= i (+ i 1))))))"],
            "for (;;) break;": ["(while true (break))"],
            "for (i = 0; i < 1;) print i;": ["(block (; (= i 0)) (while (< i 1) (print i)))"],
        })

    def test_break(self):
        statements, error_handler = parse("while (true) { if (a) break; }")
        self.assertFalse(error_handler.had_error)
        self.assertIsInstance(statements[0], While)

        # the loop counter is syntactic: a function body inside a loop still counts as inside it
        statements, error_handler = parse("while (true) { fun f() { break; } }")
        self.assertFalse(error_handler.had_error)

        statements, error_handler = parse("break; print 1;")
        self.assertEqual(["Can't use 'break' outside of a loop."], messages(error_handler))
        self.assertIsInstance(statements[0], Break)
        self.assertIsInstance(statements[1], Print)

        statements, error_handler = parse("while (true) print 1; break;")
        self.assertEqual(["Can't use 'break' outside of a loop."], messages(error_handler))

    def test_invalid_assignment_is_not_fatal(self):
        statements, error_handler = parse("1 = 2; a + b = c; print 3;")
        self.assertEqual(["Invalid assignment target.", "Invalid assignment target."], messages(error_handler))
        self.assertEqual(" at '='", error_handler.diagnostics[0].where)
        self.assertEqual(3, len(statements))

    def test_argument_cap(self):
        source = "f(" + ", ".join(["1"] * 256) + ");"
        statements, error_handler = parse(source)
        self.assertEqual(["Can't have more than 255 arguments."], messages(error_handler))
        self.assertEqual(1, len(statements))

        source = "fun f(" + ", ".join(f"a{i}" for i in range(256)) + ") {}"
        statements, error_handler = parse(source)
        self.assertEqual(["Can't have more than 255 parameters."], messages(error_handler))
        self.assertIsInstance(statements[0], FunctionDecl)

    def test_recovery_collects_several_errors(self):
        statements, error_handler = parse("var = 1;\nprint ;\nvar ok = 2;\nclass { }\nprint ok;")
        self.assertEqual(["Expect variable name.", "Expect expression.", "Expect class name."],
                         messages(error_handler))
        self.assertEqual([1, 2, 4], [diagnostic.line for diagnostic in error_handler.diagnostics])
        self.assertEqual(["(var ok 2)", "(print ok)"], [AstPrinter().print(stmt) for stmt in statements])

    def test_error_at_end(self):
        statements, error_handler = parse("print 1")
        self.assertEqual(["Expect ';' after value."], messages(error_handler))
        self.assertEqual(" at end", error_handler.diagnostics[0].where)
        self.assertEqual([], statements)

    def test_repl(self):
        (statements, expression), error_handler = parse("1 + 2", repl=True)
        self.assertEqual([], statements)
        self.assertEqual("(+ 1 2)", AstPrinter().print(expression))

        (statements, expression), error_handler = parse("var a = 1; print a;", repl=True)
        self.assertIsNone(expression)
        self.assertIsInstance(statements[0], VarDeclaration)

        (statements, expression), error_handler = parse("a; b", repl=True)
        self.assertIsNone(expression)
        self.assertEqual(["Expect ';' after expression."], messages(error_handler))

        (statements, expression), error_handler = parse("a;", repl=True)
        self.assertIsNone(expression)
        self.assertIsInstance(statements[0], ExpressionStmt)
        self.assertFalse(error_handler.had_error)


if __name__ == '__main__':
    unittest.main()
