import io
import unittest

from lox.lang.error import ErrorHandler
from lox.lang.scanner import Scanner
from lox.lang.tokens import TokenType


def scan(source):
    error_handler = ErrorHandler(out=io.StringIO(), color=False)
    return Scanner(source, error_handler).scan(), error_handler


class ScannerTestCase(unittest.TestCase):

    def test_punctuation(self):
        cases = {
            "(){},.-+;/*?:": [TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.LEFT_BRACE,
                              TokenType.RIGHT_BRACE, TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS,
                              TokenType.SEMICOLON, TokenType.SLASH, TokenType.STAR, TokenType.QUESTION,
                              TokenType.COLON],
            "! != = == > >= < <=": [TokenType.BANG, TokenType.BANG_EQUAL, TokenType.EQUAL, TokenType.EQUAL_EQUAL,
                                    TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS,
                                    TokenType.LESS_EQUAL],
            "!==": [TokenType.BANG_EQUAL, TokenType.EQUAL],
            "<==": [TokenType.LESS_EQUAL, TokenType.EQUAL],
        }
        for case, expected in cases.items():
            tokens, __ = scan(case)
            self.assertEqual(expected + [TokenType.EOF], [token.type for token in tokens], case)

    def test_numbers(self):
        tokens, __ = scan("12 3.25 7.")
        self.assertEqual([TokenType.NUMBER, TokenType.NUMBER, TokenType.NUMBER, TokenType.DOT, TokenType.EOF],
                         [token.type for token in tokens])
        self.assertEqual([12.0, 3.25, 7.0], [token.literal for token in tokens[:3]])
        self.assertIsInstance(tokens[0].literal, float)
        self.assertEqual("3.25", tokens[1].lexeme)

    def test_strings(self):
        tokens, __ = scan('"hello" "multi\nline" x')
        self.assertEqual("hello", tokens[0].literal)
        self.assertEqual('"hello"', tokens[0].lexeme)
        self.assertEqual("multi\nline", tokens[1].literal)
        self.assertEqual(2, tokens[1].line)  # line is taken where the literal ends
        self.assertEqual(2, tokens[2].line)

    def test_identifiers_and_keywords(self):
        tokens, __ = scan("and break class else false for fun if nil or print return super this true var while "
                          "_private orchid var2")
        expected = [TokenType.AND, TokenType.BREAK, TokenType.CLASS, TokenType.ELSE, TokenType.FALSE, TokenType.FOR,
                    TokenType.FUN, TokenType.IF, TokenType.NIL, TokenType.OR, TokenType.PRINT, TokenType.RETURN,
                    TokenType.SUPER, TokenType.THIS, TokenType.TRUE, TokenType.VAR, TokenType.WHILE,
                    TokenType.IDENTIFIER, TokenType.IDENTIFIER, TokenType.IDENTIFIER, TokenType.EOF]
        self.assertEqual(expected, [token.type for token in tokens])
        self.assertEqual("orchid", tokens[18].lexeme)
        self.assertIsNone(tokens[18].literal)

    def test_comments_and_lines(self):
        tokens, __ = scan("a // ignored ( ) \"\nb\n\n  c")
        self.assertEqual(["a", "b", "c", ""], [token.lexeme for token in tokens])
        self.assertEqual([1, 2, 4, 4], [token.line for token in tokens])

    def test_eof(self):
        for case in ["", "   \n\t", "// only a comment"]:
            tokens, error_handler = scan(case)
            self.assertEqual([TokenType.EOF], [token.type for token in tokens], case)
            self.assertFalse(error_handler.had_error, case)

    def test_errors_do_not_stop_scanning(self):
        tokens, error_handler = scan('var a = @;\n# b "open')
        self.assertTrue(error_handler.had_error)
        self.assertEqual(["Unexpected character '@'.", "Unexpected character '#'.", "Unterminated string."],
                         [diagnostic.message for diagnostic in error_handler.diagnostics])
        self.assertEqual([1, 2, 2], [diagnostic.line for diagnostic in error_handler.diagnostics])
        self.assertEqual([TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL, TokenType.SEMICOLON,
                          TokenType.IDENTIFIER, TokenType.EOF], [token.type for token in tokens])


if __name__ == '__main__':
    unittest.main()
