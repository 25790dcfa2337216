"""Lexical analysis for Lox. Converts a string of source code into a flat list of Tokens in a single left-to-right pass.

Lexical grammar:

```
<number>     ::= <digit>+ ( "." <digit>+ )?          ; always stored as a float
<string>     ::= '"' <char except '"'>* '"'          ; may span lines, no escapes
<identifier> ::= <alpha> ( <alpha> | <digit> )*      ; <alpha> is [a-zA-Z_], keywords are reserved
<comment>    ::= "//" <char except newline>*
```

Errors (unterminated strings, unexpected characters) are reported but never stop the scan, so one pass can surface
several of them.
"""

from lox.lang.error import ScanError
from lox.lang.tokens import KEYWORDS, Token, TokenType


class Scanner:
    """Scans one unit of source code. Call scan once."""
    SINGLE = {
        "(": TokenType.LEFT_PAREN,
        ")": TokenType.RIGHT_PAREN,
        "{": TokenType.LEFT_BRACE,
        "}": TokenType.RIGHT_BRACE,
        ",": TokenType.COMMA,
        ".": TokenType.DOT,
        "-": TokenType.MINUS,
        "+": TokenType.PLUS,
        ";": TokenType.SEMICOLON,
        "*": TokenType.STAR,
        "?": TokenType.QUESTION,
        ":": TokenType.COLON,
    }
    # char: (type alone, type when followed by "=")
    WITH_EQUAL = {
        "!": (TokenType.BANG, TokenType.BANG_EQUAL),
        "=": (TokenType.EQUAL, TokenType.EQUAL_EQUAL),
        ">": (TokenType.GREATER, TokenType.GREATER_EQUAL),
        "<": (TokenType.LESS, TokenType.LESS_EQUAL),
    }
    WHITESPACE = " \r\t"

    def __init__(self, source, error_handler):
        self.source = source
        self.error_handler = error_handler

        self.tokens = []
        self.start = 0    # offset of the first char of the token being scanned
        self.current = 0  # offset of the char being considered
        self.line = 1

    def scan(self):
        """Returns the list of tokens in self.source, always terminated by a single EOF token."""
        while not self.is_at_end():
            self.start = self.current
            self._scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def is_at_end(self):
        return self.current >= len(self.source)

    def _scan_token(self):
        char = self._advance()

        if char in Scanner.SINGLE:
            self._add_token(Scanner.SINGLE[char])
        elif char in Scanner.WITH_EQUAL:
            alone, with_equal = Scanner.WITH_EQUAL[char]
            self._add_token(with_equal if self._match("=") else alone)
        elif char == "/":
            if self._match("/"):
                while self._peek() != "\n" and not self.is_at_end():
                    self._advance()
            else:
                self._add_token(TokenType.SLASH)
        elif char == "\n":
            self.line += 1
        elif char in Scanner.WHITESPACE:
            pass
        elif char == '"':
            self._string()
        elif is_digit(char):
            self._number()
        elif is_alpha(char):
            self._identifier()
        else:
            self.error_handler.throw(ScanError(f"Unexpected character '{char}'.", line=self.line))

    def _string(self):
        while self._peek() != '"' and not self.is_at_end():
            if self._peek() == "\n":
                self.line += 1
            self._advance()

        if self.is_at_end():
            self.error_handler.throw(ScanError("Unterminated string.", line=self.line))
            return

        self._advance()  # closing "
        self._add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def _number(self):
        while is_digit(self._peek()):
            self._advance()

        if self._peek() == "." and is_digit(self._peek_next()):
            self._advance()
            while is_digit(self._peek()):
                self._advance()

        self._add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def _identifier(self):
        while is_alpha(self._peek()) or is_digit(self._peek()):
            self._advance()

        text = self.source[self.start:self.current]
        self._add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def _add_token(self, token_type, literal=None):
        self.tokens.append(Token(token_type, self.source[self.start:self.current], literal, self.line))

    def _advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def _match(self, expected):
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def _peek(self):
        return "\0" if self.is_at_end() else self.source[self.current]

    def _peek_next(self):
        return "\0" if self.current + 1 >= len(self.source) else self.source[self.current + 1]


def is_digit(char):
    return "0" <= char <= "9"


def is_alpha(char):
    return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"
