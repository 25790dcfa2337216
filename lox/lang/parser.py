"""Recursive-descent parser for Lox. Turns the token list produced by Scanner into a list of statements.

Grammar, lowest precedence first:

```
<program>     ::= <declaration>* EOF
<declaration> ::= "class" IDENT ( "<" IDENT )? "{" <function>* "}"
                | "fun" <function>
                | "var" IDENT ( "=" <expression> )? ";"
                | <statement>
<function>    ::= IDENT "(" <params>? ")" <block>
<statement>   ::= <expr_stmt> | <for> | <if> | <print> | <return> | <while> | <break> | <block>
<for>         ::= "for" "(" ( <var_decl> | <expr_stmt> | ";" ) <expression>? ";" <expression>? ")" <statement>
                                                        ; desugared into a while loop inside a block
<break>       ::= "break" ";"                           ; only legal inside a loop body

<expression>  ::= <assignment>
<assignment>  ::= ( <call> "." )? IDENT "=" <assignment> | <ternary>
<ternary>     ::= <logic_or> ( "?" <ternary> ":" <ternary> )?
<logic_or>    ::= <logic_and> ( "or" <logic_and> )*
<logic_and>   ::= <equality> ( "and" <equality> )*
<equality>    ::= <comparison> ( ( "!=" | "==" ) <comparison> )*
<comparison>  ::= <term> ( ( ">" | ">=" | "<" | "<=" ) <term> )*
<term>        ::= <factor> ( ( "-" | "+" ) <factor> )*
<factor>      ::= <unary> ( ( "/" | "*" ) <unary> )*
<unary>       ::= ( "!" | "-" ) <unary> | <call>
<call>        ::= <primary> ( "(" <arguments>? ")" | "." IDENT )*
<primary>     ::= "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENT | "(" <expression> ")"
                | "super" "." IDENT | "fun" "(" <params>? ")" <block>
```

A syntax error is reported, then unwinds (as a ParseError) to the enclosing declaration, which skips tokens up to the
next statement boundary and carries on. Errors that leave the parse unambiguous (bad assignment target, too many
arguments, misplaced break) are reported without unwinding.
"""

from lox.lang.ast import (Assign, Binary, Block, Break, Call, ClassDecl, ExpressionStmt, FunctionDecl, FunctionLiteral,
                          Get, Grouping, If, Literal, Logical, Print, Return, Set, Super, Ternary, This, Unary,
                          VarDeclaration, Variable, While)
from lox.lang.error import ParseError
from lox.lang.tokens import TokenType


class Parser:
    """Parses one token list. Call parse (or parse_repl) once."""
    MAX_ARGS = 255

    # tokens that begin a statement, used to find a place to resume after an error
    BOUNDARIES = (TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR, TokenType.IF, TokenType.WHILE,
                  TokenType.PRINT, TokenType.RETURN)

    def __init__(self, tokens, error_handler):
        self.tokens = tokens
        self.error_handler = error_handler

        self.current = 0
        self.loop_depth = 0  # syntactic only: not reset by function bodies

        self.repl = False
        self.bare_expression = None  # in repl mode, a trailing expression with no ';'

    def parse(self):
        """Returns the list of statements that could be parsed. Failed declarations are dropped (and reported)."""
        statements = []
        while not self._is_at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    def parse_repl(self):
        """Parses a unit typed into the shell. Returns (statements, expression): if the whole unit is a single
        expression without a trailing ';', expression is set and statements is empty.
        """
        self.repl = True
        statements = self.parse()

        if self.bare_expression is not None:
            if len(statements) == 1 and isinstance(statements[0], ExpressionStmt) \
                    and statements[0].expression is self.bare_expression:
                return [], self.bare_expression
            if not self.error_handler.had_error:  # a nested one already failed on its block
                self._error(self._peek(), "Expect ';' after expression.")

        return statements, None

    # ---- Declarations --------------------------------------------------------

    def _declaration(self):
        try:
            if self._match(TokenType.CLASS):
                return self._class_declaration()
            if self._check(TokenType.FUN) and self._check_next(TokenType.IDENTIFIER):
                self._advance()
                return self._function("function")
            if self._match(TokenType.VAR):
                return self._var_declaration()
            return self._statement()
        except ParseError:
            self._synchronize()
            return None

    def _class_declaration(self):
        name = self._consume(TokenType.IDENTIFIER, "Expect class name.")

        superclass = None
        if self._match(TokenType.LESS):
            superclass = Variable(self._consume(TokenType.IDENTIFIER, "Expect superclass name."))

        self._consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")
        methods = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            methods.append(self._function("method"))
        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")

        return ClassDecl(name, superclass, tuple(methods))

    def _function(self, kind):
        name = self._consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        return FunctionDecl(name, self._function_body(kind, f"{kind} name"))

    def _function_body(self, kind, after):
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after {after}.")

        params = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= Parser.MAX_ARGS:
                    self._error(self._peek(), f"Can't have more than {Parser.MAX_ARGS} parameters.")
                params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self._consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return FunctionLiteral(tuple(params), tuple(self._block()))

    def _var_declaration(self):
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self._match(TokenType.EQUAL):
            initializer = self._expression()

        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return VarDeclaration(name, initializer)

    # ---- Statements ----------------------------------------------------------

    def _statement(self):
        if self._match(TokenType.FOR):
            return self._for_statement()
        if self._match(TokenType.IF):
            return self._if_statement()
        if self._match(TokenType.PRINT):
            return self._print_statement()
        if self._match(TokenType.RETURN):
            return self._return_statement()
        if self._match(TokenType.WHILE):
            return self._while_statement()
        if self._match(TokenType.BREAK):
            return self._break_statement()
        if self._match(TokenType.LEFT_BRACE):
            return Block(tuple(self._block()))
        return self._expression_statement()

    def _for_statement(self):
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition = None if self._check(TokenType.SEMICOLON) else self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None if self._check(TokenType.RIGHT_PAREN) else self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._loop_body()

        if increment is not None:
            body = Block((body, ExpressionStmt(increment)))
        if condition is None:
            condition = Literal(True)
        loop = While(condition, body)

        if initializer is not None:
            return Block((initializer, loop))
        return loop

    def _if_statement(self):
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._statement()
        else_branch = self._statement() if self._match(TokenType.ELSE) else None
        return If(condition, then_branch, else_branch)

    def _print_statement(self):
        value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return Print(value)

    def _return_statement(self):
        keyword = self._previous()
        value = None if self._check(TokenType.SEMICOLON) else self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return Return(keyword, value)

    def _while_statement(self):
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return While(condition, self._loop_body())

    def _loop_body(self):
        self.loop_depth += 1
        try:
            return self._statement()
        finally:
            self.loop_depth -= 1

    def _break_statement(self):
        keyword = self._previous()
        if self.loop_depth == 0:
            self._error(keyword, "Can't use 'break' outside of a loop.")
        self._consume(TokenType.SEMICOLON, "Expect ';' after 'break'.")
        return Break(keyword)

    def _block(self):
        statements = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)

        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def _expression_statement(self):
        expr = self._expression()
        if self.repl and self._is_at_end() and self.bare_expression is None:
            self.bare_expression = expr
        else:
            self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStmt(expr)

    # ---- Expressions ---------------------------------------------------------

    def _expression(self):
        return self._assignment()

    def _assignment(self):
        expr = self._ternary()

        if self._match(TokenType.EQUAL):
            equals = self._previous()
            value = self._assignment()

            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.target, expr.name, value)

            self._error(equals, "Invalid assignment target.")

        return expr

    def _ternary(self):
        expr = self._or()

        if self._match(TokenType.QUESTION):
            then_branch = self._ternary()
            self._consume(TokenType.COLON, "Expect ':' after then branch of conditional expression.")
            else_branch = self._ternary()
            return Ternary(expr, then_branch, else_branch)

        return expr

    def _or(self):
        expr = self._and()
        while self._match(TokenType.OR):
            operator = self._previous()
            expr = Logical(expr, operator, self._and())
        return expr

    def _and(self):
        expr = self._equality()
        while self._match(TokenType.AND):
            operator = self._previous()
            expr = Logical(expr, operator, self._equality())
        return expr

    def _binary(self, operand, *types):
        """Parses a left-associative chain of operand separated by any operator in types."""
        expr = operand()
        while self._match(*types):
            operator = self._previous()
            expr = Binary(expr, operator, operand())
        return expr

    def _equality(self):
        return self._binary(self._comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def _comparison(self):
        return self._binary(self._term, TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS,
                            TokenType.LESS_EQUAL)

    def _term(self):
        return self._binary(self._factor, TokenType.MINUS, TokenType.PLUS)

    def _factor(self):
        return self._binary(self._unary, TokenType.SLASH, TokenType.STAR)

    def _unary(self):
        if self._match(TokenType.BANG, TokenType.MINUS):
            operator = self._previous()
            return Unary(operator, self._unary())
        return self._call()

    def _call(self):
        expr = self._primary()

        while True:
            if self._match(TokenType.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._match(TokenType.DOT):
                name = self._consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = Get(expr, name)
            else:
                break

        return expr

    def _finish_call(self, callee):
        arguments = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= Parser.MAX_ARGS:
                    self._error(self._peek(), f"Can't have more than {Parser.MAX_ARGS} arguments.")
                arguments.append(self._expression())
                if not self._match(TokenType.COMMA):
                    break

        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, tuple(arguments))

    def _primary(self):
        if self._match(TokenType.FALSE):
            return Literal(False)
        if self._match(TokenType.TRUE):
            return Literal(True)
        if self._match(TokenType.NIL):
            return Literal(None)
        if self._match(TokenType.NUMBER, TokenType.STRING):
            return Literal(self._previous().literal)

        if self._match(TokenType.THIS):
            return This(self._previous())
        if self._match(TokenType.SUPER):
            keyword = self._previous()
            self._consume(TokenType.DOT, "Expect '.' after 'super'.")
            return Super(keyword, self._consume(TokenType.IDENTIFIER, "Expect superclass method name."))
        if self._match(TokenType.IDENTIFIER):
            return Variable(self._previous())

        if self._match(TokenType.FUN):
            return self._function_body("function", "'fun'")

        if self._match(TokenType.LEFT_PAREN):
            expr = self._expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)

        raise self._error(self._peek(), "Expect expression.")

    # ---- Helpers -------------------------------------------------------------

    def _match(self, *types):
        for token_type in types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    def _consume(self, token_type, msg):
        if self._check(token_type):
            return self._advance()
        raise self._error(self._peek(), msg)

    def _check(self, token_type):
        if self._is_at_end():
            return False
        return self._peek().type is token_type

    def _check_next(self, token_type):
        if self._is_at_end():
            return False
        return self.tokens[self.current + 1].type is token_type

    def _advance(self):
        if not self._is_at_end():
            self.current += 1
        return self._previous()

    def _is_at_end(self):
        return self._peek().type is TokenType.EOF

    def _peek(self):
        return self.tokens[self.current]

    def _previous(self):
        return self.tokens[self.current - 1]

    def _error(self, token, msg):
        """Reports msg at token and returns the error: callers raise it only if they cannot carry on."""
        error = ParseError(msg, token)
        self.error_handler.throw(error)
        return error

    def _synchronize(self):
        """Discards tokens until just after a ';' or just before a token that begins a statement."""
        self._advance()

        while not self._is_at_end():
            if self._previous().type is TokenType.SEMICOLON:
                return
            if self._peek().type in Parser.BOUNDARIES:
                return
            self._advance()
