"""Recursive-descent parser for lox. One method per precedence level, lowest first.

```
program     ::= declaration* EOF
declaration ::= classDecl | funDecl | varDecl | statement
classDecl   ::= "class" IDENTIFIER ( "<" IDENTIFIER )? "{" function* "}"
funDecl     ::= "fun" function
function    ::= IDENTIFIER "(" parameters? ")" block
varDecl     ::= "var" IDENTIFIER ( "=" expression )? ";"
statement   ::= exprStmt | forStmt | ifStmt | printStmt | returnStmt | whileStmt | block

expression  ::= assignment
assignment  ::= ( call "." )? IDENTIFIER "=" assignment | logic_or
logic_or    ::= logic_and ( "or" logic_and )*
logic_and   ::= equality ( "and" equality )*
equality    ::= comparison ( ( "!=" | "==" ) comparison )*
comparison  ::= term ( ( ">" | ">=" | "<" | "<=" ) term )*
term        ::= factor ( ( "-" | "+" ) factor )*
factor      ::= unary ( ( "/" | "*" ) unary )*
unary       ::= ( "!" | "-" ) unary | call
call        ::= primary ( "(" arguments? ")" | "." IDENTIFIER )*
primary     ::= "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENTIFIER | "(" expression ")"
              | "super" "." IDENTIFIER
```

A failed expectation is reported, then the parser synchronizes to the next statement boundary so later errors are
still found.
"""

from typing import List, Optional

from lox.core import ast
from lox.core.tokens import Token, TokenKind
from lox.lang.error import ParseError

MAX_ARGS = 255

SYNC_KINDS = {
    TokenKind.CLASS,
    TokenKind.FUN,
    TokenKind.VAR,
    TokenKind.FOR,
    TokenKind.IF,
    TokenKind.WHILE,
    TokenKind.PRINT,
    TokenKind.RETURN,
}


class Parser:

    def __init__(self, tokens: List[Token], error_handler):
        self.tokens = tokens
        self.error_handler = error_handler
        self.current = 0

        self.allow_expression = False  # command-line mode: accept a bare expression without ';'
        self.found_expression = False

    def parse(self) -> List[ast.Stmt]:
        statements = []
        while not self.is_at_end():
            statement = self.declaration()
            if statement is not None:
                statements.append(statement)
        return statements

    def parse_repl(self):
        """Parses one command-line entry. Returns (statements, echo) where echo is True if the entry was a single
        expression with no trailing ';', whose value should be printed.
        """
        self.allow_expression = True
        statements = self.parse()

        echo = self.found_expression and len(statements) == 1 and isinstance(statements[0], ast.Expression)
        return statements, echo

    # --- declarations ---

    def declaration(self) -> Optional[ast.Stmt]:
        try:
            if self.match(TokenKind.CLASS):
                return self.class_declaration()
            if self.match(TokenKind.FUN):
                return self.function("function")
            if self.match(TokenKind.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume(TokenKind.IDENTIFIER, "Expect class name.")

        superclass = None
        if self.match(TokenKind.LESS):
            self.consume(TokenKind.IDENTIFIER, "Expect superclass name.")
            superclass = ast.Variable(self.previous())

        self.consume(TokenKind.LEFT_BRACE, "Expect '{' before class body.")

        methods = []
        while not self.check(TokenKind.RIGHT_BRACE) and not self.is_at_end():
            methods.append(self.function("method"))

        self.consume(TokenKind.RIGHT_BRACE, "Expect '}' after class body.")
        return ast.Class(name, superclass, methods)

    def function(self, kind):
        name = self.consume(TokenKind.IDENTIFIER, f"Expect {kind} name.")
        self.consume(TokenKind.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGS} parameters.")
                params.append(self.consume(TokenKind.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenKind.COMMA):
                    break

        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(TokenKind.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return ast.Function(name, params, self.block())

    def var_declaration(self):
        name = self.consume(TokenKind.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TokenKind.EQUAL):
            initializer = self.expression()

        self.consume(TokenKind.SEMICOLON, "Expect ';' after variable declaration.")
        return ast.Var(name, initializer)

    # --- statements ---

    def statement(self):
        if self.match(TokenKind.FOR):
            return self.for_statement()
        if self.match(TokenKind.IF):
            return self.if_statement()
        if self.match(TokenKind.PRINT):
            return self.print_statement()
        if self.match(TokenKind.RETURN):
            return self.return_statement()
        if self.match(TokenKind.WHILE):
            return self.while_statement()
        if self.match(TokenKind.LEFT_BRACE):
            return ast.Block(self.block())
        return self.expression_statement()

    def for_statement(self):
        """Desugars for (init; cond; incr) body into { init; while (cond) { body; incr; } }."""
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenKind.SEMICOLON):
            initializer = None
        elif self.match(TokenKind.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenKind.SEMICOLON):
            condition = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenKind.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = ast.Block([body, ast.Expression(increment)])
        if condition is None:
            condition = ast.Literal(True)
        body = ast.While(condition, body)
        if initializer is not None:
            body = ast.Block([initializer, body])

        return body

    def if_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenKind.ELSE):
            else_branch = self.statement()

        return ast.If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after value.")
        return ast.Print(value)

    def return_statement(self):
        keyword = self.previous()

        value = None
        if not self.check(TokenKind.SEMICOLON):
            value = self.expression()

        self.consume(TokenKind.SEMICOLON, "Expect ';' after return value.")
        return ast.Return(keyword, value)

    def while_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after condition.")
        return ast.While(condition, self.statement())

    def block(self) -> List[ast.Stmt]:
        statements = []
        while not self.check(TokenKind.RIGHT_BRACE) and not self.is_at_end():
            statement = self.declaration()
            if statement is not None:
                statements.append(statement)

        self.consume(TokenKind.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self):
        start = self.current
        expr = self.expression()

        if self.allow_expression and start == 0 and self.is_at_end():  # the entry's only statement
            self.found_expression = True
        else:
            self.consume(TokenKind.SEMICOLON, "Expect ';' after expression.")

        return ast.Expression(expr)

    # --- expressions ---

    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.or_()

        if self.match(TokenKind.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, ast.Variable):
                return ast.Assign(expr.name, value)
            if isinstance(expr, ast.Get):
                return ast.Set(expr.object, expr.name, value)

            self.error(equals, "Invalid assignment target.")  # reported, but no need to synchronize

        return expr

    def or_(self):
        expr = self.and_()
        while self.match(TokenKind.OR):
            operator = self.previous()
            expr = ast.Logical(expr, operator, self.and_())
        return expr

    def and_(self):
        expr = self.equality()
        while self.match(TokenKind.AND):
            operator = self.previous()
            expr = ast.Logical(expr, operator, self.equality())
        return expr

    def equality(self):
        return self._binary(self.comparison, TokenKind.BANG_EQUAL, TokenKind.EQUAL_EQUAL)

    def comparison(self):
        return self._binary(self.term, TokenKind.GREATER, TokenKind.GREATER_EQUAL, TokenKind.LESS,
                            TokenKind.LESS_EQUAL)

    def term(self):
        return self._binary(self.factor, TokenKind.MINUS, TokenKind.PLUS)

    def factor(self):
        return self._binary(self.unary, TokenKind.SLASH, TokenKind.STAR)

    def _binary(self, operand, *kinds):
        """Left-associative binary level: operand ( kinds operand )*."""
        expr = operand()
        while self.match(*kinds):
            operator = self.previous()
            expr = ast.Binary(expr, operator, operand())
        return expr

    def unary(self):
        if self.match(TokenKind.BANG, TokenKind.MINUS):
            operator = self.previous()
            return ast.Unary(operator, self.unary())
        return self.call()

    def call(self):
        expr = self.primary()

        while True:
            if self.match(TokenKind.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenKind.DOT):
                name = self.consume(TokenKind.IDENTIFIER, "Expect property name after '.'.")
                expr = ast.Get(expr, name)
            else:
                break

        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGS} arguments.")
                arguments.append(self.expression())
                if not self.match(TokenKind.COMMA):
                    break

        paren = self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after arguments.")
        return ast.Call(callee, paren, arguments)

    def primary(self):
        if self.match(TokenKind.FALSE):
            return ast.Literal(False)
        if self.match(TokenKind.TRUE):
            return ast.Literal(True)
        if self.match(TokenKind.NIL):
            return ast.Literal(None)

        if self.match(TokenKind.NUMBER, TokenKind.STRING):
            return ast.Literal(self.previous().literal)

        if self.match(TokenKind.SUPER):
            keyword = self.previous()
            self.consume(TokenKind.DOT, "Expect '.' after 'super'.")
            method = self.consume(TokenKind.IDENTIFIER, "Expect superclass method name.")
            return ast.Super(keyword, method)

        if self.match(TokenKind.THIS):
            return ast.This(self.previous())

        if self.match(TokenKind.IDENTIFIER):
            return ast.Variable(self.previous())

        if self.match(TokenKind.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after expression.")
            return ast.Grouping(expr)

        raise self.error(self.peek(), "Expect expression.")

    # --- helpers ---

    def match(self, *kinds):
        for kind in kinds:
            if self.check(kind):
                self.advance()
                return True
        return False

    def consume(self, kind, message):
        if self.check(kind):
            return self.advance()
        raise self.error(self.peek(), message)

    def check(self, kind):
        if self.is_at_end():
            return False
        return self.peek().kind is kind

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self):
        return self.peek().kind is TokenKind.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

    def error(self, token, message):
        """Reports message at token and returns a ParseError for the caller to raise if it needs to unwind."""
        self.error_handler.token_error(token, message)
        return ParseError(message)

    def synchronize(self):
        """Discards tokens until the start of the next statement."""
        self.advance()

        while not self.is_at_end():
            if self.previous().kind is TokenKind.SEMICOLON:
                return
            if self.peek().kind in SYNC_KINDS:
                return
            self.advance()
