"""Lexical analysis for lox. Turns source text into a list of Tokens in a single left-to-right pass.

Grammar of the lexemes recognized here:

```
<number>     ::= <digit>+ ( "." <digit>+ )?          ; no leading or trailing dot
<string>     ::= '"' <char>* '"'                     ; may span lines, no escapes
<identifier> ::= ( <alpha> | "_" ) ( <alnum> | "_" )* ; reclassified as a keyword if it is one
<comment>    ::= "//" <char>*                        ; runs to end of line
```

Unexpected characters are reported but do not stop the scan, so several lexical errors can be surfaced at once.
"""

from typing import List

from lox.core.tokens import KEYWORDS, Token, TokenKind


SINGLE = {
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "{": TokenKind.LEFT_BRACE,
    "}": TokenKind.RIGHT_BRACE,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "-": TokenKind.MINUS,
    "+": TokenKind.PLUS,
    ";": TokenKind.SEMICOLON,
    "*": TokenKind.STAR,
}

# char: (kind if followed by "=", kind otherwise)
WITH_EQUAL = {
    "!": (TokenKind.BANG_EQUAL, TokenKind.BANG),
    "=": (TokenKind.EQUAL_EQUAL, TokenKind.EQUAL),
    "<": (TokenKind.LESS_EQUAL, TokenKind.LESS),
    ">": (TokenKind.GREATER_EQUAL, TokenKind.GREATER),
}


def is_alpha(char):
    return char.isascii() and (char.isalpha() or char == "_")


def is_digit(char):
    return "0" <= char <= "9"


class Scanner:
    """Scans one complete source string. error_handler receives lexical errors."""

    def __init__(self, source, error_handler):
        self.source = source
        self.error_handler = error_handler

        self.tokens: List[Token] = []
        self.start = 0    # first char of the lexeme being scanned
        self.current = 0  # char currently being considered
        self.line = 1

    def scan_tokens(self) -> List[Token]:
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenKind.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in SINGLE:
            self.add_token(SINGLE[char])
        elif char in WITH_EQUAL:
            matched, single = WITH_EQUAL[char]
            self.add_token(matched if self.match("=") else single)
        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenKind.SLASH)
        elif char in " \r\t":
            pass
        elif char == "\n":
            self.line += 1
        elif char == '"':
            self.string()
        elif is_digit(char):
            self.number()
        elif is_alpha(char):
            self.identifier()
        else:
            self.error_handler.error(self.line, "Unexpected character.")

    def string(self):
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.error_handler.error(self.line, "Unterminated string.")
            return

        self.advance()  # closing "
        self.add_token(TokenKind.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while is_digit(self.peek()):
            self.advance()

        if self.peek() == "." and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenKind.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while is_alpha(self.peek()) or is_digit(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenKind.IDENTIFIER))

    def match(self, expected):
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        return "\0" if self.is_at_end() else self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return "\0"
        return self.source[self.current + 1]

    def advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def add_token(self, kind, literal=None):
        self.tokens.append(Token(kind, self.source[self.start:self.current], literal, self.line))

    def is_at_end(self):
        return self.current >= len(self.source)
