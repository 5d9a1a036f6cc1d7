"""Lexical analysis for lox: converts source text into a flat list of Tokens in a single forward pass.

Lexical grammar, informally:

```
<token>      ::= <operator> | <string> | <number> | <identifier> | <keyword>
<operator>   ::= "(" | ")" | "{" | "}" | "," | "." | "-" | "+" | ";" | "*" | "/"
               | "!" | "!=" | "=" | "==" | "<" | "<=" | ">" | ">="
<string>     ::= '"' <char>* '"'              ; may span lines
<number>     ::= <digit>+ ( "." <digit>+ )?   ; always a float
<identifier> ::= <alpha> ( <alpha> | <digit> )*
<comment>    ::= "//" <char>* | "/*" <char>* "*/"   ; block comments do not nest
```

Errors never stop the scan: they are collected in Lexer.errors and the lexer carries on from the next character.
"""

from typing import List

from lox.core.tokens import KEYWORDS, Token, TokenType
from lox.lang.error import LoxSyntaxError


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
}

# char: (type if followed by "=", type otherwise)
DOUBLE = {
    "!": (TokenType.BANG_EQUAL, TokenType.BANG),
    "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    "<": (TokenType.LESS_EQUAL, TokenType.LESS),
    ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
}


def is_digit(char):
    return "0" <= char <= "9"


def is_alpha(char):
    return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"


def is_alphanumeric(char):
    return is_alpha(char) or is_digit(char)


class Lexer:
    """Scans a source string. Use scan_tokens() once per Lexer."""

    def __init__(self, source: str):
        self.source = source
        self.tokens: List[Token] = []
        self.errors: List[LoxSyntaxError] = []

        self._start = 0
        self._current = 0
        self._line = 1

    def scan_tokens(self) -> List[Token]:
        """Returns all tokens in source, always terminated by an EOF token."""
        while not self._at_end():
            self._start = self._current
            self._scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self._line))
        return self.tokens

    def _scan_token(self):
        char = self._advance()

        if char in SINGLE:
            self._add_token(SINGLE[char])
        elif char in DOUBLE:
            with_equal, without = DOUBLE[char]
            self._add_token(with_equal if self._match("=") else without)
        elif char == "/":
            if self._match("/"):
                while self._peek() != "\n" and not self._at_end():
                    self._advance()
            elif self._match("*"):
                self._block_comment()
            else:
                self._add_token(TokenType.SLASH)
        elif char in " \r\t":
            pass
        elif char == "\n":
            self._line += 1
        elif char == '"':
            self._string()
        elif is_digit(char):
            self._number()
        elif is_alpha(char):
            self._identifier()
        else:
            self.errors.append(LoxSyntaxError.on_line(self._line, "Unexpected character."))

    def _block_comment(self):
        """Consumes up to and including the closing '*/'. An unterminated comment runs to end of input."""
        while not self._at_end():
            if self._peek() == "*" and self._peek_next() == "/":
                self._advance()
                self._advance()
                return
            if self._advance() == "\n":
                self._line += 1

    def _string(self):
        while self._peek() != '"' and not self._at_end():
            if self._peek() == "\n":
                self._line += 1
            self._advance()

        if self._at_end():
            self.errors.append(LoxSyntaxError.on_line(self._line, "Unterminated string."))
            return

        self._advance()  # closing "
        self._add_token(TokenType.STRING, self.source[self._start + 1:self._current - 1])

    def _number(self):
        while is_digit(self._peek()):
            self._advance()

        # a trailing "." without digits is left for the next token
        if self._peek() == "." and is_digit(self._peek_next()):
            self._advance()
            while is_digit(self._peek()):
                self._advance()

        self._add_token(TokenType.NUMBER, float(self.source[self._start:self._current]))

    def _identifier(self):
        while is_alphanumeric(self._peek()):
            self._advance()

        text = self.source[self._start:self._current]
        self._add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def _add_token(self, token_type, literal=None):
        text = self.source[self._start:self._current]
        self.tokens.append(Token(token_type, text, literal, self._line))

    def _advance(self):
        self._current += 1
        return self.source[self._current - 1]

    def _match(self, expected):
        if self._at_end() or self.source[self._current] != expected:
            return False
        self._current += 1
        return True

    def _peek(self):
        return "\0" if self._at_end() else self.source[self._current]

    def _peek_next(self):
        if self._current + 1 >= len(self.source):
            return "\0"
        return self.source[self._current + 1]

    def _at_end(self):
        return self._current >= len(self.source)


def lex(source):
    """Convenience wrapper: returns (tokens, errors)."""
    lexer = Lexer(source)
    return lexer.scan_tokens(), lexer.errors
