"""
lfi3a language lexer.

Tokenizes keywords, identifiers, numbers, strings, and operators. Lexing never
fails: characters outside the language become UNKNOWN tokens and the parser
decides what to do with them.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional


class TokenKind(Enum):
    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    SEMICOLON = auto()
    COMMA = auto()

    # Single / multi-char operators
    EQ = auto()
    PLUS = auto()
    PLUSPLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    EQEQ = auto()
    NEQ = auto()
    LT = auto()
    GT = auto()
    LTE = auto()
    GTE = auto()

    # Literals / identifiers
    NUMBER = auto()
    STRING = auto()
    IDENT = auto()

    # Keywords (lexeme tells the parser which one)
    KEYWORD = auto()

    UNKNOWN = auto()
    EOF = auto()


KEYWORDS = {
    "dir",  # variable declaration
    "kteb",  # print
    "ila",  # if
    "wila",  # else if
    "wla",  # else / logical or
    "ma7ad",  # while
    "kol",  # for
    "dalla",  # function declaration
    "kalla",  # call statement
    "rje3",  # return
    "s7i7",  # true
    "ghalat",  # false
    "w",  # logical and
}

SINGLE_CHAR = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ";": TokenKind.SEMICOLON,
    ",": TokenKind.COMMA,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
}

# first char -> (second char, combined kind, kind when alone)
TWO_CHAR = {
    "+": ("+", TokenKind.PLUSPLUS, TokenKind.PLUS),
    "=": ("=", TokenKind.EQEQ, TokenKind.EQ),
    "!": ("=", TokenKind.NEQ, TokenKind.UNKNOWN),
    "<": ("=", TokenKind.LTE, TokenKind.LT),
    ">": ("=", TokenKind.GTE, TokenKind.GT),
}

ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}

WHITESPACE = " \t\r\n\v\f"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    lexeme: str
    line: int
    col: int

    def is_keyword(self, kw: str) -> bool:
        return self.kind == TokenKind.KEYWORD and self.lexeme == kw


class Lexer:
    def __init__(self, source: str):
        self.source = source
        self.length = len(source)
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens: List[Token] = []
        self.start = 0
        self.start_line = 1
        self.start_col = 1

    def scan(self) -> List[Token]:
        while True:
            self._skip_trivia()
            if self._is_at_end():
                break
            self.start = self.pos
            self.start_line = self.line
            self.start_col = self.col
            c = self._advance()

            if c == '"':
                self._string()
                continue

            if _is_alpha(c):
                self._identifier()
                continue

            if _is_digit(c):
                self._number()
                continue

            if c in TWO_CHAR:
                second, combined, alone = TWO_CHAR[c]
                if self._match(second):
                    self._add(combined)
                else:
                    self._add(alone)
                continue

            kind = SINGLE_CHAR.get(c, TokenKind.UNKNOWN)
            self._add(kind)

        self.tokens.append(Token(TokenKind.EOF, "", self.line, self.col))
        return self.tokens

    def _add(self, kind: TokenKind, lexeme: Optional[str] = None) -> None:
        text = lexeme if lexeme is not None else self.source[self.start : self.pos]
        self.tokens.append(Token(kind, text, self.start_line, self.start_col))

    def _is_at_end(self) -> bool:
        return self.pos >= self.length

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _peek(self) -> str:
        if self._is_at_end():
            return "\0"
        return self.source[self.pos]

    def _peek_next(self) -> str:
        if self.pos + 1 >= self.length:
            return "\0"
        return self.source[self.pos + 1]

    def _match(self, expected: str) -> bool:
        if self._is_at_end() or self.source[self.pos] != expected:
            return False
        self._advance()
        return True

    def _skip_trivia(self) -> None:
        # Whitespace and // line comments, in any order.
        while not self._is_at_end():
            c = self._peek()
            if c in WHITESPACE:
                self._advance()
            elif c == "/" and self._peek_next() == "/":
                while not self._is_at_end() and self._peek() != "\n":
                    self._advance()
            else:
                return

    def _string(self) -> None:
        chars: List[str] = []
        while not self._is_at_end() and self._peek() != '"':
            ch = self._advance()
            if ch == "\\":
                if self._is_at_end():
                    break
                escaped = self._advance()
                chars.append(ESCAPES.get(escaped, escaped))
                continue
            chars.append(ch)
        self._match('"')  # unterminated strings run to end of input
        self._add(TokenKind.STRING, "".join(chars))

    def _number(self) -> None:
        while _is_digit(self._peek()):
            self._advance()
        if self._peek() == "." and _is_digit(self._peek_next()):
            self._advance()  # consume '.'
            while _is_digit(self._peek()):
                self._advance()
        self._add(TokenKind.NUMBER)

    def _identifier(self) -> None:
        while _is_alpha(self._peek()) or _is_digit(self._peek()):
            self._advance()
        text = self.source[self.start : self.pos]
        if text in KEYWORDS:
            self._add(TokenKind.KEYWORD, text)
        else:
            self._add(TokenKind.IDENT, text)


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_alpha(c: str) -> bool:
    return ("a" <= c <= "z") or ("A" <= c <= "Z") or c == "_"


def tokenize(source: str) -> List[Token]:
    """Scan ``source`` into tokens, always ending with a single EOF token."""
    return Lexer(source).scan()


__all__ = ["Lexer", "Token", "TokenKind", "KEYWORDS", "tokenize"]
