#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum, auto
from typing import List


# ==========================
# Tokens and lexer
# ==========================

class TokenKind(Enum):
    # Special
    EOF = auto()

    IDENT = auto()  # identifier, e.g. i, name, etc.
    TYPE = auto()  # type keyword: int, float, bool, string, void
    INT = auto()  # integer literal, e.g. 42
    FLOAT = auto()  # floating-point literal, e.g. 2.5
    STRING = auto()  # string literal, e.g. "hello world"

    # Keywords
    LET = auto()
    CONST = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    DO = auto()
    FOR = auto()
    TO = auto()
    DOWNTO = auto()
    BREAK = auto()
    CONTINUE = auto()
    RETURN = auto()
    TRUE = auto()
    FALSE = auto()

    # Punctuation / operators
    LBRACE = auto()  # {
    RBRACE = auto()  # }
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    COMMA = auto()  # ,
    SEMI = auto()  # ;
    COLON = auto()  # :
    QUESTION = auto()  # ?
    EQ = auto()  # =
    PLUS_EQ = auto()  # +=
    MINUS_EQ = auto()  # -=
    STAR_EQ = auto()  # *=
    SLASH_EQ = auto()  # /=
    MODULO_EQ = auto()  # %=
    PLUS = auto()  # +
    MINUS = auto()  # -
    STAR = auto()  # *
    SLASH = auto()  # /
    MODULO = auto()  # %
    LT = auto()  # <
    GT = auto()  # >
    LE = auto()  # <=
    GE = auto()  # >=
    EQEQ = auto()  # ==
    NE = auto()  # !=
    ANDAND = auto()  # &&
    OROR = auto()  # ||
    BANG = auto()  # !


KEYWORDS = {
    "let": TokenKind.LET,
    "const": TokenKind.CONST,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
    "do": TokenKind.DO,
    "for": TokenKind.FOR,
    "to": TokenKind.TO,
    "downto": TokenKind.DOWNTO,
    "break": TokenKind.BREAK,
    "continue": TokenKind.CONTINUE,
    "return": TokenKind.RETURN,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "int": TokenKind.TYPE,
    "float": TokenKind.TYPE,
    "bool": TokenKind.TYPE,
    "string": TokenKind.TYPE,
    "void": TokenKind.TYPE,
}

# Operators that may be followed by '=' to form a compound assignment
COMPOUND_ASSIGN = {
    "+": TokenKind.PLUS_EQ,
    "-": TokenKind.MINUS_EQ,
    "*": TokenKind.STAR_EQ,
    "/": TokenKind.SLASH_EQ,
    "%": TokenKind.MODULO_EQ,
}

SINGLE_CHAR_OPERATORS = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "%": TokenKind.MODULO,
}

PUNCTUATION = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMI,
    ":": TokenKind.COLON,
    "?": TokenKind.QUESTION,
}

ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
}

INT_MIN = -2 ** 63
INT_MAX = 2 ** 63 - 1


@dataclass
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"{self.text!r}" if self.kind != TokenKind.EOF else "end-of-file"


@dataclass
class LexerError(Exception):
    message: str
    filename: str
    line: int
    column: int


def is_reserved_keyword(word: str) -> bool:
    return word in KEYWORDS


class Lexer:
    def __init__(self, source: str, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.length = len(source)
        self.index = 0
        self.line = 1
        self.column = 1

    @classmethod
    def from_source(cls, source: str) -> "Lexer":
        return cls(source)

    # --- low-level char utilities ---

    def _at_end(self) -> bool:
        return self.index >= self.length

    def _peek(self) -> str:
        if self._at_end():
            return "\0"
        return self.source[self.index]

    def _peek_next(self) -> str:
        if self.index + 1 >= self.length:
            return "\0"
        return self.source[self.index + 1]

    def _advance(self) -> str:
        c = self._peek()
        if not self._at_end():
            self.index += 1
            if c == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return c

    # --- main API ---

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            tok = self._next_token()
            tokens.append(tok)
            if tok.kind is TokenKind.EOF:
                break
        return tokens

    def _next_token(self) -> Token:
        self._skip_ws_and_comments()
        start_line, start_col = self.line, self.column

        if self._at_end():
            return Token(TokenKind.EOF, "", start_line, start_col)

        c = self._advance()

        # identifiers / keywords
        if c.isalpha() or c == "_":
            ident = [c]
            while self._peek().isalnum() or self._peek() == "_":
                ident.append(self._advance())
            text = "".join(ident)
            return Token(KEYWORDS.get(text, TokenKind.IDENT), text, start_line, start_col)

        # numbers
        if c.isdigit():
            return self._read_number(c, start_line, start_col)

        # strings
        if c == '"':
            text = self._read_string_literal(start_line, start_col)
            return Token(TokenKind.STRING, text, start_line, start_col)

        if c in PUNCTUATION:
            return Token(PUNCTUATION[c], c, start_line, start_col)

        # arithmetic operators and their compound assignment forms
        if c in SINGLE_CHAR_OPERATORS:
            if self._peek() == "=":
                self._advance()
                return Token(COMPOUND_ASSIGN[c], c + "=", start_line, start_col)
            return Token(SINGLE_CHAR_OPERATORS[c], c, start_line, start_col)

        if c == "=":
            if self._peek() == "=":
                self._advance()
                return Token(TokenKind.EQEQ, "==", start_line, start_col)
            return Token(TokenKind.EQ, c, start_line, start_col)

        if c == "!":
            if self._peek() == "=":
                self._advance()
                return Token(TokenKind.NE, "!=", start_line, start_col)
            return Token(TokenKind.BANG, c, start_line, start_col)

        if c == "<":
            if self._peek() == "=":
                self._advance()
                return Token(TokenKind.LE, "<=", start_line, start_col)
            return Token(TokenKind.LT, c, start_line, start_col)

        if c == ">":
            if self._peek() == "=":
                self._advance()
                return Token(TokenKind.GE, ">=", start_line, start_col)
            return Token(TokenKind.GT, c, start_line, start_col)

        if c == "&":
            if self._peek() == "&":
                self._advance()
                return Token(TokenKind.ANDAND, "&&", start_line, start_col)
            raise LexerError("[LEX-0041] unsupported operator '&', did you mean '&&'?", self.filename,
                             start_line, start_col)

        if c == "|":
            if self._peek() == "|":
                self._advance()
                return Token(TokenKind.OROR, "||", start_line, start_col)
            raise LexerError("[LEX-0042] unsupported operator '|', did you mean '||'?", self.filename,
                             start_line, start_col)

        raise LexerError(f"[LEX-0040] unexpected character {c!r} at {start_line}:{start_col}", self.filename,
                         start_line, start_col)

    def _read_string_literal(self, start_line: int, start_col: int) -> str:
        chars: List[str] = []
        while True:
            ch = self._peek()

            if ch == "\0" or ch == "\n":
                raise LexerError("[LEX-0010] unterminated string literal", self.filename, start_line, start_col)
            if ch == "\\":
                self._advance()  # consume backslash
                esc = self._peek()
                if esc not in ESCAPES:
                    raise LexerError(f"[LEX-0059] unknown escape sequence \\{esc}", self.filename, self.line,
                                     self.column)
                self._advance()
                chars.append(ESCAPES[esc])
                continue
            if ch == '"':
                self._advance()
                break

            chars.append(self._advance())

        return "".join(chars)

    def _read_number(self, c: str, start_line: int, start_col: int) -> Token:
        digits = [c]
        while self._peek().isdigit():
            digits.append(self._advance())

        kind = TokenKind.INT
        if self._peek() == ".":
            if not self._peek_next().isdigit():
                raise LexerError("[LEX-0062] expected digit after decimal point", self.filename, self.line,
                                 self.column + 1)
            kind = TokenKind.FLOAT
            digits.append(self._advance())  # '.'
            while self._peek().isdigit():
                digits.append(self._advance())

        text = "".join(digits)
        if self._peek().isalpha() or self._peek() == "_":
            raise LexerError(f"[LEX-0061] invalid character '{self._peek()}' after number literal",
                             self.filename, self.line, self.column)
        if kind is TokenKind.INT and int(text) > INT_MAX:
            raise LexerError(f"[LEX-0060] integer literal '{text}' exceeds 64-bit signed range",
                             self.filename, start_line, start_col)
        return Token(kind, text, start_line, start_col)

    def _skip_ws_and_comments(self) -> None:
        while True:
            c = self._peek()
            if c in (" ", "\t", "\r", "\n"):
                self._advance()
                continue
            if c == "/" and self._peek_next() == "/":
                # line comment
                self._advance()  # '/'
                self._advance()  # second '/'
                while self._peek() not in ("\n", "\0"):
                    self._advance()
                continue
            if c == "/" and self._peek_next() == "*":
                # block comment
                self._advance()  # '/'
                self._advance()  # '*'
                while True:
                    if self._at_end():
                        raise LexerError("[LEX-0070] unterminated block comment", self.filename, self.line, self.column)
                    if self._peek() == "*" and self._peek_next() == "/":
                        self._advance()  # '*'
                        self._advance()  # '/'
                        break
                    self._advance()
                continue
            break
