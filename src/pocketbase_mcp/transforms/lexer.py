"""
Lexical analyzer (tokenizer) for transform expressions.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto

from pocketbase_mcp.transforms.errors import TransformSyntaxError


class TokenType(Enum):
    """Token types for transform expressions."""

    # Literals
    STRING = auto()
    NUMBER = auto()
    BOOLEAN = auto()
    NULL = auto()

    IDENTIFIER = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()
    EQUALS = auto()  # == or ===
    NOT_EQUALS = auto()  # != or !==
    LESS_THAN = auto()
    GREATER_THAN = auto()
    LESS_EQUAL = auto()
    GREATER_EQUAL = auto()
    AND = auto()  # &&
    OR = auto()  # ||
    NULLISH = auto()  # ??
    NOT = auto()  # !
    QUESTION = auto()
    COLON = auto()

    # Punctuation
    COMMA = auto()
    DOT = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()

    EOF = auto()


@dataclass
class Token:
    """A token in a transform expression."""

    type: TokenType
    value: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


# Longest operators first so '===' wins over '==' and '!==' over '!='.
OPERATORS = [
    ("===", TokenType.EQUALS),
    ("!==", TokenType.NOT_EQUALS),
    ("==", TokenType.EQUALS),
    ("!=", TokenType.NOT_EQUALS),
    ("<=", TokenType.LESS_EQUAL),
    (">=", TokenType.GREATER_EQUAL),
    ("&&", TokenType.AND),
    ("||", TokenType.OR),
    ("??", TokenType.NULLISH),
    ("+", TokenType.PLUS),
    ("-", TokenType.MINUS),
    ("*", TokenType.STAR),
    ("/", TokenType.SLASH),
    ("%", TokenType.PERCENT),
    ("<", TokenType.LESS_THAN),
    (">", TokenType.GREATER_THAN),
    ("!", TokenType.NOT),
    ("?", TokenType.QUESTION),
    (":", TokenType.COLON),
    (",", TokenType.COMMA),
    (".", TokenType.DOT),
    ("(", TokenType.LPAREN),
    (")", TokenType.RPAREN),
    ("[", TokenType.LBRACKET),
    ("]", TokenType.RBRACKET),
]

KEYWORDS = {
    "true": TokenType.BOOLEAN,
    "false": TokenType.BOOLEAN,
    "null": TokenType.NULL,
    "undefined": TokenType.NULL,
}

EXPONENT = re.compile(r"[eE][+-]?\d+")

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


class TransformLexer:
    """Tokenizer for transform expressions."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the entire input."""
        while self.pos < len(self.text):
            self._skip_whitespace()
            if self.pos >= len(self.text):
                break

            if not self._try_tokenize_one():
                raise TransformSyntaxError(
                    f"Unexpected character '{self.text[self.pos]}'", self.line, self.column
                )

        self.tokens.append(Token(TokenType.EOF, "", self.line, self.column))
        return self.tokens

    def _try_tokenize_one(self) -> bool:
        """Try to tokenize one token. Returns True if successful."""
        if self._match_string():
            return True

        if self._match_number():
            return True

        if self._match_identifier():
            return True

        if self._match_operator():
            return True

        return False

    def _advance_by(self, count: int) -> None:
        self.pos += count
        self.column += count

    def _skip_whitespace(self):
        """Skip whitespace but track newlines."""
        while self.pos < len(self.text) and self.text[self.pos] in " \t\r\n":
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _match_string(self) -> bool:
        """Match single or double quoted string literals."""
        if self.text[self.pos] not in ('"', "'"):
            return False

        quote = self.text[self.pos]
        start_col = self.column
        self._advance_by(1)

        value = ""
        while self.pos < len(self.text) and self.text[self.pos] != quote:
            if self.text[self.pos] == "\\":
                self._advance_by(1)
                if self.pos < len(self.text):
                    char = self.text[self.pos]
                    value += ESCAPES.get(char, char)
                    self._advance_by(1)
            else:
                value += self.text[self.pos]
                self._advance_by(1)

        if self.pos >= len(self.text):
            raise TransformSyntaxError("Unterminated string", self.line, start_col)

        self._advance_by(1)  # Skip closing quote
        self.tokens.append(Token(TokenType.STRING, value, self.line, start_col))
        return True

    def _match_number(self) -> bool:
        """Match unsigned numeric literals. A leading '-' is a unary operator."""
        char = self.text[self.pos]
        next_is_digit = self.pos + 1 < len(self.text) and self.text[self.pos + 1].isdigit()
        if not (char.isdigit() or (char == "." and next_is_digit)):
            return False

        start_col = self.column
        value = ""
        while self.pos < len(self.text) and self.text[self.pos].isdigit():
            value += self.text[self.pos]
            self._advance_by(1)

        if (
            self.pos + 1 < len(self.text)
            and self.text[self.pos] == "."
            and self.text[self.pos + 1].isdigit()
        ) or (self.pos < len(self.text) and self.text[self.pos] == "." and not value):
            value += "."
            self._advance_by(1)
            while self.pos < len(self.text) and self.text[self.pos].isdigit():
                value += self.text[self.pos]
                self._advance_by(1)

        exponent = EXPONENT.match(self.text, self.pos)
        if exponent:
            value += exponent.group()
            self._advance_by(len(exponent.group()))

        self.tokens.append(Token(TokenType.NUMBER, value, self.line, start_col))
        return True

    def _match_identifier(self) -> bool:
        """Match identifiers and keyword literals."""
        char = self.text[self.pos]
        if not (char.isalpha() or char in ("_", "$")):
            return False

        start_col = self.column
        value = ""
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char.isalnum() or char in ("_", "$"):
                value += char
                self._advance_by(1)
            else:
                break

        token_type = KEYWORDS.get(value, TokenType.IDENTIFIER)
        self.tokens.append(Token(token_type, value, self.line, start_col))
        return True

    def _match_operator(self) -> bool:
        """Match operators and punctuation."""
        for symbol, token_type in OPERATORS:
            if self.text.startswith(symbol, self.pos):
                self.tokens.append(Token(token_type, symbol, self.line, self.column))
                self._advance_by(len(symbol))
                return True
        return False
