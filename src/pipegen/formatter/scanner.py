"""Tokenizer for pipeline script text.

Only braces, line ends and quoted strings matter for indentation; everything
else is ``other``. Braces and newlines inside a quoted string are part of the
string.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    LEFT_BRACE = "leftBrace"
    RIGHT_BRACE = "rightBrace"
    EOL = "eol"
    SINGLE_QUOTE_STR = "singleQuoteStr"
    DOUBLE_QUOTE_STR = "doubleQuoteStr"
    TRIPLE_SINGLE_QUOTE_STR = "tripleSingleQuoteStr"
    TRIPLE_DOUBLE_QUOTE_STR = "tripleDoubleQuoteStr"
    OTHER = "other"


STRING_KINDS = frozenset(
    {
        TokenKind.SINGLE_QUOTE_STR,
        TokenKind.DOUBLE_QUOTE_STR,
        TokenKind.TRIPLE_SINGLE_QUOTE_STR,
        TokenKind.TRIPLE_DOUBLE_QUOTE_STR,
    }
)


@dataclass
class Token:
    kind: TokenKind
    value: str

    @property
    def is_blank(self) -> bool:
        return self.kind is TokenKind.OTHER and self.value.strip() == ""


class Scanner:
    """Single pass scanner over a script."""

    def __init__(self, text: str):
        self.chars = text
        self.pos = 0

    def tokens(self) -> list[Token]:
        """All tokens, string and other runs folded into a preceding other."""
        tokens: list[Token] = []
        while True:
            token = self.read_token()
            if token is None:
                break
            if (
                tokens
                and tokens[-1].kind is TokenKind.OTHER
                and (token.kind is TokenKind.OTHER or token.kind in STRING_KINDS)
            ):
                tokens[-1] = Token(TokenKind.OTHER, tokens[-1].value + token.value)
            else:
                tokens.append(token)
        return tokens

    def read_token(self) -> Token | None:
        chars = self.chars
        start = self.pos

        while self.pos < len(chars):
            ch = chars[self.pos]

            if ch in "{}\n":
                if start != self.pos:
                    return Token(TokenKind.OTHER, chars[start : self.pos])
                self.pos += 1
                if ch == "{":
                    return Token(TokenKind.LEFT_BRACE, ch)
                if ch == "}":
                    return Token(TokenKind.RIGHT_BRACE, ch)
                return Token(TokenKind.EOL, ch)

            if ch in "'\"":
                if start != self.pos:
                    return Token(TokenKind.OTHER, chars[start : self.pos])
                if self.is_escaped(self.pos):
                    self.pos += 1
                    continue
                return self._read_string(ch)

            self.pos += 1

        if start < len(chars):
            return Token(TokenKind.OTHER, chars[start:])
        return None

    def _read_string(self, quote: str) -> Token:
        """Read a quoted string starting at self.pos.

        An unterminated string runs to the end of the text as ``other``.
        """
        chars = self.chars
        start = self.pos

        if self.is_triple_quote(self.pos, quote):
            kind = (
                TokenKind.TRIPLE_SINGLE_QUOTE_STR
                if quote == "'"
                else TokenKind.TRIPLE_DOUBLE_QUOTE_STR
            )
            self.pos += 3
            while self.pos < len(chars):
                if self.is_triple_quote(self.pos, quote):
                    self.pos += 3
                    return Token(kind, chars[start : self.pos])
                self.pos += 1
        else:
            kind = (
                TokenKind.SINGLE_QUOTE_STR if quote == "'" else TokenKind.DOUBLE_QUOTE_STR
            )
            self.pos += 1
            while self.pos < len(chars):
                if chars[self.pos] == quote and not self.is_escaped(self.pos):
                    self.pos += 1
                    return Token(kind, chars[start : self.pos])
                self.pos += 1

        self.pos = len(chars)
        return Token(TokenKind.OTHER, chars[start:])

    def is_escaped(self, pos: int) -> bool:
        """Odd number of backslashes right before pos"""
        count = 0
        i = pos - 1
        while i >= 0 and self.chars[i] == "\\":
            count += 1
            i -= 1
        return count % 2 == 1

    def is_triple_quote(self, pos: int, quote: str) -> bool:
        return (
            pos < len(self.chars) - 2
            and (pos == 0 or not self.is_escaped(pos))
            and self.chars[pos : pos + 3] == quote * 3
        )
