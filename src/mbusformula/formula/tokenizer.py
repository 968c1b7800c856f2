"""Lexical analysis of formula text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from ..exceptions import ParseError


class TokenType(Enum):
    NUMBER = re.compile(r"[0-9]+(?:\.[0-9]+)?")
    IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
    DATE_TIME = re.compile(r"'[^']*'")
    OPERATOR = re.compile(r"[-+*/]")
    LEFT_PARENTHESIS = re.compile(r"\(")
    RIGHT_PARENTHESIS = re.compile(r"\)")


_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True, kw_only=True)
class Token:
    """A lexical token with its position in the source text.

    Attributes:
        type: Token category
        text: Exact source text of the token (quotes included for date/time literals)
        start: Offset of the first character in the source text
    """

    type: TokenType
    text: str
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    @property
    def value(self) -> str:
        """Token text with date/time quotes stripped and identifiers lowercased."""
        if self.type is TokenType.DATE_TIME:
            return self.text[1:-1]
        if self.type is TokenType.IDENTIFIER:
            return self.text.lower()
        return self.text


def tokenize(text: str) -> list[Token]:
    """Split formula text into tokens.

    A number directly followed by a unit (``22kwh``) yields two tokens.

    Raises:
        ParseError: On a character that starts no token, or an unterminated quote
    """
    tokens: list[Token] = []
    position = 0

    while position < len(text):
        whitespace = _WHITESPACE.match(text, position)
        if whitespace is not None:
            position = whitespace.end()
            continue

        for token_type in TokenType:
            match = token_type.value.match(text, position)
            if match is not None:
                tokens.append(Token(type=token_type, text=match.group(), start=position))
                position = match.end()
                break
        else:
            if text[position] == "'":
                raise ParseError("Unterminated date/time literal!", text, position, len(text) - position)
            raise ParseError(f"Unexpected character '{text[position]}'!", text, position)

    return tokens
