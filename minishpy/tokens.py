"""Splitting a command line into pipeline segments and tokens."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from .quoting import WHITESPACE, is_redir, valid_operator, word_length


class TokenType(enum.Enum):
    """Kinds of token found in a pipeline segment."""

    EOP = enum.auto()
    WORD = enum.auto()
    APPEND = enum.auto()
    HEREDOC = enum.auto()
    INPUT = enum.auto()
    OUTPUT = enum.auto()
    HRDC_EXPND = enum.auto()
    CMD = enum.auto()


_OPERATOR_TEXT = {
    TokenType.APPEND: ">>",
    TokenType.HEREDOC: "<<",
    TokenType.OUTPUT: ">",
    TokenType.INPUT: "<",
}


@dataclass
class Token:
    """A word or a redirection operator."""

    type: TokenType
    text: str
    idx: int


@dataclass
class Segment:
    """One command of a pipeline, with its tokens."""

    name: str
    idx: int
    tokens: list[Token] = field(default_factory=list)

    @property
    def first(self) -> Token | None:
        return self.tokens[0] if self.tokens else None

    @property
    def last(self) -> Token | None:
        return self.tokens[-1] if self.tokens else None


def split_pipeline(text: str) -> list[str]:
    """Split *text* at every pipe that lies outside quotes."""
    pieces: list[str] = []
    last = 0
    end = len(text) - 1
    for i, char in enumerate(text):
        at_pipe = char == "|" and valid_operator(text, i)
        is_last = i == end
        if not (at_pipe or is_last):
            continue
        if last == 0 and is_last:
            piece = text[: i + 1]
        elif last == 0:
            piece = text[:i]
        elif is_last:
            piece = text[last + 1:]
        else:
            piece = text[last + 1: i]
        pieces.append(piece)
        last = i
    return pieces


def _token_type(text: str, loc: int) -> TokenType:
    char = text[loc]
    following = text[loc + 1] if loc + 1 < len(text) else ""
    if not is_redir(char) or not valid_operator(text, loc):
        return TokenType.WORD
    if is_redir(following):
        return TokenType.APPEND if following == ">" else TokenType.HEREDOC
    return TokenType.OUTPUT if char == ">" else TokenType.INPUT


def tokenize(text: str) -> list[Token]:
    """Break one pipeline segment into words and redirection operators."""
    tokens: list[Token] = []
    i = 0
    while i < len(text):
        if text[i] in WHITESPACE:
            i += 1
            continue
        kind = _token_type(text, i)
        if kind is TokenType.WORD:
            piece = text[i: i + word_length(text[i:])]
        else:
            piece = _OPERATOR_TEXT[kind]
        tokens.append(Token(kind, piece, len(tokens)))
        i += max(len(piece), 1)
    return tokens


def build_segments(text: str) -> list[Segment]:
    """Split *text* into pipeline segments and tokenize each of them."""
    return [
        Segment(name, idx, tokenize(name))
        for idx, name in enumerate(split_pipeline(text))
    ]