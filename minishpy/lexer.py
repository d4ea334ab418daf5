"""Syntax checks run on a command line before it is parsed."""

from __future__ import annotations

from .quoting import WHITESPACE, is_quote, is_redir, valid_operator

_MESSAGE = "minishell: syntax error near unexpected token '{}'"


def syntax_error_message(error: str, redir: str = "") -> str | None:
    """Message for an unexpected *error* token, doubled when *redir* matches."""
    if error in ("|", "'", '"'):
        return _MESSAGE.format(error)
    if error in ("<", ">"):
        if not redir:
            return _MESSAGE.format(error)
        if redir == error:
            return _MESSAGE.format(error * 2)
    return None


class ShellSyntaxError(Exception):
    """A command line that cannot be parsed."""

    exit_code = 1

    def __init__(self, token: str, redir: str = "") -> None:
        self.token = token
        self.redir = redir
        self.message = syntax_error_message(token, redir)
        super().__init__(self.message or "")


def check_quotes(prompt: str) -> None:
    """Raise if a quote is left open."""
    quote = ""
    n = len(prompt)
    i = 0
    while i < n:
        if prompt[i] == "\\" and i + 1 < n and is_quote(prompt[i + 1]):
            i += 2
            if i >= n:
                break
        char = prompt[i]
        if not quote:
            if is_quote(char):
                quote = char
        elif char == quote:
            quote = ""
        i += 1
    if quote:
        raise ShellSyntaxError(quote)


def check_pipes(prompt: str) -> None:
    """Raise on a leading, trailing or doubled pipe."""
    if "|" not in prompt:
        return
    n = len(prompt)
    i = n - len(prompt.lstrip(WHITESPACE))
    if i < n and prompt[i] == "|":
        raise ShellSyntaxError("|")
    while i < n:
        if prompt[i] == "|":
            i += 1
            while i < n and prompt[i] in WHITESPACE:
                i += 1
            if i >= n or prompt[i] == "|":
                raise ShellSyntaxError("|")
        i += 1


def _check_double(part: str) -> None:
    redir = part[0]
    if len(part) < 2:
        raise ShellSyntaxError(redir)
    if part[1] != redir:
        if is_redir(part[1]) or part[1] == "|":
            raise ShellSyntaxError(part[1])
        return
    if len(part) > 2 and is_redir(part[2]):
        raise ShellSyntaxError(part[0], part[1])


def _check_target(part: str) -> None:
    last = part[0] if part else ""
    rest = part.lstrip(WHITESPACE)
    if not rest or is_redir(rest[0]):
        raise ShellSyntaxError(last)
    if rest[0] == "|":
        raise ShellSyntaxError("|")


def check_redirections(prompt: str) -> None:
    """Raise on malformed or target-less redirections outside quotes."""
    if "<" not in prompt and ">" not in prompt:
        return
    n = len(prompt)
    i = 0
    while i < n:
        if is_redir(prompt[i]) and valid_operator(prompt, i):
            _check_double(prompt[i:])
            i += 2
            _check_target(prompt[i:])
        i += 1


def lex(prompt: str) -> str:
    """Run every syntax check on *prompt* and return it unchanged."""
    check_quotes(prompt)
    check_pipes(prompt)
    check_redirections(prompt)
    return prompt