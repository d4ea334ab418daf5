"""The command table and the built-in commands."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass, field
from typing import TextIO

from .tokens import TokenType

BUILTINS = ("echo", "cd", "pwd", "exit", "env", "export", "unset")


class ShellExit(Exception):
    """Request to leave the shell with *status*, printing *message* first."""

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        self.message = message
        super().__init__(message or f"exit {status}")


class CommandType(enum.Enum):
    """Whether a command is an external program or a built-in."""

    BIN = enum.auto()
    BUILTIN = enum.auto()


_HEREDOC_TYPES = (TokenType.HEREDOC, TokenType.HRDC_EXPND)


@dataclass
class Redirection:
    """A redirection attached to a command."""

    type: TokenType
    file_name: str | None
    heredoc_delim: str | None = None
    heredoc_expand: bool = False
    fd: int = -1


def redirection_from_token(token_type: TokenType, target: str) -> Redirection:
    """Build a redirection of *token_type* pointing at *target*."""
    is_heredoc = token_type in _HEREDOC_TYPES
    return Redirection(
        type=token_type,
        file_name=target,
        heredoc_delim=target if is_heredoc else None,
        heredoc_expand=token_type is TokenType.HRDC_EXPND,
    )


@dataclass
class Command:
    """One command of a pipeline."""

    name: str
    argv: list[str]
    idx: int = 0
    type: CommandType = CommandType.BIN
    bin: str | None = None
    pid: int | None = None
    redir_valid: bool = True
    redirections: list[Redirection] = field(default_factory=list)

    def add_redirection(self, token_type: TokenType, target: str) -> Redirection:
        """Append a redirection and return it."""
        redirection = redirection_from_token(token_type, target)
        self.redirections.append(redirection)
        return redirection


def is_builtin(name: str) -> bool:
    """Tell whether *name* is a prefix of a built-in command's name."""
    return any(builtin.startswith(name) for builtin in BUILTINS)


def builtin_echo(argv: list[str], out: TextIO | None = None) -> int:
    """Print the arguments; a first argument starting with -n drops the newline."""
    stream = sys.stdout if out is None else out
    args = argv[1:]
    newline = True
    if args and args[0].startswith("-n"):
        newline = False
        args = args[1:]
    try:
        stream.write(" ".join(args) + ("\n" if newline else ""))
        stream.flush()
    except OSError:
        return 1
    return 0


def _is_number(text: str) -> bool:
    digits = text[1:] if text[:1] in ("+", "-") else text
    return digits.isdigit() and digits.isascii()


def builtin_exit(
    argv: list[str], announce: bool = False, err: TextIO | None = None
) -> None:
    """Leave the shell by raising :class:`ShellExit`."""
    if announce:
        (sys.stderr if err is None else err).write("exit\n")
    if len(argv) == 1:
        raise ShellExit(0)
    if _is_number(argv[1]):
        raise ShellExit(int(argv[1]) % 256)
    raise ShellExit(
        2, f"minishell: exit: {argv[1]}: numeric argument required\n"
    )