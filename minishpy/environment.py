"""Shell environment variables and the shell's shared state."""

from __future__ import annotations

import enum
import os
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

PREFIX_GOOD = "\ueab2 minishell \uf061  "
PREFIX_BAD = "\uea76 minishell \uf061  "


class Mode(enum.Enum):
    """What the shell is currently reading input for."""

    IN_PROMPT = enum.auto()
    IN_HEREDOC = enum.auto()


@dataclass
class EnvVar:
    """A single environment variable."""

    key: str
    value: str | None
    idx: int


class Environment:
    """Ordered collection of environment variables."""

    def __init__(self, variables: Iterable[tuple[str, str | None]] = ()) -> None:
        self._vars = [
            EnvVar(key, value, idx) for idx, (key, value) in enumerate(variables)
        ]

    def __iter__(self) -> Iterator[EnvVar]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def get(self, key: str) -> str | None:
        """Value of the first variable whose name starts with *key*."""
        return next((var.value for var in self._vars if var.key.startswith(key)), None)

    def refresh(self) -> list[str]:
        """Re-read every variable through :meth:`get`; return the changed keys."""
        changed = []
        for var in self._vars:
            current = self.get(var.key)
            if var.value is None:
                same = current is None
            else:
                same = current is not None and current.startswith(var.value)
            if not same:
                var.value = current
                changed.append(var.key)
        return changed

    def search_path(self) -> list[str]:
        """Directories listed in PATH, empty entries dropped."""
        for var in self._vars:
            if var.key == "PATH":
                return [part for part in (var.value or "").split(":") if part]
        raise KeyError("PATH")

    def as_list(self) -> list[str]:
        """The variables as ``KEY=VALUE`` strings."""
        return [f"{var.key}={var.value}" for var in self._vars if var.value is not None]


def load_environment(env: Iterable[str] | Mapping[str, str]) -> Environment:
    """Build an environment from ``KEY=VALUE`` strings or a mapping.

    An empty environment gets PWD set to the working directory and SHLVL=1.
    """
    if isinstance(env, Mapping):
        pairs = list(env.items())
    else:
        pairs = []
        for entry in env:
            key, sep, value = entry.partition("=")
            if not sep:
                raise ValueError(f"environment entry without '=': {entry!r}")
            pairs.append((key, value))
    if not pairs:
        pairs = [("PWD", os.getcwd()), ("SHLVL", "1")]
    return Environment(pairs)


class ShellState:
    """State shared by the shell's stages while it runs."""

    def __init__(self, env: Iterable[str] | Mapping[str, str]) -> None:
        entries = dict(env) if isinstance(env, Mapping) else list(env)
        self.env = load_environment(entries)
        self.path: list[str] | None = None
        if entries:
            try:
                self.path = self.env.search_path()
            except KeyError:
                self.path = None
        self.exit_code = 0
        self.mode = Mode.IN_PROMPT
        self.line: str | None = None

    @property
    def prompt(self) -> str:
        """Prompt prefix reflecting the last exit status."""
        return PREFIX_BAD if self.exit_code else PREFIX_GOOD