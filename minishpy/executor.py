"""Running a parsed command table: heredocs, redirections, pipes and builtins."""

from __future__ import annotations

import os
import string
import subprocess
import sys
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .commands import (
    Command,
    CommandType,
    Redirection,
    ShellExit,
    builtin_echo,
    builtin_exit,
)
from .environment import Mode, ShellState
from .tokens import TokenType

Reader = Callable[[str], "str | None"]

HEREDOC_PROMPT = "> "
HEREDOC_DIR = "/tmp/"
_NAME_LENGTH = 16
_LETTERS = frozenset(string.ascii_letters)
_HEREDOC_TYPES = (TokenType.HEREDOC, TokenType.HRDC_EXPND)
_INPUT_TYPES = (TokenType.INPUT, TokenType.HEREDOC, TokenType.HRDC_EXPND)
_OUTPUT_FLAGS = {
    TokenType.OUTPUT: os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    TokenType.APPEND: os.O_WRONLY | os.O_CREAT,
}


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def heredoc_name() -> str:
    """A fresh temporary file name made of random ASCII letters."""
    letters: list[str] = []
    while len(letters) < _NAME_LENGTH:
        letters.extend(
            chr(byte) for byte in os.urandom(_NAME_LENGTH) if chr(byte) in _LETTERS
        )
    return HEREDOC_DIR + "".join(letters[:_NAME_LENGTH])


def feed_heredoc(redirection: Redirection, reader: Reader = _read_line) -> bool:
    """Collect heredoc lines into a new temporary file.

    Lines are read with *reader* until the delimiter or end of input.
    Returns False when reading was interrupted.
    """
    redirection.file_name = heredoc_name()
    with open(redirection.file_name, "w", encoding="utf-8") as handle:
        os.chmod(redirection.file_name, 0o644)
        while True:
            try:
                line = reader(HEREDOC_PROMPT)
            except KeyboardInterrupt:
                return False
            if line is None:
                sys.stderr.write("warning: heredoc delimited by EOF\n")
                return True
            if line == redirection.heredoc_delim:
                return True
            handle.write(line + "\n")


def resolve_binary(name: str, search_path: Sequence[str] | None) -> str:
    """Path of the program *name*, looked up in *search_path*.

    The first executable match wins; failing that the last existing file
    is returned, and failing that *name* itself.
    """
    if "/" in name:
        return name
    found = name
    for directory in search_path or ():
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.X_OK):
            return candidate
        if os.access(candidate, os.F_OK):
            found = candidate
    return found


def failure_message(name: str, binary: str) -> tuple[str, int]:
    """Error message and exit status for a program that could not be run."""
    if "/" in name:
        return f"minishell: {name}: No such file or directory\n", 127
    if os.access(binary, os.F_OK):
        return f"minishell: {name}: Permission denied\n", 126
    return f"{name}: command not found\n", 127


@dataclass
class _Job:
    """A started command: a process, a builtin thread or a ready status."""

    process: subprocess.Popen | None = None
    thread: threading.Thread | None = None
    status: int | None = None
    _result: list[int] = field(default_factory=list)

    def wait(self) -> int | None:
        if self.process is not None:
            code = self.process.wait()
            return code if code >= 0 else None
        if self.thread is not None:
            self.thread.join()
            return self._result[0] if self._result else 1
        return self.status


def _close(fd: int | None) -> None:
    if fd is not None:
        try:
            os.close(fd)
        except OSError:
            pass


def _open_redirections(
    redirections: Sequence[Redirection],
) -> tuple[int | None, int | None]:
    """Open the redirections in order; later ones replace earlier ones."""
    stdin_fd: int | None = None
    stdout_fd: int | None = None
    try:
        for redirection in redirections:
            if redirection.type in _INPUT_TYPES:
                fd = os.open(redirection.file_name or "", os.O_RDONLY)
                _close(stdin_fd)
                stdin_fd = fd
            elif redirection.type in _OUTPUT_FLAGS:
                fd = os.open(
                    redirection.file_name or "",
                    _OUTPUT_FLAGS[redirection.type],
                    0o644,
                )
                _close(stdout_fd)
                stdout_fd = fd
    except OSError:
        _close(stdin_fd)
        _close(stdout_fd)
        raise
    return stdin_fd, stdout_fd


class Executor:
    """Runs command tables against a shell state."""

    def __init__(self, state: ShellState, reader: Reader | None = None) -> None:
        self.state = state
        self.reader: Reader = reader or _read_line
        self.out = None

    def run(self, commands: Sequence[Command]) -> int:
        """Run heredocs, then the commands; return the resulting exit code."""
        if not commands:
            return self.state.exit_code
        self.state.mode = Mode.IN_HEREDOC
        try:
            if not self.run_heredocs(commands):
                return self.state.exit_code
            if len(commands) == 1:
                self._run_single(commands[0])
            else:
                self._run_pipeline(commands)
        finally:
            self.cleanup(commands)
        return self.state.exit_code

    def run_heredocs(self, commands: Sequence[Command]) -> bool:
        """Read every heredoc; return False if the user interrupted."""
        for command in commands:
            for redirection in command.redirections:
                if redirection.type not in _HEREDOC_TYPES:
                    continue
                if not feed_heredoc(redirection, self.reader):
                    self.state.exit_code = 130
                    self.state.mode = Mode.IN_PROMPT
                    return False
        return True

    def run_builtin(self, command: Command) -> int:
        """Run a builtin in the shell itself and return the exit code."""
        return self._builtin(command, self.out)

    def cleanup(self, commands: Sequence[Command]) -> None:
        """Remove the temporary files written for heredocs."""
        for command in commands:
            for redirection in command.redirections:
                if (
                    redirection.type in _HEREDOC_TYPES
                    and redirection.file_name
                    and redirection.file_name != redirection.heredoc_delim
                ):
                    try:
                        os.unlink(redirection.file_name)
                    except FileNotFoundError:
                        pass

    def _builtin(self, command: Command, out) -> int:
        if command.name.startswith("exit"):
            builtin_exit(command.argv, announce=bool(command.pid))
        if command.name.startswith("echo"):
            self.state.exit_code = builtin_echo(command.argv, out)
        return self.state.exit_code

    def _run_single(self, command: Command) -> None:
        if command.type is CommandType.BUILTIN:
            self.run_builtin(command)
            return
        status = self._start(command, None, None).wait()
        if status is not None:
            self.state.exit_code = status

    def _run_pipeline(self, commands: Sequence[Command]) -> None:
        jobs: list[_Job] = []
        previous: int | None = None
        last = len(commands) - 1
        for position, command in enumerate(commands):
            read_end: int | None = None
            write_end: int | None = None
            if position != last:
                read_end, write_end = os.pipe()
            try:
                jobs.append(self._start(command, previous, write_end))
            finally:
                _close(write_end)
                _close(previous)
            previous = read_end
        _close(previous)
        statuses = [job.wait() for job in jobs]
        if statuses[-1] is not None:
            self.state.exit_code = statuses[-1]

    def _start(
        self, command: Command, stdin_fd: int | None, stdout_fd: int | None
    ) -> _Job:
        try:
            redir_in, redir_out = _open_redirections(command.redirections)
        except OSError as exc:
            sys.stderr.write(f"minishell: {exc.filename}: {exc.strerror}\n")
            return _Job(status=1)
        in_fd = redir_in if redir_in is not None else stdin_fd
        out_fd = redir_out if redir_out is not None else stdout_fd
        try:
            if command.type is CommandType.BUILTIN:
                return self._start_builtin(command, out_fd)
            return self._start_process(command, in_fd, out_fd)
        finally:
            _close(redir_in)
            _close(redir_out)

    def _start_builtin(self, command: Command, out_fd: int | None) -> _Job:
        stream = open(os.dup(1 if out_fd is None else out_fd), "w", encoding="utf-8")
        job = _Job()

        def target() -> None:
            try:
                job._result.append(self._builtin(command, stream))
            except ShellExit as exc:
                if exc.message:
                    sys.stderr.write(exc.message)
                job._result.append(exc.status)
            finally:
                try:
                    stream.close()
                except OSError:
                    pass

        job.thread = threading.Thread(target=target, daemon=True)
        job.thread.start()
        return job

    def _start_process(
        self, command: Command, in_fd: int | None, out_fd: int | None
    ) -> _Job:
        name = command.name
        if "/" in name:
            binary = name
        elif command.type is CommandType.BIN and self.state.path is not None:
            binary = resolve_binary(name, self.state.path)
        else:
            binary = name
        executable = binary if "/" in binary else os.path.join(".", binary)
        try:
            sys.stdout.flush()
        except (OSError, ValueError):
            pass
        try:
            process = subprocess.Popen(
                command.argv or [name],
                executable=executable,
                stdin=in_fd,
                stdout=out_fd,
                env={},
            )
        except (FileNotFoundError, PermissionError, IsADirectoryError):
            message, code = failure_message(name, binary)
            sys.stderr.write(message)
            return _Job(status=code)
        except OSError as exc:
            sys.stderr.write(f"minishell: {name}: {exc.strerror}\n")
            return _Job(status=1)
        command.pid = process.pid
        return _Job(process=process)