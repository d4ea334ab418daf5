import os
import string

import pytest

from minishpy.commands import Command, CommandType, ShellExit, redirection_from_token
from minishpy.environment import Mode, ShellState
from minishpy.executor import (
    Executor,
    failure_message,
    feed_heredoc,
    heredoc_name,
    resolve_binary,
)
from minishpy.tokens import TokenType


def _reader(lines):
    it = iter(lines)
    return lambda prompt: next(it, None)


def _interrupting_reader(prompt):
    raise KeyboardInterrupt


@pytest.fixture
def state():
    return ShellState({"PATH": "/bin:/usr/bin"})


def test_heredoc_name_shape():
    name = heredoc_name()
    assert name.startswith("/tmp/")
    assert len(name) == len("/tmp/") + 16
    assert all(c in string.ascii_letters for c in name[5:])
    assert heredoc_name() != name


def test_feed_heredoc_stops_at_delimiter():
    redirection = redirection_from_token(TokenType.HEREDOC, "EOF")
    try:
        assert feed_heredoc(redirection, _reader(["a", "b", "EOF", "c"])) is True
        with open(redirection.file_name, encoding="utf-8") as handle:
            assert handle.read() == "a\nb\n"
    finally:
        os.unlink(redirection.file_name)


def test_feed_heredoc_warns_on_eof(capsys):
    redirection = redirection_from_token(TokenType.HEREDOC, "END")
    try:
        assert feed_heredoc(redirection, _reader(["only"])) is True
        with open(redirection.file_name, encoding="utf-8") as handle:
            assert handle.read() == "only\n"
    finally:
        os.unlink(redirection.file_name)
    assert "heredoc delimited by EOF" in capsys.readouterr().err


def test_feed_heredoc_interrupted():
    redirection = redirection_from_token(TokenType.HEREDOC, "END")
    try:
        assert feed_heredoc(redirection, _interrupting_reader) is False
    finally:
        os.unlink(redirection.file_name)


def test_resolve_binary_prefers_executable(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    tools = tmp_path / "tools"
    tools.mkdir()
    program = tools / "prog"
    program.write_text("#!/bin/sh\n")
    program.chmod(0o755)
    assert resolve_binary("prog", [str(empty), str(tools)]) == f"{tools}/prog"


def test_resolve_binary_falls_back_to_existing_file(tmp_path):
    plain = tmp_path / "prog"
    plain.write_text("data")
    plain.chmod(0o644)
    assert resolve_binary("prog", [str(tmp_path)]) == f"{tmp_path}/prog"


def test_resolve_binary_unknown_and_slashed(tmp_path):
    assert resolve_binary("nothing-here", [str(tmp_path)]) == "nothing-here"
    assert resolve_binary("./prog", [str(tmp_path)]) == "./prog"
    assert resolve_binary("prog", None) == "prog"


def test_failure_messages(tmp_path):
    assert failure_message("./nope", "./nope") == (
        "minishell: ./nope: No such file or directory\n",
        127,
    )
    assert failure_message("nope-cmd", "nope-cmd") == (
        "nope-cmd: command not found\n",
        127,
    )
    plain = tmp_path / "tool"
    plain.write_text("data")
    message, code = failure_message("tool", str(plain))
    assert code == 126
    assert message == "minishell: tool: Permission denied\n"


def test_single_builtin_echo(state, capsys):
    executor = Executor(state)
    command = Command("echo", ["echo", "hi", "there"], type=CommandType.BUILTIN)
    assert executor.run([command]) == 0
    assert capsys.readouterr().out == "hi there\n"


def test_builtin_exit_raises(state):
    executor = Executor(state)
    command = Command("exit", ["exit", "42"], type=CommandType.BUILTIN)
    with pytest.raises(ShellExit) as info:
        executor.run([command])
    assert info.value.status == 42


def test_binary_exit_status(state):
    executor = Executor(state)
    command = Command("sh", ["sh", "-c", "exit 3"])
    assert executor.run([command]) == 3
    assert state.exit_code == 3


def test_output_redirection(state, tmp_path):
    target = tmp_path / "out.txt"
    command = Command("sh", ["sh", "-c", "echo hello"])
    command.add_redirection(TokenType.OUTPUT, str(target))
    assert Executor(state).run([command]) == 0
    assert target.read_text() == "hello\n"


def test_missing_command(state, capsys):
    command = Command("definitely-missing-cmd", ["definitely-missing-cmd"])
    assert Executor(state).run([command]) == 127
    assert "definitely-missing-cmd: command not found" in capsys.readouterr().err


def test_missing_input_file(state, tmp_path, capsys):
    command = Command("cat", ["cat"])
    command.add_redirection(TokenType.INPUT, str(tmp_path / "missing"))
    assert Executor(state).run([command]) == 1
    assert "missing" in capsys.readouterr().err


def test_pipeline(state, tmp_path):
    target = tmp_path / "piped.txt"
    first = Command("sh", ["sh", "-c", "echo abc"], idx=0)
    second = Command("cat", ["cat"], idx=1)
    second.add_redirection(TokenType.OUTPUT, str(target))
    assert Executor(state).run([first, second]) == 0
    assert target.read_text() == "abc\n"


def test_pipeline_with_builtin(state, tmp_path):
    target = tmp_path / "echoed.txt"
    first = Command("echo", ["echo", "x", "y"], idx=0, type=CommandType.BUILTIN)
    second = Command("cat", ["cat"], idx=1)
    second.add_redirection(TokenType.OUTPUT, str(target))
    Executor(state).run([first, second])
    assert target.read_text() == "x y\n"


def test_pipeline_status_is_last(state):
    first = Command("sh", ["sh", "-c", "exit 5"], idx=0)
    second = Command("sh", ["sh", "-c", "exit 0"], idx=1)
    assert Executor(state).run([first, second]) == 0


def test_heredoc_feeds_command_and_is_removed(state, tmp_path):
    target = tmp_path / "heredoc.txt"
    command = Command("cat", ["cat"])
    heredoc = command.add_redirection(TokenType.HEREDOC, "hey")
    command.add_redirection(TokenType.OUTPUT, str(target))
    executor = Executor(state, _reader(["one", "two", "hey"]))
    assert executor.run([command]) == 0
    assert target.read_text() == "one\ntwo\n"
    assert heredoc.file_name.startswith("/tmp/")
    assert not os.path.exists(heredoc.file_name)


def test_heredoc_interrupt_skips_execution(state, tmp_path):
    target = tmp_path / "never.txt"
    command = Command("sh", ["sh", "-c", "echo ran"])
    heredoc = command.add_redirection(TokenType.HEREDOC, "hey")
    command.add_redirection(TokenType.OUTPUT, str(target))
    executor = Executor(state, _interrupting_reader)
    assert executor.run([command]) == 130
    assert state.mode is Mode.IN_PROMPT
    assert not target.exists()
    assert not os.path.exists(heredoc.file_name)


def test_cleanup_leaves_unfed_heredoc_target(state, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "hey").write_text("keep")
    command = Command("cat", ["cat"])
    heredoc = command.add_redirection(TokenType.HEREDOC, "hey")
    assert heredoc.heredoc_delim == "hey"
    assert heredoc.type is TokenType.HEREDOC
    Executor(state).cleanup([command])
    assert (tmp_path / "hey").read_text() == "keep"