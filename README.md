# minishpy

The building blocks of a small POSIX-style shell. The package checks a command
line for syntax errors, splits it into pipeline segments and tokens, and holds
commands with their redirections. It collects heredocs and runs commands as
single programs or as pipelines. External programs run as child processes.
`echo` and `exit` are built in.

The package has no dependencies outside the standard library.

## Modules

| Module                 | Contents |
|------------------------|----------|
| `minishpy.quoting`     | `is_redir`, `is_quote`, `valid_operator`, `word_length`, `word_count`, `escape_quote`, `replace_substring` |
| `minishpy.environment` | `Mode`, `EnvVar`, `Environment`, `load_environment`, `ShellState` |
| `minishpy.lexer`       | `ShellSyntaxError`, `syntax_error_message`, `check_quotes`, `check_pipes`, `check_redirections`, `lex` |
| `minishpy.tokens`      | `TokenType`, `Token`, `Segment`, `split_pipeline`, `tokenize`, `build_segments` |
| `minishpy.commands`    | `ShellExit`, `CommandType`, `Redirection`, `Command`, `redirection_from_token`, `is_builtin`, `builtin_echo`, `builtin_exit` |
| `minishpy.executor`    | `Executor`, `heredoc_name`, `feed_heredoc`, `resolve_binary`, `failure_message` |

## Checking and splitting a line

`lex(line)` runs the three checks in turn and returns the line unchanged:

- `check_quotes`: no quote may be left open.
- `check_pipes`: no leading, trailing or doubled `|`.
- `check_redirections`: no malformed redirection, and none without a target.

A check that fails raises `ShellSyntaxError`. Its `exit_code` is 1, and its
message reads like `minishell: syntax error near unexpected token '|'`.

Characters inside quotes are plain text. `valid_operator(text, loc)` tells
whether a position lies outside quotes. A backslash before a quote escapes
that quote.

```python
from minishpy.lexer import ShellSyntaxError, lex
from minishpy.tokens import build_segments

try:
    lex("echo 'a | b' |")
except ShellSyntaxError as error:
    print(error)   # minishell: syntax error near unexpected token '|'

for segment in build_segments("cat < input.txt | grep hey"):
    print(segment.idx, [(t.type.name, t.text) for t in segment.tokens])
# 0 [('WORD', 'cat'), ('INPUT', '<'), ('WORD', 'input.txt')]
# 1 [('WORD', 'grep'), ('WORD', 'hey')]
```

The functions have these roles:

- `split_pipeline` cuts a line at unquoted pipes.
- `tokenize` breaks one segment into `WORD`, `INPUT` (`<`), `OUTPUT` (`>`),
  `APPEND` (`>>`) and `HEREDOC` (`<<`) tokens.
- `build_segments` combines the two.

## State and environment

`ShellState(env)` takes `KEY=VALUE` strings or a mapping such as `os.environ`.
It holds the following:

- `env`: an `Environment`.
- `path`: the `PATH` directories. It is `None` if `PATH` is unset.
- `exit_code`.
- `mode`: `Mode.IN_PROMPT` or `Mode.IN_HEREDOC`.
- `prompt`: a prefix that changes after a non-zero exit code.

An empty environment gets `PWD` set to the working directory and `SHLVL=1`.

`Environment` has these methods:

- `get(key)` returns the value of the first variable whose name starts with
  `key`.
- `search_path()` splits `PATH`, or raises `KeyError` if `PATH` is unset.
- `as_list()` gives `KEY=VALUE` strings.
- `refresh()` re-reads the values and returns the keys that changed.

## Running commands

`Command(name, argv, idx=..., type=CommandType.BIN | CommandType.BUILTIN)`
describes one command. `Command.add_redirection(token_type, target)` attaches
a `Redirection` to it. `Executor(state, reader=None).run(commands)` does the
following:

1. It reads every heredoc into a temporary file under `/tmp/`. The lines come
   from `reader(prompt)`, which defaults to `input()`. Reading stops at the
   delimiter or at `None`.
2. It runs a single command directly. Two or more commands run as a pipeline.
3. It sets `state.exit_code` from the last command and returns that code.
4. It removes the heredoc files.

If reading a heredoc is interrupted, the exit code becomes 130 and nothing
runs.

```python
import os

from minishpy.commands import Command, CommandType
from minishpy.environment import ShellState
from minishpy.executor import Executor
from minishpy.tokens import TokenType

state = ShellState(os.environ)

lines = iter(["one", "two", "EOF"])
executor = Executor(state, reader=lambda prompt: next(lines, None))

cat = Command("cat", ["cat"], idx=0)
cat.add_redirection(TokenType.HEREDOC, "EOF")
wc = Command("wc", ["wc", "-l"], idx=1)

code = executor.run([cat, wc])   # prints 2, returns 0

executor.run([Command("echo", ["echo", "-n", "hi"], type=CommandType.BUILTIN)])
```

`resolve_binary(name, search_path)` finds programs in `PATH`. The first
executable match wins; failing that, the last existing file is used. A name
containing `/` is used as it is. When a program cannot be started,
`failure_message` picks one of these:

- `name: command not found` (127)
- `minishell: name: Permission denied` (126)
- `minishell: name: No such file or directory` (127), for names that contain
  `/`

External programs are started with an empty environment.

### Builtins

- `builtin_echo(argv, out=None)` joins the arguments with spaces. If the first
  argument starts with `-n`, no newline follows.
- `builtin_exit(argv, announce=False, err=None)` raises `ShellExit` and does
  not end the process:
  - with no argument, status 0;
  - with a numeric argument, that number modulo 256;
  - otherwise, status 2 and the message
    `minishell: exit: ARG: numeric argument required`.

  The caller decides what to do with the status.

When `exit` is the only command, `Executor.run` lets `ShellExit` propagate.
Inside a pipeline, its status becomes that command's status. `is_builtin(name)`
tells whether `name` is a prefix of `echo`, `cd`, `pwd`, `exit`, `env`,
`export` or `unset`. Only `echo` and `exit` are carried out.

## What the package does not do

- It has no command-line program and no interactive read-eval loop. The caller
  reads lines and chains `lex`, `build_segments` and `Executor.run`.
- Nothing turns `Segment` tokens into `Command` objects. The caller builds the
  commands.
- No `$VAR` expansion is done, in command lines or in heredocs. Quotes are not
  removed from words.
- `cd`, `pwd`, `env`, `export` and `unset` are recognised by `is_builtin` but
  not carried out.
- No signal handling is installed.