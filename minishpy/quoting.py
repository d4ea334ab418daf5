"""Quote-aware character helpers shared by the lexer and the parser."""

from __future__ import annotations

WHITESPACE = " \t\n\v\f\r"
QUOTES = "'\""
REDIRECTIONS = "<>"


def is_redir(char: str) -> bool:
    """Return True if *char* is a redirection character."""
    return char != "" and char in REDIRECTIONS


def is_quote(char: str) -> bool:
    """Return True if *char* is a single or double quote."""
    return char != "" and char in QUOTES


def _open_quote(text: str, loc: int, opening: str) -> str:
    """Return the quote left open before position *loc*, or an empty string."""
    quote = ""
    end = min(loc, len(text))
    i = 0
    while i < end:
        char = text[i]
        if char == "\\" and i + 1 < len(text) and is_quote(text[i + 1]):
            i += 2
            continue
        if not quote and char in opening:
            quote = char
        elif quote and char == quote:
            quote = ""
        i += 1
    return quote


def valid_operator(text: str, loc: int, kind: str | None = None) -> bool:
    """Tell whether position *loc* of *text* lies outside quotes.

    With *kind* set to a single or a double quote only that kind of quote
    is taken into account; otherwise both are.
    """
    if kind == "'":
        opening = "'"
    elif kind == '"':
        opening = '"'
    else:
        opening = QUOTES
    return not _open_quote(text, loc, opening)


def word_length(text: str | None) -> int:
    """Length of the word at the start of *text*.

    A word ends at unquoted whitespace or at a redirection character that
    is not inside quotes.
    """
    if not text:
        return 0
    quote = ""
    for i, char in enumerate(text):
        if is_redir(char) and valid_operator(text, i):
            return i
        if not quote and is_quote(char):
            quote = char
        elif quote and char == quote:
            quote = ""
        if char in WHITESPACE and not quote:
            return i
    return len(text)


def word_count(text: str | None) -> int:
    """Count the words of *text* as :func:`word_length` delimits them."""
    if not text:
        return 0
    words = 0
    i = 0
    while i < len(text):
        if text[i] not in WHITESPACE:
            i += word_length(text[i:])
            words += 1
        i += 1
    return words


def escape_quote(text: str, index: int) -> tuple[str, bool]:
    """Resolve an escaped quote found at *index* of *text*.

    Returns the replacement text and whether the escape was resolved.
    When it was not, the replacement keeps the backslash and the caller
    must step over one more input character.
    """
    char = text[index] if 0 <= index < len(text) else ""
    if char == '"':
        return '"', True
    if char == "'" and valid_operator(text, index):
        return "'", True
    return "\\'", False


def replace_substring(main: str, old: str | None, new: str | None) -> str:
    """Replace the first occurrence of *old* in *main* outside single quotes.

    Matching compares all but the last character of *old*; when nothing
    matches, *new* is appended to *main*.
    """
    if old is None:
        return main
    head = old[:-1] if old else None
    index = next(
        (
            i
            for i in range(len(main))
            if head is not None
            and main.startswith(head, i)
            and valid_operator(main, i, "'")
        ),
        len(main),
    )
    return main[:index] + (new or "") + main[index + len(old):]