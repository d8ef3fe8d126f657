"""Tokenizer and cursor over block-structured directive text."""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple


class DispenserError(ValueError):
    """A syntax or configuration error located at a line of the input."""

    def __init__(self, message: str, line: int = 0) -> None:
        super().__init__(f"line {line}: {message}" if line else message)
        self.message = message
        self.line = line


class Token(NamedTuple):
    """One token and the line it starts on."""

    text: str
    line: int


def tokenize(text: str) -> list[Token]:
    """Split text into tokens: words, quoted strings and braces.

    Whitespace separates tokens, ``#`` at the start of a token opens a
    comment running to the end of the line, double quotes allow escaped
    quotes and backticks quote raw text.
    """
    tokens: list[Token] = []
    buffer: list[str] = []
    line = 1
    start_line = 1
    in_token = False
    quote: str | None = None
    escaped = False
    comment = False

    def flush() -> None:
        nonlocal in_token
        tokens.append(Token("".join(buffer), start_line))
        buffer.clear()
        in_token = False

    for char in text:
        if quote == '"':
            if not escaped:
                if char == "\\":
                    escaped = True
                    continue
                if char == '"':
                    quote = None
                    flush()
                    continue
            if char == "\n":
                line += 1
            if escaped and char not in '"\n':
                buffer.append("\\")
            buffer.append(char)
            escaped = False
            continue
        if quote == "`":
            if char == "`":
                quote = None
                flush()
                continue
            if char == "\n":
                line += 1
            buffer.append(char)
            continue
        if comment:
            if char == "\n":
                comment = False
                line += 1
            continue
        if char.isspace():
            if in_token:
                flush()
            if char == "\n":
                line += 1
            continue
        if not in_token:
            if char == "#":
                comment = True
                continue
            start_line = line
            in_token = True
            if char in '"`':
                quote = char
                continue
        buffer.append(char)

    if quote is not None:
        raise DispenserError("unexpected EOF: unterminated quoted string", start_line)
    if in_token:
        flush()
    return tokens


class Dispenser:
    """A cursor walking tokens, with helpers for arguments and nested blocks."""

    def __init__(self, source: str | Iterable[Token]) -> None:
        self._tokens = tokenize(source) if isinstance(source, str) else list(source)
        self._cursor = -1
        self._nesting = 0

    def next(self) -> bool:
        """Move to the next token; False at the end of input."""
        if self._cursor < len(self._tokens) - 1:
            self._cursor += 1
            return True
        return False

    def nesting(self) -> int:
        """The current block nesting depth."""
        return self._nesting

    def val(self) -> str:
        """The text of the current token, or an empty string."""
        if 0 <= self._cursor < len(self._tokens):
            return self._tokens[self._cursor].text
        return ""

    def next_block(self, nesting: int) -> bool:
        """Move to the next token inside the block opened at ``nesting``.

        Opens the block when its brace follows on the same line and returns
        False once the block is closed or when there is no block.
        """
        if self._nesting > nesting:
            if not self.next():
                return False
            if self.val() == "}":
                self._nesting -= 1
            elif self.val() == "{":
                self._nesting += 1
            return self._nesting > nesting
        if not self._next_on_same_line():
            return False
        if self.val() != "{":
            self._cursor -= 1
            return False
        self.next()
        if self.val() == "}":
            return False
        self._nesting += 1
        return True

    def remaining_args(self) -> list[str]:
        """Consume and return the arguments left on the current line."""
        args: list[str] = []
        while self._next_arg():
            args.append(self.val())
        return args

    def error(self, message: str) -> DispenserError:
        """An error carrying the line of the current token."""
        return DispenserError(message, self._line())

    def _line(self) -> int:
        if not self._tokens:
            return 0
        index = min(max(self._cursor, 0), len(self._tokens) - 1)
        return self._tokens[index].line

    def _next_arg(self) -> bool:
        if not self._next_on_same_line():
            return False
        if self.val() == "{":
            self._cursor -= 1
            return False
        return True

    def _next_on_same_line(self) -> bool:
        if self._cursor < 0:
            self._cursor += 1
            return self._cursor < len(self._tokens)
        if self._cursor >= len(self._tokens) - 1:
            return False
        current = self._tokens[self._cursor]
        following = self._tokens[self._cursor + 1]
        if current.line + current.text.count("\n") >= following.line:
            self._cursor += 1
            return True
        return False