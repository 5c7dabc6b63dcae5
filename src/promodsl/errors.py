"""Exception types for promodsl.

Only failures that leave nothing to evaluate are exceptions: lexing and
parsing errors abort the pipeline, and ContextLoadError guards the YAML
loader. Everything from validation onward is reported as data.
"""


class PromoDSLError(Exception):
    """Base class for all promodsl errors."""


class LexError(PromoDSLError):
    """Malformed character sequence or unterminated string."""

    def __init__(
        self,
        char: str,
        line: int,
        column: int,
        message: str | None = None,
    ):
        self.char = char
        self.line = line
        self.column = column
        message = message or f"Unexpected character '{char}'"
        super().__init__(f"{message} at line {line}, column {column}")


class ParseError(PromoDSLError):
    """Grammar mismatch at the first offending token."""

    def __init__(self, expected: str, found: str, line: int, column: int):
        self.expected = expected
        self.found = found
        self.line = line
        self.column = column
        super().__init__(
            f"Expected {expected} but found {found} at line {line}, column {column}"
        )


class ContextLoadError(PromoDSLError):
    """A cart/config document could not be read or has the wrong shape."""
