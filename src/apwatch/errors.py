# src/apwatch/errors.py


class SourceUnavailable(RuntimeError):
    """Registry or scan input could not be opened, read, run or fetched."""


class MalformedLine(ValueError):
    """A registry content line that is neither a section header nor an entry."""

    def __init__(self, lineno: int, line: str):
        super().__init__(f"line {lineno}: unrecognized registry line: {line!r}")
        self.lineno = lineno
        self.line = line


class DeliveryError(RuntimeError):
    """A report sink rejected or failed to store the report."""
