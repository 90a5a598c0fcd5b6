"""Errors raised while reading posts."""


class PostFormatError(Exception):
    """A post file that can't be parsed.

    ``line`` is the 1-based line of the file where the problem
    was detected, ``path`` the file, when known.
    """

    def __init__(self, message: str, line: int = 1, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.path = path

    def with_path(self, path: str) -> "PostFormatError":
        """A copy of the error that refers to the given file."""
        return self.__class__(self.message, line=self.line, path=path)

    def __str__(self) -> str:
        location = f"{self.path}:{self.line}" if self.path else f"line {self.line}"
        return f"{location}: {self.message}"
