from typing import Optional


class SpanParseError(ValueError):
    """Raised when a duration string cannot be parsed into a Span.

    :param message: Human readable description naming the expected grammar.
    :param source: The offending input string.
    :param offset: Index of the first rejected character, when known.
    """

    def __init__(self, message: str, source: Optional[str] = None, offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.source = source
        self.offset = offset

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, source={self.source!r})"
