"""Base exception class for all rxec-specific errors."""


class RxecError(Exception):
    """Base class for all rxec errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
