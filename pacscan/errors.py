"""Pacscan exceptions."""


class PacscanError(Exception):
    """Base class for errors raised by pacscan."""


class MissingSourceFileError(PacscanError):
    """Raised when neither a path nor a calling module is available to scan from."""

    def __init__(self, message: str = "Could not resolve base directory as file was missing"):
        self.message = message
        super().__init__(message)
