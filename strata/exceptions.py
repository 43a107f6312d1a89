import typing


class Misconfiguration(Exception):
    """
    Error raised when a configured value is missing or cannot be used: a
    property that is not defined anywhere in a search path, a raw value that
    could not be parsed into the type requested by a key or a configuration
    source that could not be read.

    Any lower-level error that caused the misconfiguration is available as
    ``__cause__``.
    """
    def __init__(self, message: str, *args: typing.Any):
        super().__init__(message, *args)
        self.message = message

    def __str__(self) -> str:
        return self.message
