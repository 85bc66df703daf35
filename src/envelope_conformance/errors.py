"""Exception hierarchy for the envelope conformance checker."""


class ConformanceError(Exception):
    """Base class for errors raised by envelope-conformance."""


class UnknownStatusCode(ConformanceError, LookupError):
    """Raised when a status code is not part of the documented rule table."""

    def __init__(self, code: int):
        super().__init__(f"Status code {code} is not in the rule table")
        self.code = code


class CollectionError(ConformanceError, ValueError):
    """Raised when a collection file cannot be read or understood."""


class SettingsError(ConformanceError, ValueError):
    """Raised when checker settings are invalid."""
