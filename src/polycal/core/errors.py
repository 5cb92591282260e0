class PolycalError(Exception):
    """Base error."""

class ConfigurationError(PolycalError, ValueError):
    """Raised when a calendar definition is malformed. The model must not be used."""

class UnknownCalendarError(PolycalError, KeyError):
    """Raised when a named calendar is not registered."""
