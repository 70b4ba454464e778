"""Fatal error types for autocheck

Configuration errors mean the grading setup itself is broken, so no partial
result can be trusted and the whole run stops. Grading outcomes (compile
errors, timeouts, failed checks, ...) are never raised; they are recorded on
the Testcase and classified instead.
"""

from typing import Optional


class ConfigurationError(Exception):
    """Malformed configuration, check syntax, or result log."""

    def __init__(self, message: str, location: Optional[str] = None):
        self.message = message
        self.location = location
        if location:
            super().__init__(f"{location}: {message}")
        else:
            super().__init__(message)


class ParseError(ConfigurationError):
    """A check marker or check expression could not be parsed."""


class ProtocolError(ConfigurationError):
    """A result log line does not match what the generator writes."""
