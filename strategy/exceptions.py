"""
Errors raised by the suggestion core.
Unusable chains are not errors: selectors return None so callers can fall back.
"""


class SuggestionError(Exception):
    """Base class for suggestion-flow errors."""


class InvalidExpiryOverride(SuggestionError, ValueError):
    """An explicit expiry override could not be parsed as a date."""


class UnsupportedSymbol(SuggestionError, KeyError):
    """No option policy is configured for the symbol."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class UnsupportedDirection(SuggestionError, ValueError):
    """Only long-premium positions are supported."""
