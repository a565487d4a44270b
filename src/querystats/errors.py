"""Custom exception classes for the querystats package."""


class CollectorConfigError(ValueError):
    """Raised when collector configuration is invalid or unsafe to render as SQL."""


class RowDecodeError(ValueError):
    """Raised when a result row does not have the expected shape or types."""


class ScrapeCancelled(RuntimeError):
    """Raised when the scrape context is cancelled or its deadline passes."""
