"""Error handling utilities."""

from typing import Optional


class HouseBrokerError(Exception):
    """Base exception for the house broker backend."""
    pass


class ConfigurationError(HouseBrokerError):
    """Required configuration is missing or malformed."""
    pass


class RepositoryError(HouseBrokerError):
    """Store read, write or commit failed."""
    pass


class CommissionRuleError(HouseBrokerError):
    """Commission rule table failed validation."""

    def __init__(self, issues: list[str]):
        self.issues = issues
        super().__init__("Invalid commission rules: " + "; ".join(issues))


class ListingValidationError(HouseBrokerError):
    """Listing submission rejected at the validation boundary."""

    def __init__(self, errors: list[dict], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message or f"Listing submission has {len(errors)} invalid field(s)")


class FileStorageError(HouseBrokerError):
    """Uploaded file could not be stored."""
    pass
