"""
Error kinds raised inside the vacancy bot.
"""

from typing import Any, Dict, Optional


class VacancyBotError(Exception):
    """Base exception for the vacancy bot"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(VacancyBotError):
    """User input failed validation; re-prompt without changing state."""


class AuthorizationMismatch(VacancyBotError):
    """A shared contact belongs to someone other than the sender."""


class ProviderUnavailable(VacancyBotError):
    """Data source or geocoding provider could not be reached or parsed."""

    def __init__(self, provider: str, message: str,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(f"{provider}: {message}", details)
        self.provider = provider


class NotificationDeliveryFailed(VacancyBotError):
    """The application could not be delivered to the manager chat."""
