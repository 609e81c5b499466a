"""Exception classes for the finance tracker."""


class FinanceTrackerError(Exception):
    """Base exception for the finance tracker."""
    pass


class ConfigError(FinanceTrackerError):
    """Configuration-related errors."""
    pass


class ValidationError(FinanceTrackerError):
    """A record failed boundary validation."""

    def __init__(self, error: dict):
        super().__init__(error.get("message", "invalid record"))
        self.error = error


class InvalidDateError(FinanceTrackerError, ValueError):
    """A transaction date could not be parsed."""
    pass


class InvalidAmountError(FinanceTrackerError, ValueError):
    """An amount is not a finite number."""
    pass


class SeedDataError(FinanceTrackerError):
    """Seed file missing or unreadable."""
    pass


class NotFoundError(FinanceTrackerError, KeyError):
    """No record with the requested id."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "not found"
