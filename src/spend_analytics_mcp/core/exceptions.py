"""
Custom exceptions for the spend analytics engine.
"""


class SpendAnalyticsError(Exception):
    """Base exception for spend analytics errors."""
    pass


class SourceUnavailableError(SpendAnalyticsError):
    """Raised when a page of expenses cannot be fetched (network/server error)."""
    pass


class InvalidBudgetAmountError(SpendAnalyticsError, ValueError):
    """Raised when a budget amount is negative."""
    pass


class AggregationSupersededError(SpendAnalyticsError):
    """Raised to a run that was cancelled by a newer run before finishing."""
    pass


class ExpenseDataNotFoundError(SpendAnalyticsError):
    """Raised when the expense export file cannot be found."""
    pass


class ExpenseDataError(SpendAnalyticsError):
    """Raised when expense data cannot be parsed."""
    pass


class BudgetDataError(SpendAnalyticsError):
    """Raised when the budget file cannot be parsed."""
    pass
