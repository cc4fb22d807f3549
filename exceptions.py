"""Error taxonomy for the expense tracker.

Every error carries the HTTP status and the stable ``code`` it is reported
with; ``main.py`` turns them into ``{"error": code, "detail": message}``.
"""


class ExpenseTrackerError(Exception):
    """Base exception for all expense tracker errors."""

    status_code = 500
    code = "internal_error"
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationMissingError(ExpenseTrackerError):
    """Raised when a request carries no token."""

    status_code = 401
    code = "authentication_missing"
    default_message = "Access denied. No token provided."


class AuthenticationInvalidError(ExpenseTrackerError):
    """Raised when a token fails verification."""

    status_code = 401
    code = "authentication_invalid"
    default_message = "Invalid token"


class ExpenseNotFoundError(ExpenseTrackerError):
    """Raised when an expense does not exist or belongs to another user."""

    status_code = 404
    code = "not_found"
    default_message = "Expense not found"

    def __init__(self, expense_id: int | None = None, message: str | None = None):
        self.expense_id = expense_id
        if message is None and expense_id is not None:
            message = f"{self.default_message}: {expense_id}"
        super().__init__(message)


class SplitDetailNotFoundError(ExpenseNotFoundError):
    """Raised when a split detail index or id does not resolve."""

    default_message = "Split detail not found"


class InvalidStateTransitionError(ExpenseTrackerError):
    """Raised when a split detail is already in the requested paid state."""

    status_code = 400
    code = "invalid_state_transition"
    default_message = "Status already updated"


class PersistenceError(ExpenseTrackerError):
    """Raised when the storage layer fails."""

    code = "persistence_failure"
    default_message = "Failed to access expense storage"


class ExportError(ExpenseTrackerError):
    """Raised when a report cannot be rendered."""

    code = "export_failure"
    default_message = "Failed to generate report"
