# services/errors.py
"""Business-rule failures raised by services; main.py maps them to HTTP responses."""


class DomainError(ValueError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    status_code = 404


class StockError(DomainError):
    """Not enough stock (main, user or finished goods)."""


class TransitionError(DomainError):
    """Status change not allowed from the current status."""
    status_code = 409


class LedgerError(DomainError):
    """Invalid money movement (overpayment, over-applied credit, ...)."""
