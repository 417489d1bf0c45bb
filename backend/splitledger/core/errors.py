"""
Typed ledger failures.

Services raise these instead of HTTP errors; ``main.py`` maps them to
responses through ``status_code`` and ``kind``.
"""


class LedgerError(Exception):
    """Base class for every business-rule failure of the ledger."""
    status_code = 400
    kind = "LedgerError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(LedgerError):
    """Referenced entity does not exist."""
    status_code = 404
    kind = "NotFound"


class Forbidden(LedgerError):
    """Caller lacks rights for the operation, or the event is frozen."""
    status_code = 403
    kind = "Forbidden"


class Conflict(LedgerError):
    """Duplicate record or a state that blocks the operation."""
    status_code = 409
    kind = "Conflict"


class InvalidInput(LedgerError):
    status_code = 400
    kind = "InvalidInput"


class InvalidAmount(InvalidInput):
    """Non-positive amount or an overpayment."""
    kind = "InvalidAmount"


class Unavailable(LedgerError):
    """Store unreachable or locked."""
    status_code = 503
    kind = "Unavailable"


class LedgerTimeout(Unavailable):
    """Contention on a record exceeded the retry bound."""
    kind = "Timeout"
