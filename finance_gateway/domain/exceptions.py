"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input rejected synchronously (cutoff day, installment parameters)"""

    pass


class TransientPersistenceError(DomainException):
    """Persisting a change failed; the caller may retry"""

    pass


class TransactionNotFoundError(DomainException):
    """Transaction does not exist or is not owned by the user"""

    pass


class SessionStateError(DomainException):
    """Payment session action issued in a state that does not allow it"""

    pass


class SessionNotFoundError(DomainException):
    """No open payment session with the given id"""

    pass


class CategoryNotFoundError(DomainException):
    """Spending category or entry does not exist or is not owned by the user"""

    pass
