"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class DomainValidationError(DomainException):
    """Input is missing or violates a business rule"""

    pass


class InvalidLoanTermsError(DomainValidationError):
    """Principal, interest rate, installment count or cycle is out of range"""

    pass


class NotFoundError(DomainException):
    """Referenced borrower, loan or installment does not exist"""

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(DomainException):
    """Operation conflicts with the current state of the data"""

    pass


class DuplicateBorrowerError(ConflictError):
    """A borrower with the same phone number is already registered"""

    pass


class BorrowerHasLoansError(ConflictError):
    """Borrower still owns loans and cannot be deleted"""

    pass


class AlreadyPaidError(ConflictError):
    """Installment is already in a terminal paid state"""

    pass


class InvalidStateError(ConflictError):
    """Installment is not in the state the operation requires"""

    pass


class PersistenceError(DomainException):
    """Database is unreachable or a write failed"""

    pass
