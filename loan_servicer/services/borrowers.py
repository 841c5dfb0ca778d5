"""Borrower registry - registration, profile rollups and the delete guard"""

import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from loan_servicer.domain.exceptions import (
    BorrowerHasLoansError,
    DomainValidationError,
    DuplicateBorrowerError,
    NotFoundError,
    PersistenceError,
)
from loan_servicer.domain.ledger import is_paid
from loan_servicer.domain.models import LoanStatus
from loan_servicer.infrastructure.database.models import Borrower, Installment, Loan
from loan_servicer.infrastructure.database.repositories import (
    BorrowerRepository,
    InstallmentRepository,
    LoanRepository,
)
from loan_servicer.infrastructure.database.session import unit_of_work


@dataclass
class BorrowerProfile:
    """Borrower with loans, installments and outstanding totals"""

    borrower: Borrower
    loans: List[Loan]
    installments: List[Installment]
    total_loans: int
    active_loans: int
    total_outstanding: float


def total_outstanding(loans: List[Loan], installments: List[Installment]) -> float:
    """Sum of unpaid installment balances on active loans"""
    active_ids = {loan.id for loan in loans if loan.status == LoanStatus.ACTIVE.value}
    return sum(
        inst.amount - (inst.paid_amount or 0)
        for inst in installments
        if inst.loan_id in active_ids and not is_paid(inst.status)
    )


class BorrowerService:
    def __init__(self, db: Session):
        self.db = db
        self.borrowers = BorrowerRepository(db)
        self.loans = LoanRepository(db)
        self.installments = InstallmentRepository(db)

    @contextmanager
    def _phone_guard(self) -> Iterator[None]:
        """Report a phone number taken by a concurrent write as a duplicate"""
        try:
            yield
        except PersistenceError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateBorrowerError("Borrower with this phone number already exists") from e
            raise

    def get_borrower(self, borrower_id: uuid.UUID) -> Borrower:
        borrower = self.borrowers.get_by_id(borrower_id)
        if borrower is None:
            raise NotFoundError("Borrower", borrower_id)
        return borrower

    def list_borrowers(self) -> List[Borrower]:
        return self.borrowers.list_all()

    def get_profile(self, borrower_id: uuid.UUID) -> BorrowerProfile:
        borrower = self.get_borrower(borrower_id)
        loans = self.loans.list_by_borrower(borrower.id)
        installments = self.installments.list_by_loans([loan.id for loan in loans])
        return BorrowerProfile(
            borrower=borrower,
            loans=loans,
            installments=installments,
            total_loans=len(loans),
            active_loans=sum(1 for loan in loans if loan.status == LoanStatus.ACTIVE.value),
            total_outstanding=total_outstanding(loans, installments),
        )

    def list_loans(self, borrower_id: uuid.UUID) -> List[Loan]:
        borrower = self.get_borrower(borrower_id)
        return self.loans.list_by_borrower(borrower.id)

    def search(self, query: Optional[str]) -> List[Borrower]:
        if not query or not query.strip():
            raise DomainValidationError("Please provide a search query")
        return self.borrowers.search(query.strip())

    def create_borrower(self, full_name: str, phone_number: str, address: str, notes: Optional[str] = None) -> Borrower:
        if self.borrowers.get_by_phone(phone_number) is not None:
            raise DuplicateBorrowerError("Borrower with this phone number already exists")

        with self._phone_guard(), unit_of_work(self.db):
            borrower = self.borrowers.create_borrower(full_name, phone_number, address, notes or "")
        return borrower

    def update_borrower(
        self,
        borrower_id: uuid.UUID,
        full_name: Optional[str] = None,
        phone_number: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
        is_loyal: Optional[bool] = None,
    ) -> Borrower:
        borrower = self.get_borrower(borrower_id)

        if phone_number and phone_number != borrower.phone_number:
            existing = self.borrowers.get_by_phone(phone_number)
            if existing is not None and existing.id != borrower.id:
                raise DuplicateBorrowerError("Borrower with this phone number already exists")

        with self._phone_guard(), unit_of_work(self.db):
            if full_name:
                borrower.full_name = full_name
            if phone_number:
                borrower.phone_number = phone_number
            if address:
                borrower.address = address
            if notes is not None:
                borrower.notes = notes
            if is_loyal is not None:
                borrower.is_loyal = is_loyal
        return borrower

    def delete_borrower(self, borrower_id: uuid.UUID) -> None:
        """Delete a borrower that owns no loans"""
        if self.loans.count_by_borrower(borrower_id) > 0:
            raise BorrowerHasLoansError(
                "Cannot delete borrower with existing loans. Please close or delete all loans first."
            )
        borrower = self.get_borrower(borrower_id)

        with unit_of_work(self.db):
            self.borrowers.delete(borrower)

    def set_cibil_score(self, borrower_id: uuid.UUID, cibil_score: int) -> Borrower:
        """Operator override of the credit score"""
        borrower = self.get_borrower(borrower_id)
        with unit_of_work(self.db):
            borrower.cibil_score = cibil_score
        return borrower
