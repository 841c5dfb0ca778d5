"""Data access layer for borrowers, loans and installments"""

import uuid
from datetime import date
from typing import Iterable, List, Optional, Sequence
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from loan_servicer.infrastructure.database.models import Borrower, Loan, Installment
from loan_servicer.domain.models import PAID_STATUSES, InstallmentStatus, LoanStatus, ScheduledInstallment

PAID_STATUS_VALUES = [s.value for s in PAID_STATUSES]


class BorrowerRepository:
    """Repository for borrowers"""

    def __init__(self, db: Session):
        self.db = db

    def create_borrower(self, full_name: str, phone_number: str, address: str, notes: str = "") -> Borrower:
        db_borrower = Borrower(
            full_name=full_name,
            phone_number=phone_number,
            address=address,
            notes=notes or "",
        )
        self.db.add(db_borrower)
        self.db.flush()
        return db_borrower

    def get_by_id(self, borrower_id: uuid.UUID) -> Optional[Borrower]:
        return self.db.get(Borrower, borrower_id)

    def get_by_phone(self, phone_number: str) -> Optional[Borrower]:
        return self.db.query(Borrower).filter(Borrower.phone_number == phone_number).first()

    def list_all(self) -> List[Borrower]:
        return self.db.query(Borrower).order_by(Borrower.full_name.asc()).all()

    def search(self, query: str) -> List[Borrower]:
        """Case-insensitive substring match on name or phone"""
        pattern = f"%{query}%"
        return (
            self.db.query(Borrower)
            .filter(or_(Borrower.full_name.ilike(pattern), Borrower.phone_number.ilike(pattern)))
            .order_by(Borrower.full_name.asc())
            .all()
        )

    def count(self) -> int:
        return self.db.query(func.count(Borrower.id)).scalar() or 0

    def delete(self, borrower: Borrower) -> None:
        self.db.delete(borrower)
        self.db.flush()


class LoanRepository:
    """Repository for loans"""

    def __init__(self, db: Session):
        self.db = db

    def create_loan(self, **fields) -> Loan:
        db_loan = Loan(**fields)
        self.db.add(db_loan)
        self.db.flush()  # Get ID without committing
        return db_loan

    def get_by_id(self, loan_id: uuid.UUID) -> Optional[Loan]:
        return self.db.get(Loan, loan_id)

    def list_all(self) -> List[Loan]:
        return self.db.query(Loan).order_by(Loan.created_at.desc(), Loan.loan_date.desc()).all()

    def filter(self, status: Optional[str] = None, borrower_id: Optional[uuid.UUID] = None) -> List[Loan]:
        query = self.db.query(Loan)
        if status:
            query = query.filter(Loan.status == status)
        if borrower_id:
            query = query.filter(Loan.borrower_id == borrower_id)
        return query.order_by(Loan.loan_date.desc()).all()

    def list_by_borrower(self, borrower_id: uuid.UUID) -> List[Loan]:
        return self.filter(borrower_id=borrower_id)

    def count_by_borrower(self, borrower_id: uuid.UUID) -> int:
        return self.db.query(func.count(Loan.id)).filter(Loan.borrower_id == borrower_id).scalar() or 0

    def list_by_status(self, status: LoanStatus) -> List[Loan]:
        return self.db.query(Loan).filter(Loan.status == status.value).all()

    def summary_by_status(self) -> Sequence:
        """(status, count, principal) grouped by loan status"""
        return (
            self.db.query(Loan.status, func.count(Loan.id), func.coalesce(func.sum(Loan.principal), 0.0))
            .group_by(Loan.status)
            .order_by(Loan.status)
            .all()
        )


class InstallmentRepository:
    """Repository for installments"""

    def __init__(self, db: Session):
        self.db = db

    def add_schedule(self, loan_id: uuid.UUID, schedule: Iterable[ScheduledInstallment]) -> List[Installment]:
        """Persist a generated schedule in the current transaction"""
        db_installments = [
            Installment(
                loan_id=loan_id,
                installment_number=item.installment_number,
                due_date=item.due_date,
                amount=item.amount,
                status=item.status.value,
            )
            for item in schedule
        ]
        self.db.add_all(db_installments)
        self.db.flush()
        return db_installments

    def get_by_id(self, installment_id: uuid.UUID) -> Optional[Installment]:
        return self.db.get(Installment, installment_id)

    def list_by_loan(self, loan_id: uuid.UUID) -> List[Installment]:
        return (
            self.db.query(Installment)
            .filter(Installment.loan_id == loan_id)
            .order_by(Installment.due_date.asc(), Installment.installment_number.asc())
            .all()
        )

    def list_by_loans(self, loan_ids: Sequence[uuid.UUID]) -> List[Installment]:
        if not loan_ids:
            return []
        return (
            self.db.query(Installment)
            .filter(Installment.loan_id.in_(loan_ids))
            .order_by(Installment.due_date.asc())
            .all()
        )

    def list_all(self) -> List[Installment]:
        return self.db.query(Installment).all()

    def list_filtered(
        self,
        statuses: Optional[Sequence[str]] = None,
        due_after: Optional[date] = None,
        due_on_or_before: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> List[Installment]:
        query = self.db.query(Installment)
        if statuses:
            query = query.filter(Installment.status.in_(list(statuses)))
        if due_after is not None:
            query = query.filter(Installment.due_date > due_after)
        if due_on_or_before is not None:
            query = query.filter(Installment.due_date <= due_on_or_before)
        query = query.order_by(Installment.due_date.asc(), Installment.installment_number.asc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def list_unpaid_due_on(self, day: date) -> List[Installment]:
        return (
            self.db.query(Installment)
            .filter(Installment.due_date == day, Installment.status == InstallmentStatus.UNPAID.value)
            .order_by(Installment.installment_number.asc())
            .all()
        )

    def list_unpaid_due_after(self, day: date, limit: Optional[int] = None) -> List[Installment]:
        return self.list_filtered(statuses=[InstallmentStatus.UNPAID.value], due_after=day, limit=limit)

    def list_overdue(self, today: date) -> List[Installment]:
        return (
            self.db.query(Installment)
            .filter(Installment.due_date < today, Installment.status == InstallmentStatus.UNPAID.value)
            .order_by(Installment.due_date.asc())
            .all()
        )

    def list_paid(self, paid_from: Optional[date] = None, paid_until: Optional[date] = None) -> List[Installment]:
        """Paid installments, most recently paid first"""
        query = self.db.query(Installment).filter(Installment.status.in_(PAID_STATUS_VALUES))
        if paid_from is not None:
            query = query.filter(Installment.paid_date >= paid_from)
        if paid_until is not None:
            query = query.filter(Installment.paid_date <= paid_until)
        return query.order_by(Installment.paid_date.desc(), Installment.installment_number.asc()).all()

    def collections_by_day(self, paid_from: Optional[date] = None, paid_until: Optional[date] = None) -> Sequence:
        """(paid_date, total paid, count) grouped by payment day"""
        query = self.db.query(
            Installment.paid_date,
            func.coalesce(func.sum(Installment.paid_amount), 0.0),
            func.count(Installment.id),
        ).filter(Installment.status.in_(PAID_STATUS_VALUES))
        if paid_from is not None:
            query = query.filter(Installment.paid_date >= paid_from)
        if paid_until is not None:
            query = query.filter(Installment.paid_date <= paid_until)
        return query.group_by(Installment.paid_date).order_by(Installment.paid_date.asc()).all()
