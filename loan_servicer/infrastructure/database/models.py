"""SQLAlchemy ORM models for borrowers, loans and installments"""

import uuid
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from loan_servicer.domain.models import InstallmentStatus, LoanStatus, PaymentMode
from loan_servicer.domain.scoring import DEFAULT_CIBIL_SCORE
from loan_servicer.domain.terms import compute_terms

Base = declarative_base()


class Borrower(Base):
    """Person who takes loans"""

    __tablename__ = "borrower"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(Text, nullable=False, index=True)
    phone_number = Column(Text, nullable=False, unique=True)
    address = Column(Text, nullable=False)
    notes = Column(Text, nullable=False, default="")
    cibil_score = Column(Integer, nullable=False, default=DEFAULT_CIBIL_SCORE)
    is_loyal = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # No cascade: deletion is guarded by the registry while loans exist
    loans = relationship("Loan", back_populates="borrower")


class Loan(Base):
    """Loan disbursed to a borrower"""

    __tablename__ = "loan"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    borrower_id = Column(Uuid(as_uuid=True), ForeignKey("borrower.id"), nullable=False, index=True)
    loan_date = Column(Date, nullable=False)
    principal = Column(Float, nullable=False)
    interest_rate = Column(Float, nullable=False)
    total_installments = Column(Integer, nullable=False)
    installment_cycle_days = Column(Integer, nullable=False, default=30)
    first_installment_date = Column(Date, nullable=False)
    purpose = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default=LoanStatus.ACTIVE.value, index=True)
    amount_paid = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    borrower = relationship("Borrower", back_populates="loans")
    installments = relationship(
        "Installment",
        back_populates="loan",
        cascade="all, delete-orphan",
        order_by="Installment.installment_number",
    )

    # Derived from principal, rate and count on every read so they never drift
    @property
    def total_repayable(self) -> float:
        return compute_terms(self.principal, self.interest_rate, self.total_installments).total_repayable

    @property
    def installment_amount(self) -> float:
        return compute_terms(self.principal, self.interest_rate, self.total_installments).installment_amount


class Installment(Base):
    """Single scheduled repayment (EMI) of a loan"""

    __tablename__ = "installment"
    __table_args__ = (UniqueConstraint("loan_id", "installment_number", name="uq_installment_loan_number"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(Uuid(as_uuid=True), ForeignKey("loan.id", ondelete="CASCADE"), nullable=False, index=True)
    installment_number = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    status = Column(Text, nullable=False, default=InstallmentStatus.UNPAID.value, index=True)
    paid_amount = Column(Float, nullable=False, default=0.0)
    paid_date = Column(Date, nullable=True)
    payment_mode = Column(Text, nullable=False, default=PaymentMode.NONE.value)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loan = relationship("Loan", back_populates="installments")
