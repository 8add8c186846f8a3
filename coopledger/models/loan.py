from sqlalchemy import Column, String, Date, DateTime, Integer, Numeric, Enum as SQLEnum, text
from coopledger.db.base import Base
from coopledger.core.ids import generate_record_id
from decimal import Decimal
import enum


class LoanStatus(str, enum.Enum):
    """Loan status."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"


# Allowed status transitions: PENDING -> APPROVED | REJECTED, APPROVED -> COMPLETED
LOAN_STATUS_TRANSITIONS = {
    LoanStatus.PENDING: {LoanStatus.APPROVED, LoanStatus.REJECTED},
    LoanStatus.APPROVED: {LoanStatus.COMPLETED},
    LoanStatus.REJECTED: set(),
    LoanStatus.COMPLETED: set(),
}


class Loan(Base):
    """Member loan with a single flat interest charge."""
    __tablename__ = "loan"

    id = Column(String(36), primary_key=True, default=generate_record_id)
    member_name = Column(String(200), nullable=False)
    file_number = Column(String(50), nullable=False, index=True)
    principal = Column(Numeric(14, 2), nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False)  # Flat percent, e.g. 5 for 5%
    duration_months = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    status = Column(SQLEnum(LoanStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=LoanStatus.PENDING, nullable=False)
    repaid_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
