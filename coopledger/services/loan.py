import logging
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from decimal import Decimal
from coopledger.models.loan import Loan, LoanStatus, LOAN_STATUS_TRANSITIONS
from coopledger.services.contribution import get_member_name
from coopledger.services.ledger import loan_outstanding_balance
from coopledger.core.config import settings

logger = logging.getLogger(__name__)


class LoanError(ValueError):
    """Exception for loan workflow errors."""
    pass


class MemberNotFoundError(LoanError):
    """Raised when a loan references a file number with no contribution records."""
    pass


class LoanNotFoundError(LoanError):
    pass


class InvalidLoanTransitionError(LoanError):
    pass


def loan_total_due(loan: Loan) -> Decimal:
    return loan.principal * (1 + loan.interest_rate / Decimal("100"))


def loan_to_dict(loan: Loan) -> dict:
    """Loan fields plus derived totals, ready for LoanResponse."""
    total_due = loan_total_due(loan)
    repaid = loan.repaid_amount or Decimal("0.00")
    progress = (repaid / total_due * 100) if total_due > 0 else Decimal("0")
    return {
        "id": loan.id,
        "member_name": loan.member_name,
        "file_number": loan.file_number,
        "principal": loan.principal,
        "interest_rate": loan.interest_rate,
        "duration_months": loan.duration_months,
        "start_date": loan.start_date,
        "status": loan.status,
        "repaid_amount": repaid,
        "total_due": total_due.quantize(Decimal("0.01")),
        "outstanding_balance": loan_outstanding_balance(loan.principal, loan.interest_rate, repaid).quantize(Decimal("0.01")),
        "repayment_progress": progress.quantize(Decimal("0.01")),
        "created_at": loan.created_at,
    }


def list_loans(db: Session) -> List[Loan]:
    return db.query(Loan).order_by(Loan.start_date.desc(), Loan.created_at.desc()).all()


def get_loan(db: Session, loan_id: str) -> Optional[Loan]:
    return db.query(Loan).filter(Loan.id == loan_id).first()


def create_loan(
    db: Session,
    file_number: str,
    principal: Decimal,
    interest_rate: Decimal = None,
    duration_months: int = None,
    start_date: date = None
) -> Loan:
    """
    Create a PENDING loan request.

    The borrower must already exist in the society directory, i.e. have at
    least one contribution record; the member name is taken from it.
    """
    file_number = file_number.strip()
    member_name = get_member_name(db, file_number)
    if not member_name:
        raise MemberNotFoundError(f"Staff file number {file_number} not found in society directory")

    if principal is None or principal <= 0:
        raise LoanError("Loan principal must be greater than zero")

    loan = Loan(
        member_name=member_name,
        file_number=file_number,
        principal=principal,
        interest_rate=interest_rate if interest_rate is not None else Decimal(str(settings.DEFAULT_INTEREST_RATE)),
        duration_months=duration_months or settings.DEFAULT_LOAN_DURATION_MONTHS,
        start_date=start_date or date.today(),
        status=LoanStatus.PENDING,
        repaid_amount=Decimal("0.00"),
    )
    db.add(loan)
    db.commit()
    db.refresh(loan)
    logger.info(f"Created loan request {loan.id} for file number {file_number}")
    return loan


def update_loan_status(db: Session, loan_id: str, new_status: LoanStatus) -> Loan:
    """Apply an admin decision: PENDING -> APPROVED | REJECTED, APPROVED -> COMPLETED."""
    loan = get_loan(db, loan_id)
    if not loan:
        raise LoanNotFoundError("Loan not found")

    new_status = LoanStatus(new_status)
    if new_status not in LOAN_STATUS_TRANSITIONS[loan.status]:
        raise InvalidLoanTransitionError(
            f"Cannot change loan status from {loan.status.value} to {new_status.value}"
        )

    old_status = loan.status
    loan.status = new_status
    db.commit()
    db.refresh(loan)
    logger.info(f"Loan {loan.id} status changed from {old_status.value} to {new_status.value}")
    return loan


def record_repayment(db: Session, loan_id: str, amount: Decimal) -> Loan:
    """Add to the cumulative repaid amount of an APPROVED loan."""
    loan = get_loan(db, loan_id)
    if not loan:
        raise LoanNotFoundError("Loan not found")

    if loan.status != LoanStatus.APPROVED:
        raise LoanError(f"Repayments can only be recorded on APPROVED loans (status is {loan.status.value})")

    if amount is None or amount <= 0:
        raise LoanError("Repayment amount must be greater than zero")

    loan.repaid_amount = (loan.repaid_amount or Decimal("0.00")) + amount
    db.commit()
    db.refresh(loan)
    logger.info(f"Recorded repayment of {amount} on loan {loan.id}")
    return loan
