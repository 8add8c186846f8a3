from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from coopledger.db.base import get_db
from coopledger.core.dependencies import get_current_admin
from coopledger.core.audit import write_audit_log
from coopledger.schemas.loan import (
    LoanCreate,
    LoanStatusUpdate,
    LoanRepaymentCreate,
    LoanResponse,
    LoanPortfolioResponse,
)
from coopledger.services.ledger import compute_society_totals
from coopledger.services.loan import (
    LoanError,
    MemberNotFoundError,
    LoanNotFoundError,
    list_loans,
    create_loan,
    update_loan_status,
    record_repayment,
    loan_to_dict,
)

router = APIRouter(prefix="/api/loans", tags=["loans"])


@router.get("", response_model=LoanPortfolioResponse)
def get_loans(
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """All loans with the disbursed total, pending count and projected interest."""
    loans = list_loans(db)
    totals = compute_society_totals([], loans)
    return {
        "loans": [loan_to_dict(loan) for loan in loans],
        "total_disbursed": totals.total_disbursed,
        "pending_count": totals.pending_loans,
        "projected_interest": totals.projected_interest,
    }


@router.post("", response_model=LoanResponse, status_code=status.HTTP_201_CREATED)
def post_loan(
    loan_data: LoanCreate,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Open a PENDING loan request for an existing member."""
    try:
        loan = create_loan(
            db,
            file_number=loan_data.file_number,
            principal=loan_data.principal,
            interest_rate=loan_data.interest_rate,
            duration_months=loan_data.duration_months,
        )
    except MemberNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LoanError as e:
        raise HTTPException(status_code=400, detail=str(e))

    write_audit_log(
        actor=current_admin,
        action="Loan requested",
        details=f"id={loan.id} file_number={loan.file_number} principal={loan.principal}"
    )
    return loan_to_dict(loan)


@router.put("/{loan_id}/status", response_model=LoanResponse)
def put_loan_status(
    loan_id: str,
    status_update: LoanStatusUpdate,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    try:
        loan = update_loan_status(db, loan_id, status_update.status)
    except LoanNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LoanError as e:
        raise HTTPException(status_code=400, detail=str(e))

    write_audit_log(
        actor=current_admin,
        action="Loan status changed",
        details=f"id={loan.id} status={loan.status.value}"
    )
    return loan_to_dict(loan)


@router.post("/{loan_id}/repayments", response_model=LoanResponse)
def post_repayment(
    loan_id: str,
    repayment: LoanRepaymentCreate,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    try:
        loan = record_repayment(db, loan_id, repayment.amount)
    except LoanNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LoanError as e:
        raise HTTPException(status_code=400, detail=str(e))

    write_audit_log(
        actor=current_admin,
        action="Loan repayment",
        details=f"id={loan.id} amount={repayment.amount}"
    )
    return loan_to_dict(loan)
