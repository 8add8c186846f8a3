from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from coopledger.models.loan import LoanStatus


class LoanCreate(BaseModel):
    """Schema for creating a loan request."""
    file_number: str = Field(..., min_length=1, description="Borrower's staff file number")
    principal: Decimal = Field(..., gt=0, description="Loan principal")
    interest_rate: Optional[Decimal] = Field(None, ge=0, le=100, description="Flat interest percentage; defaults to the configured rate")
    duration_months: Optional[int] = Field(None, ge=1, description="Duration in months; defaults to the configured duration")


class LoanStatusUpdate(BaseModel):
    status: LoanStatus


class LoanRepaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)


class LoanResponse(BaseModel):
    id: str
    member_name: str
    file_number: str
    principal: Decimal
    interest_rate: Decimal
    duration_months: int
    start_date: date
    status: LoanStatus
    repaid_amount: Decimal
    total_due: Decimal
    outstanding_balance: Decimal
    repayment_progress: Decimal = Field(..., description="Percent of total due already repaid")
    created_at: Optional[datetime] = None


class LoanPortfolioResponse(BaseModel):
    """Loan list plus the loan-panel statistics."""
    loans: List[LoanResponse]
    total_disbursed: Decimal
    pending_count: int
    projected_interest: Decimal
