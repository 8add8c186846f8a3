from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import date
from decimal import Decimal
import enum


class TimeBucket(str, enum.Enum):
    """Time-series bucket granularity."""
    MONTH = "month"
    YEAR = "year"


class Diagnostic(BaseModel):
    """Warning about a record that was excluded from (or adjusted in) a computation."""
    record_id: Optional[str] = None
    field: str
    message: str


class MemberBalance(BaseModel):
    file_number: str
    name: str
    opening_balance: Decimal
    current_balance: Decimal
    last_amount: Decimal
    last_date: date
    record_count: int


class MemberBalancesResult(BaseModel):
    balances: Dict[str, MemberBalance] = Field(default_factory=dict)
    diagnostics: List[Diagnostic] = Field(default_factory=list)


class SocietyTotals(BaseModel):
    total_equity: Decimal
    member_count: int
    average_balance: Decimal
    outstanding_loan_exposure: Decimal
    projected_dividend: Decimal
    dividend_rate: Decimal
    total_disbursed: Decimal
    pending_loans: int
    projected_interest: Decimal
    diagnostics: List[Diagnostic] = Field(default_factory=list)


class TimeSeriesBucket(BaseModel):
    period: int = Field(..., description="Month number (1-12) or calendar year")
    label: str
    amount: Decimal
    record_count: int
    percentage_of_max: Optional[Decimal] = Field(None, description="Yearly buckets only")


class TimeSeriesResult(BaseModel):
    bucket: TimeBucket
    buckets: List[TimeSeriesBucket] = Field(default_factory=list)
    skipped: int = 0
    diagnostics: List[Diagnostic] = Field(default_factory=list)


class RunningBalance(BaseModel):
    record_id: str
    file_number: str
    member_name: str
    date: date
    amount: Decimal
    opening_balance: Decimal
    balance_before: Decimal
    balance_after: Decimal
    position: int = Field(..., description="1-based position of the record in the member's chronological history")
    override_applied: bool = Field(False, description="True when the record's own previous payment replaced the computed balance before")
    diagnostics: List[Diagnostic] = Field(default_factory=list)


class StatementLine(BaseModel):
    record_id: Optional[str]
    date: date
    category: str
    description: str
    amount: Decimal
    running_balance: Decimal


class MemberStatement(BaseModel):
    file_number: str
    member_name: str
    opening_balance: Decimal
    total_contributed: Decimal
    final_balance: Decimal
    lines: List[StatementLine] = Field(default_factory=list)
    diagnostics: List[Diagnostic] = Field(default_factory=list)


class MemberDirectoryResponse(BaseModel):
    members: List[MemberBalance] = Field(default_factory=list)
    diagnostics: List[Diagnostic] = Field(default_factory=list)


class ReceiptResponse(BaseModel):
    running_balance: RunningBalance
    receipt_text: str
    share_url: str
