from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from coopledger.models.contribution import ContributionCategory


class ContributionCreate(BaseModel):
    """Schema for a manual ledger entry or an imported record."""
    id: Optional[str] = Field(None, max_length=36, description="Opaque record id; generated when omitted")
    member_name: str = Field(..., min_length=1, max_length=200, description="Staff member's full name")
    file_number: str = Field(..., min_length=1, max_length=50, description="Staff file number (member identity)")
    amount: Decimal = Field(..., description="Payment amount")
    date: date
    category: ContributionCategory = ContributionCategory.MONTHLY_CONTRIBUTION
    notes: Optional[str] = Field(None, description="Camp detail (mandatory for 'Credited from Camp') or admin notes")
    previous_payment: Optional[Decimal] = Field(None, ge=0, description="Opening balance carried forward")

    @model_validator(mode="after")
    def check_camp_notes(self):
        self.member_name = self.member_name.strip()
        self.file_number = self.file_number.strip()
        if not self.member_name or not self.file_number:
            raise ValueError("Member name and file number are required")
        if self.category == ContributionCategory.CREDITED_FROM_CAMP and not (self.notes or "").strip():
            raise ValueError("Camp detail is mandatory for 'Credited from Camp' records")
        return self


class ContributionUpdate(ContributionCreate):
    """Full-field edit; an id in the body is ignored in favour of the path id."""
    pass


class ContributionResponse(BaseModel):
    id: str
    member_name: str
    file_number: str
    amount: Decimal
    date: date
    category: ContributionCategory
    notes: Optional[str] = None
    previous_payment: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BulkContributionCreate(BaseModel):
    records: List[ContributionCreate] = Field(..., min_length=1)


class BulkContributionResponse(BaseModel):
    created: int
    records: List[ContributionResponse]
