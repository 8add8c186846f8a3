from sqlalchemy import Column, String, Date, DateTime, Integer, Numeric, Enum as SQLEnum, Text, Index, text, func
from coopledger.db.base import Base
from coopledger.core.ids import generate_record_id
import enum


class ContributionCategory(str, enum.Enum):
    """Contribution category (closed set)."""
    MONTHLY_CONTRIBUTION = "Monthly Contribution"
    DIRECT_CREDIT = "Direct Credit"
    CREDITED_FROM_CAMP = "Credited from Camp"


class Contribution(Base):
    """One dated payment event for a member."""
    __tablename__ = "contribution"

    id = Column(String(36), primary_key=True, default=generate_record_id)
    member_name = Column(String(200), nullable=False)
    file_number = Column(String(50), nullable=False, index=True)  # Member identity / aggregation key
    amount = Column(Numeric(14, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
    category = Column(SQLEnum(ContributionCategory, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=ContributionCategory.MONTHLY_CONTRIBUTION, nullable=False)
    notes = Column(Text, nullable=True)  # Mandatory camp detail for "Credited from Camp"
    previous_payment = Column(Numeric(14, 2), nullable=True)  # Opening balance carried forward
    entry_sequence = Column(Integer, nullable=False, default=0, index=True)  # Entry order, tie-break for same-day records
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    __table_args__ = (
        Index("idx_contribution_member_date", "file_number", "date"),
    )
