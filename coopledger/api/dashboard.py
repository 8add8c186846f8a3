from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List
from coopledger.db.base import get_db
from coopledger.core.config import settings
from coopledger.core.dependencies import get_current_admin
from coopledger.schemas.contribution import ContributionResponse
from coopledger.schemas.ledger import SocietyTotals, TimeSeriesResult
from coopledger.services.contribution import list_contributions, list_contributions_for_aggregation
from coopledger.services.ledger import compute_society_totals, compute_time_series
from coopledger.services.loan import list_loans

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

RECENT_LIMIT = 10


@router.get("/summary", response_model=SocietyTotals)
def get_summary(
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Society totals: equity, members, average balance, loan exposure, projected dividend."""
    return compute_society_totals(
        list_contributions_for_aggregation(db),
        list_loans(db),
        dividend_rate=settings.DIVIDEND_YIELD_RATE,
    )


@router.get("/time-series", response_model=TimeSeriesResult)
def get_time_series(
    bucket: str = Query("month", description="month or year"),
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Contribution inflows per month of year or per calendar year."""
    try:
        return compute_time_series(list_contributions_for_aggregation(db), bucket)
    except ValueError:
        raise HTTPException(status_code=400, detail="bucket must be 'month' or 'year'")


@router.get("/recent", response_model=List[ContributionResponse])
def get_recent(
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """The last ten contributions by date."""
    return list_contributions(db)[:RECENT_LIMIT]
