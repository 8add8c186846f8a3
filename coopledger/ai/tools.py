"""AI tool contracts - read-only ledger views, no direct SQL access for the LLM."""
from sqlalchemy.orm import Session
from typing import Dict, List
from coopledger.core.config import settings
from coopledger.models.contribution import Contribution
from coopledger.services.contribution import list_contributions, list_contributions_for_aggregation
from coopledger.services.ledger import compute_society_totals, compute_time_series
from coopledger.services.statement import build_statement
from coopledger.services.loan import list_loans, loan_to_dict
from coopledger.services.member import list_members


def _contribution_to_dict(c: Contribution) -> Dict:
    return {
        "id": c.id,
        "member_name": c.member_name,
        "file_number": c.file_number,
        "amount": float(c.amount),
        "date": c.date.isoformat(),
        "category": c.category.value,
        "notes": c.notes or "",
    }


def get_society_summary(db: Session) -> Dict:
    """Society-wide totals: equity, member count, average balance, loan exposure, projected dividend."""
    totals = compute_society_totals(
        list_contributions_for_aggregation(db),
        list_loans(db),
        dividend_rate=settings.DIVIDEND_YIELD_RATE,
    )
    return {
        "total_equity": float(totals.total_equity),
        "member_count": totals.member_count,
        "average_balance": float(totals.average_balance),
        "outstanding_loan_exposure": float(totals.outstanding_loan_exposure),
        "projected_dividend": float(totals.projected_dividend),
        "dividend_rate_percent": float(totals.dividend_rate * 100),
        "total_disbursed": float(totals.total_disbursed),
        "pending_loans": totals.pending_loans,
        "warnings": [d.message for d in totals.diagnostics],
    }


def find_members(db: Session, search_term: str = None) -> List[Dict]:
    """Members matching a name or file number, with balances."""
    members, _ = list_members(list_contributions_for_aggregation(db), search=search_term)
    return [
        {
            "file_number": m.file_number,
            "name": m.name,
            "opening_balance": float(m.opening_balance),
            "current_balance": float(m.current_balance),
            "last_amount": float(m.last_amount),
            "last_date": m.last_date.isoformat(),
            "records": m.record_count,
        }
        for m in members[:50]
    ]


def get_member_statement(db: Session, file_number: str) -> Dict:
    """One member's chronological statement with running balance."""
    statement = build_statement(list_contributions_for_aggregation(db), file_number)
    if statement is None:
        return {"error": f"No records for file number {file_number}"}
    return {
        "file_number": statement.file_number,
        "member_name": statement.member_name,
        "opening_balance": float(statement.opening_balance),
        "total_contributed": float(statement.total_contributed),
        "final_balance": float(statement.final_balance),
        "lines": [
            {
                "date": line.date.isoformat(),
                "description": line.description,
                "amount": float(line.amount),
                "running_balance": float(line.running_balance),
            }
            for line in statement.lines
        ],
    }


def get_inflow_series(db: Session, bucket: str = "month") -> Dict:
    """Contribution inflows by month of year or by calendar year."""
    series = compute_time_series(list_contributions_for_aggregation(db), bucket)
    return {
        "bucket": series.bucket.value,
        "buckets": [
            {
                "label": b.label,
                "amount": float(b.amount),
                "records": b.record_count,
                **({"percentage_of_max": float(b.percentage_of_max)} if b.percentage_of_max is not None else {}),
            }
            for b in series.buckets
        ],
        "skipped_records": series.skipped,
    }


def get_loan_portfolio(db: Session) -> Dict:
    """All loans with status, totals due and outstanding balances."""
    loans = [loan_to_dict(loan) for loan in list_loans(db)]
    return {
        "loans": [
            {
                "loan_id": loan["id"],
                "member_name": loan["member_name"],
                "file_number": loan["file_number"],
                "principal": float(loan["principal"]),
                "interest_rate": float(loan["interest_rate"]),
                "duration_months": loan["duration_months"],
                "status": loan["status"].value,
                "repaid_amount": float(loan["repaid_amount"]),
                "outstanding_balance": float(loan["outstanding_balance"]),
            }
            for loan in loans
        ],
        "count": len(loans),
    }


def get_recent_contributions(db: Session, limit: int = 20) -> List[Dict]:
    """Most recent contributions by date."""
    limit = max(1, min(int(limit or 20), 100))
    return [_contribution_to_dict(c) for c in list_contributions(db)[:limit]]
