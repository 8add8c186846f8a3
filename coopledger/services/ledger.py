"""Balance aggregation over contribution and loan records.

Every financial figure shown by the dashboard, the member directory,
statements, receipts and the assistant is derived here. The functions are
pure: they never mutate their inputs and keep no state between calls.

Records may be ORM objects, pydantic models or plain mappings; mappings may
use either snake_case or the camelCase names of the client wire format.
Malformed records are excluded from sums and reported as diagnostics rather
than raised.
"""
import logging
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from coopledger.schemas.ledger import (
    Diagnostic,
    MemberBalance,
    MemberBalancesResult,
    MemberStatement,
    RunningBalance,
    SocietyTotals,
    StatementLine,
    TimeBucket,
    TimeSeriesBucket,
    TimeSeriesResult,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")
HUNDRED = Decimal("100")
DEFAULT_DIVIDEND_RATE = Decimal("0.05")

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_FIELD_ALIASES = {
    "file_number": ("file_number", "fileNumber"),
    "member_name": ("member_name", "memberName"),
    "previous_payment": ("previous_payment", "previousPayment"),
    "interest_rate": ("interest_rate", "interestRate"),
    "repaid_amount": ("repaid_amount", "repaidAmount"),
}


class _Entry(NamedTuple):
    """A contribution record after validation; `position` is its index in the input sequence."""
    position: int
    record_id: Optional[str]
    file_number: str
    member_name: str
    amount: Decimal
    date: date
    previous_payment: Decimal
    category: str
    notes: Optional[str]


def _get(record: Any, field: str) -> Any:
    for name in _FIELD_ALIASES.get(field, (field,)):
        if isinstance(record, Mapping):
            if name in record:
                return record[name]
        elif hasattr(record, name):
            return getattr(record, name)
    return None


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _money(value: Decimal) -> Decimal:
    # quantize needs room for every integer digit plus the two decimals
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a numeric value to Decimal. Returns None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    return result if result.is_finite() else None


def parse_record_date(value: Any) -> Optional[date]:
    """Parse a calendar date (date, datetime or ISO `YYYY-MM-DD...` string)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def loan_outstanding_balance(principal: Decimal, interest_rate: Decimal, repaid_amount: Decimal) -> Decimal:
    """Flat-rate outstanding balance: principal * (1 + rate/100) - repaid."""
    return principal * (1 + interest_rate / HUNDRED) - repaid_amount


def _normalize(records: List[Any], diagnostics: List[Diagnostic], require_member: bool = True) -> List[_Entry]:
    entries = []
    for position, record in enumerate(records):
        raw_id = _get(record, "id")
        record_id = str(raw_id) if raw_id is not None else None

        raw_file_number = _get(record, "file_number")
        file_number = str(raw_file_number).strip() if raw_file_number is not None else ""
        if require_member and not file_number:
            diagnostics.append(Diagnostic(record_id=record_id, field="file_number", message="Missing file number"))
            continue

        raw_amount = _get(record, "amount")
        amount = to_decimal(raw_amount)
        if amount is None:
            diagnostics.append(Diagnostic(record_id=record_id, field="amount", message=f"Non-numeric amount {raw_amount!r}"))
            continue

        raw_date = _get(record, "date")
        record_date = parse_record_date(raw_date)
        if record_date is None:
            diagnostics.append(Diagnostic(record_id=record_id, field="date", message=f"Unparseable date {raw_date!r}"))
            continue

        raw_previous = _get(record, "previous_payment")
        if raw_previous is None or raw_previous == "":
            previous_payment = ZERO
        else:
            previous_payment = to_decimal(raw_previous)
            if previous_payment is None:
                diagnostics.append(Diagnostic(
                    record_id=record_id,
                    field="previous_payment",
                    message=f"Non-numeric previous payment {raw_previous!r} treated as 0",
                ))
                previous_payment = ZERO

        name = _get(record, "member_name")
        notes = _get(record, "notes")
        entries.append(_Entry(
            position=position,
            record_id=record_id,
            file_number=file_number,
            member_name=str(name).strip() if name is not None else "",
            amount=amount,
            date=record_date,
            previous_payment=previous_payment,
            category=str(_enum_value(_get(record, "category")) or ""),
            notes=notes or None,
        ))

    excluded = len(records) - len(entries)
    if excluded:
        logger.warning(f"Excluded {excluded} malformed record(s) from aggregation")
    return entries


def _chronological_key(entry: _Entry):
    # Same-day records keep their input order
    return (entry.date, entry.position)


def _group_by_member(entries: List[_Entry]) -> Dict[str, List[_Entry]]:
    groups: Dict[str, List[_Entry]] = {}
    for entry in entries:
        groups.setdefault(entry.file_number, []).append(entry)
    for history in groups.values():
        history.sort(key=_chronological_key)
    return groups


def _summarize_member(file_number: str, history: List[_Entry]) -> MemberBalance:
    opening_balance = history[0].previous_payment
    running = opening_balance
    for entry in history:
        running += entry.amount
    last = history[-1]
    return MemberBalance(
        file_number=file_number,
        name=last.member_name,
        opening_balance=opening_balance,
        current_balance=running,
        last_amount=last.amount,
        last_date=last.date,
        record_count=len(history),
    )


def compute_member_balances(records: Iterable[Any]) -> MemberBalancesResult:
    """
    Per-member balances keyed by file number.

    The opening balance is the previous payment of the member's earliest
    record by date; the current balance adds every record's amount to it.
    Name, last amount and last date come from the chronologically last record.
    """
    diagnostics: List[Diagnostic] = []
    groups = _group_by_member(_normalize(list(records), diagnostics))
    balances = {
        file_number: _summarize_member(file_number, history)
        for file_number, history in groups.items()
    }
    return MemberBalancesResult(balances=balances, diagnostics=diagnostics)


def compute_society_totals(
    records: Iterable[Any],
    loans: Iterable[Any] = (),
    dividend_rate: Any = DEFAULT_DIVIDEND_RATE
) -> SocietyTotals:
    """Society-wide totals, recomputed from scratch on every call."""
    rate = to_decimal(dividend_rate)
    if rate is None:
        raise ValueError(f"Dividend rate must be numeric, got {dividend_rate!r}")

    member_result = compute_member_balances(records)
    diagnostics = list(member_result.diagnostics)
    balances = member_result.balances

    total_equity = sum((b.current_balance for b in balances.values()), ZERO)
    member_count = len(balances)
    average_balance = _money(total_equity / member_count) if member_count else ZERO

    exposure = ZERO
    total_disbursed = ZERO
    projected_interest = ZERO
    pending_loans = 0
    for loan in loans:
        loan_id = _get(loan, "id")
        principal = to_decimal(_get(loan, "principal"))
        interest_rate = to_decimal(_get(loan, "interest_rate"))
        raw_repaid = _get(loan, "repaid_amount")
        repaid = ZERO if raw_repaid is None else to_decimal(raw_repaid)
        if principal is None or interest_rate is None or repaid is None:
            diagnostics.append(Diagnostic(
                record_id=str(loan_id) if loan_id is not None else None,
                field="loan",
                message="Loan has non-numeric principal, interest rate or repaid amount",
            ))
            continue

        status = str(_enum_value(_get(loan, "status")) or "").upper()
        if status == "PENDING":
            pending_loans += 1
        projected_interest += principal * interest_rate / HUNDRED
        if status == "APPROVED":
            total_disbursed += principal
            exposure += loan_outstanding_balance(principal, interest_rate, repaid)

    return SocietyTotals(
        total_equity=total_equity,
        member_count=member_count,
        average_balance=average_balance,
        outstanding_loan_exposure=_money(exposure),
        projected_dividend=_money(total_equity * rate),
        dividend_rate=rate,
        total_disbursed=total_disbursed,
        pending_loans=pending_loans,
        projected_interest=_money(projected_interest),
        diagnostics=diagnostics,
    )


def compute_time_series(records: Iterable[Any], bucket: Any = TimeBucket.MONTH) -> TimeSeriesResult:
    """
    Inflow series: sum of amounts per month-of-year or per calendar year.

    Opening balances are stock, not flow, and are excluded. Month buckets are
    ordered Jan to Dec; year buckets newest first with `percentage_of_max`
    relative to the largest bucket. Only periods with records appear.
    """
    bucket = TimeBucket(bucket)
    records = list(records)
    diagnostics: List[Diagnostic] = []
    entries = _normalize(records, diagnostics, require_member=False)

    totals: Dict[int, List] = {}
    for entry in entries:
        period = entry.date.month if bucket == TimeBucket.MONTH else entry.date.year
        slot = totals.setdefault(period, [ZERO, 0])
        slot[0] += entry.amount
        slot[1] += 1

    if bucket == TimeBucket.MONTH:
        buckets = [
            TimeSeriesBucket(period=month, label=MONTH_LABELS[month - 1], amount=amount, record_count=count)
            for month, (amount, count) in sorted(totals.items())
        ]
    else:
        largest = max((amount for amount, _ in totals.values()), default=ZERO)
        buckets = []
        for year, (amount, count) in sorted(totals.items(), reverse=True):
            percentage = _money(amount / largest * HUNDRED) if largest > 0 else ZERO
            buckets.append(TimeSeriesBucket(
                period=year,
                label=str(year),
                amount=amount,
                record_count=count,
                percentage_of_max=percentage,
            ))

    return TimeSeriesResult(
        bucket=bucket,
        buckets=buckets,
        skipped=len(records) - len(entries),
        diagnostics=diagnostics,
    )


def compute_running_balance_for_transaction(
    records: Iterable[Any],
    target_record_id: str,
    apply_opening_balance_override: bool = True
) -> Optional[RunningBalance]:
    """
    Balance immediately before and after one record, for receipts and statements.

    Uses the same chronological order as `compute_member_balances`. When the
    target record carries its own non-zero previous payment, that explicit
    figure replaces the computed balance before (`override_applied`), unless
    `apply_opening_balance_override` is False.
    Returns None when the target is absent or malformed.
    """
    diagnostics: List[Diagnostic] = []
    entries = _normalize(list(records), diagnostics)
    target = next((e for e in entries if e.record_id == str(target_record_id)), None)
    if target is None:
        return None

    history = sorted((e for e in entries if e.file_number == target.file_number), key=_chronological_key)
    opening_balance = history[0].previous_payment
    balance_before = opening_balance
    index = 0
    for index, entry in enumerate(history):
        if entry.position == target.position:
            break
        balance_before += entry.amount

    override_applied = apply_opening_balance_override and index > 0 and target.previous_payment != 0
    if override_applied:
        balance_before = target.previous_payment

    return RunningBalance(
        record_id=target.record_id,
        file_number=target.file_number,
        member_name=target.member_name,
        date=target.date,
        amount=target.amount,
        opening_balance=opening_balance,
        balance_before=balance_before,
        balance_after=balance_before + target.amount,
        position=index + 1,
        override_applied=override_applied,
        diagnostics=diagnostics,
    )


def compute_member_statement(records: Iterable[Any], file_number: str) -> Optional[MemberStatement]:
    """Chronological statement lines with running balance for one member. None if the member has no records."""
    diagnostics: List[Diagnostic] = []
    entries = _normalize(list(records), diagnostics)
    history = _group_by_member(entries).get(str(file_number).strip())
    if not history:
        return None

    opening_balance = history[0].previous_payment
    running = opening_balance
    lines = []
    for entry in history:
        running += entry.amount
        lines.append(StatementLine(
            record_id=entry.record_id,
            date=entry.date,
            category=entry.category,
            description=f"{entry.category} - {entry.notes}" if entry.notes else entry.category,
            amount=entry.amount,
            running_balance=running,
        ))

    return MemberStatement(
        file_number=history[-1].file_number,
        member_name=history[-1].member_name,
        opening_balance=opening_balance,
        total_contributed=sum((e.amount for e in history), ZERO),
        final_balance=running,
        lines=lines,
        diagnostics=diagnostics,
    )
