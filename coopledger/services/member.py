from typing import Any, Iterable, List, Optional, Tuple
from coopledger.schemas.ledger import Diagnostic, MemberBalance
from coopledger.services.ledger import compute_member_balances


def list_members(
    records: Iterable[Any],
    search: Optional[str] = None
) -> Tuple[List[MemberBalance], List[Diagnostic]]:
    """
    Member directory derived from the ledger.

    Filters by a case-insensitive substring of name or file number and
    sorts by current balance, largest first.
    """
    result = compute_member_balances(records)
    members = list(result.balances.values())

    term = (search or "").strip().lower()
    if term:
        members = [
            m for m in members
            if term in m.name.lower() or term in m.file_number.lower()
        ]

    members.sort(key=lambda m: m.current_balance, reverse=True)
    return members, result.diagnostics


def find_member(records: Iterable[Any], file_number: str) -> Optional[MemberBalance]:
    """Look up one member's balance by file number."""
    return compute_member_balances(records).balances.get(file_number.strip())
