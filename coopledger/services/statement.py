"""Receipts and statements for sharing with members."""
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional
from urllib.parse import quote
from coopledger.core.config import settings
from coopledger.schemas.ledger import MemberStatement, RunningBalance
from coopledger.services.ledger import compute_member_statement, compute_running_balance_for_transaction

WHATSAPP_SHARE_URL = "https://wa.me/?text="


def format_money(amount: Decimal, symbol: str = None) -> str:
    """Currency sign, thousands separators, and decimals only when non-zero (e.g. ₦12,500 or ₦1,250.50)."""
    symbol = settings.CURRENCY_SYMBOL if symbol is None else symbol
    amount = Decimal(amount)
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    if amount == amount.to_integral_value():
        body = f"{int(amount):,}"
    else:
        body = f"{amount.quantize(Decimal('0.01')):,}"
    return f"{sign}{symbol}{body}"


def build_receipt_text(
    running: RunningBalance,
    generated_on: date = None,
    society_name: str = None
) -> str:
    """Plain-text contribution receipt (WhatsApp markdown)."""
    generated_on = generated_on or date.today()
    society_name = society_name or settings.SOCIETY_NAME
    lines = [
        f"*{society_name}*",
        "*OFFICIAL CONTRIBUTION STATEMENT*",
        "----------------------------",
        f"Name: {running.member_name}",
        f"File No: {running.file_number}",
        f"Opening Bal: {format_money(running.opening_balance)}",
        f"Balance Before: {format_money(running.balance_before)}",
        f"Recent Pmt: {format_money(running.amount)} ({running.date.isoformat()})",
        f"*Current Total: {format_money(running.balance_after)}*",
        "----------------------------",
        f"Generated on {generated_on.isoformat()}",
    ]
    return "\n".join(lines)


def whatsapp_share_url(text: str) -> str:
    return WHATSAPP_SHARE_URL + quote(text, safe="")


def build_receipt(records: Iterable[Any], record_id: str, generated_on: date = None) -> Optional[dict]:
    """Running balance for one record plus its shareable receipt; None when the record is unknown."""
    running = compute_running_balance_for_transaction(records, record_id)
    if running is None:
        return None

    text = build_receipt_text(running, generated_on=generated_on)
    return {
        "running_balance": running,
        "receipt_text": text,
        "share_url": whatsapp_share_url(text),
    }


def build_statement(records: Iterable[Any], file_number: str) -> Optional[MemberStatement]:
    """Chronological statement for one member; None when the file number has no records."""
    return compute_member_statement(records, file_number.strip())
