from datetime import date
from decimal import Decimal
from urllib.parse import unquote

from coopledger.services.statement import (
    format_money,
    build_receipt,
    build_statement,
    whatsapp_share_url,
)


RECORDS = [
    {"id": "r1", "member_name": "Grace Okafor", "file_number": "KT/003", "amount": "1000", "date": "2024-01-10", "previous_payment": "12500", "category": "Monthly Contribution"},
    {"id": "r2", "member_name": "Grace Okafor", "file_number": "KT/003", "amount": "250.50", "date": "2024-02-10", "category": "Credited from Camp", "notes": "Batch C"},
]


def test_format_money():
    assert format_money(Decimal("12500")) == "₦12,500"
    assert format_money(Decimal("1250.5")) == "₦1,250.50"
    assert format_money(Decimal("-300")) == "-₦300"
    assert format_money(Decimal("0"), symbol="") == "0"


def test_receipt_text():
    receipt = build_receipt(RECORDS, "r2", generated_on=date(2024, 3, 1))
    text = receipt["receipt_text"]

    assert text.splitlines()[0] == "*NYSC KATSINA STATE STAFF MULTI-PURPOSE COOPERATIVE SOCIETY LIMITED*"
    assert "Name: Grace Okafor" in text
    assert "File No: KT/003" in text
    assert "Opening Bal: ₦12,500" in text
    assert "Balance Before: ₦13,500" in text
    assert "Recent Pmt: ₦250.50 (2024-02-10)" in text
    assert "*Current Total: ₦13,750.50*" in text
    assert text.endswith("Generated on 2024-03-01")
    assert unquote(receipt["share_url"][len("https://wa.me/?text="):]) == text


def test_receipt_unknown_record():
    assert build_receipt(RECORDS, "nope") is None


def test_whatsapp_share_url_encodes_everything():
    assert whatsapp_share_url("a b&c\n") == "https://wa.me/?text=a%20b%26c%0A"


def test_statement_descriptions():
    statement = build_statement(RECORDS, "KT/003")

    assert [line.description for line in statement.lines] == ["Monthly Contribution", "Credited from Camp - Batch C"]
    assert statement.final_balance == Decimal("13750.50")
    assert build_statement(RECORDS, "KT/999") is None
