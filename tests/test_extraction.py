import json
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from coopledger.ai import extraction
from coopledger.ai.extraction import (
    ExtractionError,
    UnsupportedDocumentError,
    generate_file_number_placeholder,
    normalize_extracted_items,
    parse_contribution_document,
)
from coopledger.models.contribution import ContributionCategory

TODAY = date(2025, 3, 9)


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(monkeypatch, content=None, error=None):
    completions = FakeCompletions(content, error)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(extraction, "_get_client", lambda: client)
    return completions


def test_placeholder_file_number():
    placeholder = generate_file_number_placeholder("aisha ayo bello")

    assert placeholder.startswith("KT-STAFF-AAB-")
    assert len(placeholder.rsplit("-", 1)[1]) == 4


def test_normalize_defaults_and_diagnostics():
    items = [
        {"memberName": "Aisha Bello", "fileNumber": "KT/001", "amount": "₦5,000", "date": "2025-01-25"},
        {"memberName": "Ibrahim Musa", "amount": 2500, "category": "Bonus"},
        {"memberName": "Grace Okafor", "fileNumber": "KT/003", "amount": "n/a"},
        {"memberName": "Camp Person", "fileNumber": "KT/004", "amount": 100, "category": "credited from camp"},
        "garbage",
    ]

    records, diagnostics = normalize_extracted_items(items, today=TODAY)

    assert [r.member_name for r in records] == ["Aisha Bello", "Ibrahim Musa"]
    first, second = records
    assert first.amount == Decimal("5000")
    assert first.category == ContributionCategory.MONTHLY_CONTRIBUTION
    assert first.previous_payment == Decimal("0")
    assert len(first.id) == 9
    assert second.file_number.startswith("KT-STAFF-IM-")
    assert second.date == TODAY

    rows = [d.record_id for d in diagnostics]
    assert rows == ["row 2", "row 3", "row 4", "row 5"]


def test_parse_text_document(monkeypatch):
    payload = {"records": [{"memberName": "Aisha Bello", "fileNumber": "KT/001", "amount": 5000, "date": "2025-01-25", "previousPayment": "12,000"}]}
    completions = fake_client(monkeypatch, content=json.dumps(payload))

    result = parse_contribution_document(text_data="Aisha Bello,KT/001,5000", today=TODAY)

    assert len(result.records) == 1
    assert result.records[0].previous_payment == Decimal("12000")
    call = completions.calls[0]
    assert call["response_format"] == {"type": "json_object"}
    assert "2025-03-09" in call["messages"][0]["content"]
    assert call["messages"][1]["content"][0]["text"].endswith("Aisha Bello,KT/001,5000")


def test_parse_image_is_sent_inline(monkeypatch):
    completions = fake_client(monkeypatch, content='{"records": []}')

    parse_contribution_document(file_bytes=b"\x89PNG", mime_type="image/png", today=TODAY)

    part = completions.calls[0]["messages"][1]["content"][0]
    assert part["type"] == "image_url"
    assert part["image_url"]["url"].startswith("data:image/png;base64,")


def test_parse_errors(monkeypatch):
    with pytest.raises(UnsupportedDocumentError):
        parse_contribution_document()

    fake_client(monkeypatch, content="not json")
    with pytest.raises(ExtractionError) as exc_info:
        parse_contribution_document(text_data="x")
    assert not isinstance(exc_info.value, UnsupportedDocumentError)

    fake_client(monkeypatch, error=RuntimeError("boom"))
    with pytest.raises(ExtractionError) as exc_info:
        parse_contribution_document(text_data="x")
    assert not isinstance(exc_info.value, UnsupportedDocumentError)

    with pytest.raises(UnsupportedDocumentError):
        parse_contribution_document(file_bytes=b"data", mime_type="application/zip")


def test_unreadable_pdf():
    with pytest.raises(UnsupportedDocumentError):
        parse_contribution_document(file_bytes=b"not a pdf", mime_type="application/pdf")


def test_extract_endpoint(client, auth_headers, monkeypatch):
    payload = {"records": [{"memberName": "Aisha Bello", "fileNumber": "KT/001", "amount": 5000, "date": "2025-01-25"}]}
    fake_client(monkeypatch, content=json.dumps(payload))

    response = client.post(
        "/api/ai/extract",
        files={"file": ("list.csv", b"Aisha Bello,KT/001,5000", "text/csv")},
        headers=auth_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["records"][0]["file_number"] == "KT/001"

    # The preview can be committed as-is
    committed = client.post("/api/contributions/bulk", json={"records": body["records"]}, headers=auth_headers)
    assert committed.status_code == 201


def test_extract_endpoint_maps_failures(client, auth_headers, monkeypatch):
    fake_client(monkeypatch, error=RuntimeError("quota exceeded"))

    response = client.post("/api/ai/extract", data={"text": "Aisha,5000"}, headers=auth_headers)
    assert response.status_code == 502

    assert client.post("/api/ai/extract", data={}, headers=auth_headers).status_code == 400

    zipped = client.post(
        "/api/ai/extract",
        files={"file": ("a.zip", b"PK\x03\x04", "application/zip")},
        headers=auth_headers
    )
    assert zipped.status_code == 400

    broken_pdf = client.post(
        "/api/ai/extract",
        files={"file": ("b.pdf", b"not a pdf", "application/pdf")},
        headers=auth_headers
    )
    assert broken_pdf.status_code == 400


def test_extract_endpoint_runs_parsing_off_the_event_loop(client, auth_headers, monkeypatch):
    from fastapi.concurrency import run_in_threadpool
    from coopledger.api import ai as ai_api

    offloaded = []

    async def recording_threadpool(func, *args, **kwargs):
        offloaded.append(func)
        return await run_in_threadpool(func, *args, **kwargs)

    monkeypatch.setattr(ai_api, "run_in_threadpool", recording_threadpool)
    payload = {"records": [{"memberName": "Aisha Bello", "fileNumber": "KT/001", "amount": 5000, "date": "2025-01-25"}]}
    fake_client(monkeypatch, content=json.dumps(payload))

    response = client.post("/api/ai/extract", data={"text": "Aisha Bello,KT/001,5000"}, headers=auth_headers)

    assert response.status_code == 200
    assert offloaded == [parse_contribution_document]
