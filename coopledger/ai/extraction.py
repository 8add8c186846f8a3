"""Document extraction service - turns uploaded contribution lists into ledger records."""
import base64
import io
import json
import logging
import re
import secrets
import string
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import PyPDF2
from PyPDF2.errors import PdfReadError
from openai import OpenAI
from pydantic import ValidationError

from coopledger.core.config import settings
from coopledger.core.ids import generate_record_id
from coopledger.models.contribution import ContributionCategory
from coopledger.schemas.ai import ExtractionResult
from coopledger.schemas.contribution import ContributionCreate
from coopledger.schemas.ledger import Diagnostic
from coopledger.services.ledger import to_decimal

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
IMAGE_MIME_TYPES = {"image/jpeg", "image/png", "image/webp"}
TEXT_MIME_TYPES = {"text/csv", "text/plain"}

_CAMEL_TO_SNAKE = {
    "memberName": "member_name",
    "fileNumber": "file_number",
    "previousPayment": "previous_payment",
}


class ExtractionError(Exception):
    """Exception for document extraction failures (AI service error, bad JSON)."""
    pass


class UnsupportedDocumentError(ExtractionError):
    """Raised when the uploaded content itself cannot be used (wrong type, unreadable or empty PDF)."""
    pass


def _get_client() -> OpenAI:
    return OpenAI(api_key=settings.OPENAI_API_KEY)


def build_extraction_prompt(today: date) -> str:
    return f"""You are an expert financial auditor for the {settings.SOCIETY_NAME}.
Extract contribution records from the provided source.

Format Rules:
1. memberName: Extract the full name accurately.
2. fileNumber: If not present, leave it empty.
3. amount: Extract the numeric value (Naira). Remove any commas or currency symbols.
4. date: Use the transaction date (YYYY-MM-DD) if found; otherwise use today: {today.isoformat()}.
5. category: Classify as "Monthly Contribution", "Direct Credit", or "Credited from Camp".
6. previousPayment: If the document shows an "Opening Balance" or "Previous Balance" column, extract it.
7. notes: Any remark on the row; for "Credited from Camp" give the camp detail.

Return a JSON object of the form {{"records": [{{"memberName": ..., "fileNumber": ..., "amount": ..., "date": ..., "category": ..., "previousPayment": ..., "notes": ...}}]}}."""


def extract_text_from_pdf(data: bytes) -> str:
    """Extract text from PDF bytes."""
    try:
        pdf_reader = PyPDF2.PdfReader(io.BytesIO(data))
        text_content = ""
        for page in pdf_reader.pages:
            text_content += (page.extract_text() or "") + "\n"
    except PdfReadError as e:
        raise UnsupportedDocumentError(f"Could not read PDF: {e}") from e
    return text_content


def generate_file_number_placeholder(member_name: str) -> str:
    """Placeholder like KT-STAFF-AB-X7Q2 for rows without a file number."""
    initials = "".join(part[0] for part in member_name.split() if part).upper() or "NA"
    suffix = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(4))
    return f"KT-STAFF-{initials}-{suffix}"


def _match_category(value: Any) -> Optional[ContributionCategory]:
    if not value:
        return ContributionCategory.MONTHLY_CONTRIBUTION
    wanted = str(value).strip().lower()
    for category in ContributionCategory:
        if category.value.lower() == wanted:
            return category
    return None


def _clean_amount(value: Any) -> Any:
    if isinstance(value, str):
        return re.sub(r"[^\d.\-]", "", value)
    return value


def normalize_extracted_items(items: List[Any], today: date = None) -> Tuple[List[ContributionCreate], List[Diagnostic]]:
    """
    Turn raw model output into validated records.

    Missing category defaults to Monthly Contribution, missing previous
    payment to 0, missing date to today and missing file number to a
    placeholder. Items that still fail validation are reported, not raised.
    """
    today = today or date.today()
    records: List[ContributionCreate] = []
    diagnostics: List[Diagnostic] = []

    for index, item in enumerate(items):
        row = f"row {index + 1}"
        if not isinstance(item, dict):
            diagnostics.append(Diagnostic(record_id=row, field="record", message="Not an object"))
            continue

        data: Dict[str, Any] = {_CAMEL_TO_SNAKE.get(k, k): v for k, v in item.items()}
        member_name = str(data.get("member_name") or "").strip()

        category = _match_category(data.get("category"))
        if category is None:
            diagnostics.append(Diagnostic(
                record_id=row,
                field="category",
                message=f"Unknown category {data.get('category')!r}; using Monthly Contribution",
            ))
            category = ContributionCategory.MONTHLY_CONTRIBUTION

        amount = to_decimal(_clean_amount(data.get("amount")))
        previous_payment = to_decimal(_clean_amount(data.get("previous_payment"))) or 0
        file_number = str(data.get("file_number") or "").strip()
        if not file_number and member_name:
            file_number = generate_file_number_placeholder(member_name)

        try:
            record = ContributionCreate(
                id=generate_record_id(),
                member_name=member_name,
                file_number=file_number,
                amount=amount,
                date=data.get("date") or today,
                category=category,
                notes=data.get("notes") or None,
                previous_payment=previous_payment,
            )
        except ValidationError as e:
            message = "; ".join(err["msg"] for err in e.errors())
            diagnostics.append(Diagnostic(record_id=row, field="record", message=message))
            continue
        records.append(record)

    return records, diagnostics


def _build_user_content(text_data: Optional[str], file_bytes: Optional[bytes], mime_type: Optional[str]) -> List[Dict]:
    content: List[Dict] = []
    if text_data:
        content.append({"type": "text", "text": f"DATA SOURCE (Text/CSV Content):\n{text_data}"})

    if file_bytes:
        if mime_type == PDF_MIME_TYPE:
            pdf_text = extract_text_from_pdf(file_bytes)
            if not pdf_text.strip():
                raise UnsupportedDocumentError("The PDF contains no extractable text. Upload a clearer scan or an image.")
            content.append({"type": "text", "text": f"DATA SOURCE (PDF Text):\n{pdf_text}"})
        elif mime_type in IMAGE_MIME_TYPES:
            encoded = base64.b64encode(file_bytes).decode("ascii")
            content.append({"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}})
        elif mime_type in TEXT_MIME_TYPES and not text_data:
            content.append({"type": "text", "text": f"DATA SOURCE (Text/CSV Content):\n{file_bytes.decode('utf-8', errors='replace')}"})
        elif not text_data:
            raise UnsupportedDocumentError(f"Unsupported file type: {mime_type}")
        else:
            content.append({"type": "text", "text": f"Note: The user uploaded a {mime_type} file. Its text content is included above."})

    return content


def parse_contribution_document(
    text_data: Optional[str] = None,
    file_bytes: Optional[bytes] = None,
    mime_type: Optional[str] = None,
    today: date = None
) -> ExtractionResult:
    """Extract contribution records from text, CSV, PDF or image content via the LLM."""
    if not (text_data or file_bytes):
        raise UnsupportedDocumentError("No content provided")

    today = today or date.today()
    user_content = _build_user_content(text_data, file_bytes, mime_type)

    client = _get_client()
    try:
        response = client.chat.completions.create(
            model=settings.EXTRACTION_MODEL,
            messages=[
                {"role": "system", "content": build_extraction_prompt(today)},
                {"role": "user", "content": user_content},
            ],
            response_format={"type": "json_object"},
            temperature=0,
        )
    except Exception as e:
        logger.error(f"Document extraction request failed: {e}")
        raise ExtractionError(f"AI service error: {e}") from e

    raw = response.choices[0].message.content or ""
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Document extraction returned invalid JSON: {raw[:200]!r}")
        raise ExtractionError("AI service returned invalid JSON") from e

    items = parsed.get("records", []) if isinstance(parsed, dict) else parsed
    if not isinstance(items, list):
        raise ExtractionError("AI service returned an unexpected structure")

    records, diagnostics = normalize_extracted_items(items, today=today)
    logger.info(f"Extracted {len(records)} record(s), {len(diagnostics)} diagnostic(s)")
    return ExtractionResult(records=records, diagnostics=diagnostics)
