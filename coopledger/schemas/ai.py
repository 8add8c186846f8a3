from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from coopledger.schemas.contribution import ContributionCreate
from coopledger.schemas.ledger import Diagnostic


class ChatRequest(BaseModel):
    query: str = Field(..., min_length=1)
    is_first_message: bool = False  # Flag to indicate if this is the first message


class ChatResponse(BaseModel):
    response: str
    tool_calls: Optional[List[Dict]] = None


class ExtractionResult(BaseModel):
    """Records parsed from an uploaded document, for review before bulk import."""
    records: List[ContributionCreate] = Field(default_factory=list)
    diagnostics: List[Diagnostic] = Field(default_factory=list)
