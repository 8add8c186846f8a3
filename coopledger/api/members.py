from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
from coopledger.db.base import get_db
from coopledger.core.dependencies import get_current_admin
from coopledger.schemas.ledger import MemberDirectoryResponse, MemberStatement
from coopledger.services.contribution import list_contributions_for_aggregation
from coopledger.services.member import list_members
from coopledger.services.statement import build_statement

router = APIRouter(prefix="/api/members", tags=["members"])


@router.get("", response_model=MemberDirectoryResponse)
def get_members(
    search: Optional[str] = Query(None, description="Name or file number"),
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Member directory, largest balance first."""
    members, diagnostics = list_members(list_contributions_for_aggregation(db), search=search)
    return {"members": members, "diagnostics": diagnostics}


@router.get("/{file_number:path}/statement", response_model=MemberStatement)
def get_member_statement(
    file_number: str,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    statement = build_statement(list_contributions_for_aggregation(db), file_number)
    if statement is None:
        raise HTTPException(status_code=404, detail="Member not found")
    return statement
