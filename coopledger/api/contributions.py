from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List
from coopledger.db.base import get_db
from coopledger.core.dependencies import get_current_admin
from coopledger.core.audit import write_audit_log
from coopledger.schemas.contribution import (
    ContributionCreate,
    ContributionUpdate,
    ContributionResponse,
    BulkContributionCreate,
    BulkContributionResponse,
)
from coopledger.schemas.ledger import ReceiptResponse
from coopledger.services.contribution import (
    ContributionNotFoundError,
    DuplicateContributionError,
    list_contributions,
    list_contributions_for_aggregation,
    get_contribution,
    create_contribution,
    bulk_create_contributions,
    update_contribution,
    delete_contribution,
)
from coopledger.services.export import contributions_to_csv, export_filename
from coopledger.services.statement import build_receipt

router = APIRouter(prefix="/api/contributions", tags=["contributions"])


@router.get("", response_model=List[ContributionResponse])
def get_contributions(
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """All contributions, newest first."""
    return list_contributions(db)


@router.post("", response_model=ContributionResponse, status_code=status.HTTP_201_CREATED)
def post_contribution(
    contribution_data: ContributionCreate,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Manual ledger entry."""
    try:
        contribution = create_contribution(db, contribution_data)
    except DuplicateContributionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    write_audit_log(
        actor=current_admin,
        action="Contribution created",
        details=f"id={contribution.id} file_number={contribution.file_number} amount={contribution.amount}"
    )
    return contribution


@router.post("/bulk", response_model=BulkContributionResponse, status_code=status.HTTP_201_CREATED)
def post_bulk_contributions(
    bulk_data: BulkContributionCreate,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Commit previewed import records in one transaction."""
    try:
        created = bulk_create_contributions(db, bulk_data.records)
    except DuplicateContributionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    write_audit_log(
        actor=current_admin,
        action="Bulk import",
        details=f"records={len(created)}"
    )
    return {"created": len(created), "records": created}


@router.get("/export.csv")
def export_contributions(
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Download the whole ledger as CSV in stored order."""
    records = list_contributions_for_aggregation(db)
    if not records:
        raise HTTPException(status_code=404, detail="No data available to export.")

    return Response(
        content=contributions_to_csv(records),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'}
    )


@router.get("/{contribution_id}", response_model=ContributionResponse)
def get_contribution_by_id(
    contribution_id: str,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    contribution = get_contribution(db, contribution_id)
    if not contribution:
        raise HTTPException(status_code=404, detail="Contribution not found")
    return contribution


@router.put("/{contribution_id}", response_model=ContributionResponse)
def put_contribution(
    contribution_id: str,
    contribution_data: ContributionUpdate,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Full-field edit of a record."""
    try:
        contribution = update_contribution(db, contribution_id, contribution_data)
    except ContributionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    write_audit_log(
        actor=current_admin,
        action="Contribution updated",
        details=f"id={contribution.id} amount={contribution.amount}"
    )
    return contribution


@router.delete("/{contribution_id}")
def remove_contribution(
    contribution_id: str,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    try:
        delete_contribution(db, contribution_id)
    except ContributionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    write_audit_log(actor=current_admin, action="Contribution deleted", details=f"id={contribution_id}")
    return {"message": "Contribution deleted successfully"}


@router.get("/{contribution_id}/receipt", response_model=ReceiptResponse)
def get_receipt(
    contribution_id: str,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Running balance at this record plus a shareable receipt."""
    receipt = build_receipt(list_contributions_for_aggregation(db), contribution_id)
    if receipt is None:
        raise HTTPException(status_code=404, detail="Contribution not found")
    return receipt
