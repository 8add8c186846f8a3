import logging
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional
from coopledger.models.contribution import Contribution
from coopledger.schemas.contribution import ContributionCreate
from coopledger.core.ids import generate_record_id

logger = logging.getLogger(__name__)


class ContributionNotFoundError(ValueError):
    """Raised when a contribution id does not exist."""
    pass


class DuplicateContributionError(ValueError):
    """Raised when a supplied contribution id is already taken."""
    pass


def _apply_fields(contribution: Contribution, data: ContributionCreate) -> None:
    contribution.member_name = data.member_name
    contribution.file_number = data.file_number
    contribution.amount = data.amount
    contribution.date = data.date
    contribution.category = data.category
    contribution.notes = (data.notes or "").strip() or None
    contribution.previous_payment = data.previous_payment


def list_contributions(db: Session) -> List[Contribution]:
    """All contributions, newest date first (insertion order within a day)."""
    return db.query(Contribution).order_by(
        Contribution.date.desc(),
        Contribution.entry_sequence.desc()
    ).all()


def list_contributions_for_aggregation(db: Session) -> List[Contribution]:
    """All contributions in entry order, the sequence the aggregator uses for same-day tie-breaks."""
    return db.query(Contribution).order_by(
        Contribution.entry_sequence.asc()
    ).all()


def get_contribution(db: Session, contribution_id: str) -> Optional[Contribution]:
    return db.query(Contribution).filter(Contribution.id == contribution_id).first()


def create_contribution(db: Session, data: ContributionCreate, commit: bool = True) -> Contribution:
    """Create a ledger entry (manual entry or one imported record)."""
    contribution_id = data.id or generate_record_id()
    if get_contribution(db, contribution_id):
        raise DuplicateContributionError(f"Contribution {contribution_id} already exists")

    next_sequence = (db.query(func.max(Contribution.entry_sequence)).scalar() or 0) + 1
    contribution = Contribution(id=contribution_id, entry_sequence=next_sequence)
    _apply_fields(contribution, data)
    db.add(contribution)

    if commit:
        db.commit()
        db.refresh(contribution)
        logger.info(f"Created contribution {contribution.id} for file number {contribution.file_number}")
    else:
        db.flush()
    return contribution


def bulk_create_contributions(db: Session, records: List[ContributionCreate]) -> List[Contribution]:
    """Create several records in one transaction; nothing is written if any record fails."""
    created = []
    try:
        for data in records:
            created.append(create_contribution(db, data, commit=False))
        db.commit()
    except Exception:
        db.rollback()
        raise

    for contribution in created:
        db.refresh(contribution)
    logger.info(f"Bulk import created {len(created)} contribution(s)")
    return created


def update_contribution(db: Session, contribution_id: str, data: ContributionCreate) -> Contribution:
    """Full-field edit in place."""
    contribution = get_contribution(db, contribution_id)
    if not contribution:
        raise ContributionNotFoundError("Contribution not found")

    _apply_fields(contribution, data)
    db.commit()
    db.refresh(contribution)
    logger.info(f"Updated contribution {contribution.id}")
    return contribution


def delete_contribution(db: Session, contribution_id: str) -> None:
    contribution = get_contribution(db, contribution_id)
    if not contribution:
        raise ContributionNotFoundError("Contribution not found")

    db.delete(contribution)
    db.commit()
    logger.info(f"Deleted contribution {contribution_id}")


def get_member_name(db: Session, file_number: str) -> Optional[str]:
    """Most recent member name recorded for a file number, or None for an unknown member."""
    contribution = db.query(Contribution).filter(
        Contribution.file_number == file_number
    ).order_by(
        Contribution.date.desc(),
        Contribution.entry_sequence.desc()
    ).first()
    return contribution.member_name if contribution else None
