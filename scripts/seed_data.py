"""
Seed demo data: members' contribution history, a few loans and default preferences.
Usage: python scripts/seed_data.py
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from coopledger.db.base import SessionLocal
from coopledger.models.contribution import Contribution, ContributionCategory
from coopledger.models.loan import LoanStatus
from coopledger.models.system import SystemSettings
from coopledger.schemas.contribution import ContributionCreate
from coopledger.services.contribution import create_contribution
from coopledger.services.loan import create_loan, update_loan_status
from decimal import Decimal
from datetime import date


MEMBERS = [
    {"member_name": "Aisha Bello", "file_number": "NYSC/KT/0142", "opening": Decimal("45000.00")},
    {"member_name": "Ibrahim Musa", "file_number": "NYSC/KT/0207", "opening": Decimal("0.00")},
    {"member_name": "Grace Okafor", "file_number": "NYSC/KT/0311", "opening": Decimal("12500.00")},
]

MONTHS = [date(2025, month, 25) for month in range(1, 7)]


def seed_contributions(db):
    """Seed six months of contributions per member."""
    print("Seeding contributions...")
    if db.query(Contribution).first():
        print("Contributions already present, skipping")
        return

    for member in MEMBERS:
        for index, paid_on in enumerate(MONTHS):
            create_contribution(db, ContributionCreate(
                member_name=member["member_name"],
                file_number=member["file_number"],
                amount=Decimal("5000.00"),
                date=paid_on,
                category=ContributionCategory.MONTHLY_CONTRIBUTION,
                previous_payment=member["opening"] if index == 0 else None,
            ))

    create_contribution(db, ContributionCreate(
        member_name="Ibrahim Musa",
        file_number="NYSC/KT/0207",
        amount=Decimal("20000.00"),
        date=date(2025, 4, 10),
        category=ContributionCategory.CREDITED_FROM_CAMP,
        notes="Batch A orientation camp, Katsina",
    ))
    print("Contributions seeded")


def seed_loans(db):
    """Seed one approved and one pending loan."""
    print("Seeding loans...")
    approved = create_loan(db, "NYSC/KT/0142", Decimal("100000.00"), start_date=date(2025, 5, 1))
    update_loan_status(db, approved.id, LoanStatus.APPROVED)
    create_loan(db, "NYSC/KT/0311", Decimal("50000.00"), interest_rate=Decimal("7.5"), duration_months=12)
    print("Loans seeded")


def seed_preferences(db):
    """Seed default UI preferences."""
    print("Seeding preferences...")
    defaults = {"active_tab": "dashboard", "time_series_bucket": "month"}
    for key, value in defaults.items():
        existing = db.query(SystemSettings).filter(SystemSettings.setting_key == key).first()
        if not existing:
            db.add(SystemSettings(setting_key=key, setting_value=value, setting_type="preference"))
    db.commit()
    print("Preferences seeded")


if __name__ == "__main__":
    db = SessionLocal()
    try:
        seed_contributions(db)
        seed_loans(db)
        seed_preferences(db)
        print("\nSeed data complete!")
    except Exception as e:
        db.rollback()
        print(f"Error seeding data: {e}")
        raise
    finally:
        db.close()
