from coopledger.db.base import Base

# Import all models so Alembic can detect them
from coopledger.models.contribution import Contribution, ContributionCategory
from coopledger.models.loan import Loan, LoanStatus
from coopledger.models.system import SystemSettings
from coopledger.models.ai import AIAuditLog

__all__ = [
    "Base",
    "Contribution",
    "ContributionCategory",
    "Loan",
    "LoanStatus",
    "SystemSettings",
    "AIAuditLog",
]
