from sqlalchemy import Column, String, DateTime, Text, text, func
from coopledger.db.base import Base
from coopledger.core.ids import generate_record_id


class SystemSettings(Base):
    """Persisted preferences (UI state, tunables)."""
    __tablename__ = "system_settings"

    id = Column(String(36), primary_key=True, default=generate_record_id)
    setting_key = Column(String(100), nullable=False, unique=True, index=True)
    setting_value = Column(Text, nullable=True)
    setting_type = Column(String(50), nullable=False)  # "preference", "general", etc.
    description = Column(Text, nullable=True)
    updated_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"), onupdate=func.now())
