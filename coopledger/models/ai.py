from sqlalchemy import Column, String, DateTime, Text, JSON, text
from coopledger.db.base import Base
from coopledger.core.ids import generate_record_id


class AIAuditLog(Base):
    """AI assistant audit log."""
    __tablename__ = "ai_audit_log"

    id = Column(String(36), primary_key=True, default=generate_record_id)
    query_text = Column(Text, nullable=False)
    tool_calls = Column(JSON, nullable=True)  # Array of tool calls made
    response = Column(Text, nullable=True)
    timestamp = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"), index=True)
