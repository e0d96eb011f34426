# app/models/admin_log.py
from datetime import datetime
import uuid

from sqlalchemy import Column, String, ForeignKey, DateTime, CHAR, JSON
from app.core.database import Base


class AdminLog(Base):
    """Audit trail of administrative decisions (withdrawals, disputes)."""
    __tablename__ = "admin_logs"

    log_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    admin_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False, index=True)
    action = Column(String(100), nullable=False)
    details = Column(JSON)
    created_at = Column(DateTime, default=datetime.now)
