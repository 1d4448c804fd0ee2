from sqlalchemy import Column, Integer, String, TIMESTAMP, Boolean, Text, JSON
from sqlalchemy.sql import func
from ..db_session import Base, utcnow

class AuditLogModel(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    timestamp = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)

    user_id = Column(String(100), nullable=True, index=True) # Nullable for anonymous callers
    action = Column(String(255), nullable=False, index=True) # e.g., CREATE_USER_SUCCESS, RECORD_USER_DECISION
    resource = Column(String(255), nullable=True, index=True) # e.g., UserProfile, Budget, BudgetTracking
    resource_id = Column(String(255), nullable=True, index=True)

    ip_address = Column(String(100), nullable=True)
    user_agent = Column(Text, nullable=True)

    success = Column(Boolean, nullable=False)
    failure_reason = Column(Text, nullable=True)

    details = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<AuditLogModel(id={self.id}, action='{self.action}', user='{self.user_id}', resource='{self.resource}/{self.resource_id}', success={self.success})>"
