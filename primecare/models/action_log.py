"""
Action log - append-only audit trail of reminder and customer actions
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, JSON, Index
from sqlalchemy.orm import relationship
import enum

from primecare.core.database import Base
from primecare.core.timeutils import utcnow


class ActionType(str, enum.Enum):
    """Audited action types"""
    REMINDER_SENT = "REMINDER_SENT"
    SERVICE_SCHEDULED = "SERVICE_SCHEDULED"
    WARRANTY_VIEWED = "WARRANTY_VIEWED"
    EMAIL_OPENED = "EMAIL_OPENED"
    LINK_CLICKED = "LINK_CLICKED"


class ActionChannel(str, enum.Enum):
    """Channel an action happened on"""
    EMAIL = "EMAIL"
    WHATSAPP = "WHATSAPP"
    WEB = "WEB"
    SMS = "SMS"
    SYSTEM = "SYSTEM"


class ActionLog(Base):
    """Audit record. Never updated or deleted."""
    __tablename__ = "action_logs"
    __table_args__ = (
        Index("ix_action_logs_machine_type_created", "machine_id", "action_type", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    machine_id = Column(Integer, ForeignKey("machines.id"), nullable=False, index=True)
    action_type = Column(Enum(ActionType), nullable=False, index=True)
    channel = Column(Enum(ActionChannel), nullable=False)

    # Stored in the "metadata" column (the attribute name is reserved by SQLAlchemy)
    extra_data = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    # Relationships
    machine = relationship("Machine", back_populates="action_logs")

    def __repr__(self):
        return f"<ActionLog {self.action_type} machine={self.machine_id}>"
