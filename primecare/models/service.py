"""
Service request and visit models
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Text, Float
from sqlalchemy.orm import relationship
import enum

from primecare.core.database import Base
from primecare.core.timeutils import utcnow


class ServiceStatus(str, enum.Enum):
    """Service request / visit status"""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    CLOSED = "CLOSED"


class ServiceRequest(Base):
    """Complaint ticket raised against a machine"""
    __tablename__ = "service_requests"

    id = Column(Integer, primary_key=True, index=True)
    machine_id = Column(Integer, ForeignKey("machines.id"), nullable=False, index=True)
    complaint = Column(Text, nullable=True)
    status = Column(Enum(ServiceStatus), default=ServiceStatus.PENDING, index=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, onupdate=utcnow)

    # Relationships
    machine = relationship("Machine", back_populates="service_requests")
    service_visit = relationship("ServiceVisit", back_populates="service_request", uselist=False)

    def __repr__(self):
        return f"<ServiceRequest {self.id} ({self.status})>"


class ServiceVisit(Base):
    """Scheduled or completed engineer visit for a service request"""
    __tablename__ = "service_visits"

    id = Column(Integer, primary_key=True, index=True)
    service_request_id = Column(
        Integer, ForeignKey("service_requests.id"), unique=True, nullable=False, index=True
    )
    service_visit_date = Column(DateTime, nullable=False)
    status = Column(Enum(ServiceStatus), default=ServiceStatus.PENDING, index=True)
    total_cost = Column(Float, nullable=True)

    engineer_name = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)

    # Relationships
    service_request = relationship("ServiceRequest", back_populates="service_visit")

    def __repr__(self):
        return f"<ServiceVisit {self.id} on {self.service_visit_date} ({self.status})>"
