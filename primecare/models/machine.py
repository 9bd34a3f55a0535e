"""
Machine catalogue models
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship

from primecare.core.database import Base
from primecare.core.timeutils import utcnow


class MachineModel(Base):
    """Machine model - carries the warranty period for every unit built from it"""
    __tablename__ = "machine_models"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    # Warranty
    warranty_period_months = Column(Integer, nullable=False, default=12)

    # Status
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)

    # Relationships
    machines = relationship("Machine", back_populates="machine_model")

    def __repr__(self):
        return f"<MachineModel {self.name} ({self.warranty_period_months}m)>"


class Machine(Base):
    """A physical unit identified by its serial number"""
    __tablename__ = "machines"

    id = Column(Integer, primary_key=True, index=True)
    serial_number = Column(String(100), unique=True, index=True, nullable=False)
    machine_model_id = Column(Integer, ForeignKey("machine_models.id"), nullable=False, index=True)

    # Manufacture / quality testing
    manufacturing_date = Column(DateTime, nullable=True)
    test_result_data = Column(JSON, default=dict)
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)

    # Relationships
    machine_model = relationship("MachineModel", back_populates="machines")
    sale = relationship("Sale", back_populates="machine", uselist=False)
    service_requests = relationship("ServiceRequest", back_populates="machine")
    action_logs = relationship("ActionLog", back_populates="machine")

    def __repr__(self):
        return f"<Machine {self.serial_number}>"
