"""
Sale model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from primecare.core.database import Base
from primecare.core.timeutils import utcnow


class Sale(Base):
    """First and only transfer of a machine to an end customer"""
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    machine_id = Column(Integer, ForeignKey("machines.id"), unique=True, nullable=False, index=True)
    sale_date = Column(DateTime, nullable=False, index=True)

    # Customer
    customer_name = Column(String(255), nullable=False)
    customer_contact_person_name = Column(String(255), nullable=True)
    customer_email = Column(String(255), nullable=True, index=True)
    customer_phone_number = Column(String(50), nullable=True)
    customer_address = Column(Text, nullable=True)
    distributor_invoice_number = Column(String(100), nullable=True)

    # Reminder preferences (customer controlled)
    whatsapp_number = Column(String(50), nullable=True)
    reminder_opt_out = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)

    # Relationships
    machine = relationship("Machine", back_populates="sale")

    def __repr__(self):
        return f"<Sale machine={self.machine_id} to {self.customer_name}>"
