"""
Service reminder batch

Runs once a day. Each machine is handled independently: one failed send never
aborts the batch. The audit row is written only after the mail transport
returns, so a crash in between may cause a duplicate send on the next run but
never a silently missed reminder.
"""
from datetime import datetime
from typing import Callable, List, Optional, Tuple
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from primecare.core.config import settings
from primecare.core.security import build_schedule_url
from primecare.core.timeutils import utcnow, day_bounds_utc
from primecare.models.action_log import ActionType, ActionChannel
from primecare.models.machine import Machine
from primecare.models.sale import Sale
from primecare.models.service import ServiceRequest
from primecare.schemas.action_log import ReminderSentMetadata
from primecare.services.action_log import create_action_log, find_reminder_between
from primecare.services.mail_transport import MailTransport, get_mail_transport
from primecare.services.reminder_email import (
    ReminderEmailData,
    build_reminder_subject,
    generate_service_reminder_html,
)
from primecare.services.warranty_helper import WarrantyHelper, WarrantyStatus

logger = logging.getLogger(__name__)


def load_machines(db: Session):
    """Machine query with everything the warranty rules read eagerly loaded"""
    return db.query(Machine).options(
        joinedload(Machine.sale),
        joinedload(Machine.machine_model),
        selectinload(Machine.service_requests).joinedload(ServiceRequest.service_visit),
    )


class ReminderService:
    """Selects machines due for service and emails their customers"""

    def __init__(
        self,
        db: Session,
        transport: Optional[MailTransport] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.transport = transport or get_mail_transport()
        self.clock = clock

    def _machine_query(self):
        return load_machines(self.db)

    def get_machine(self, machine_id: int) -> Optional[Machine]:
        return self._machine_query().filter(Machine.id == machine_id).first()

    def get_candidate_machines(self) -> List[Machine]:
        """Sold machines with a customer email whose owner has not opted out"""
        return self._machine_query().join(Sale, Sale.machine_id == Machine.id).filter(
            Sale.customer_email.isnot(None),
            func.trim(Sale.customer_email) != "",
            Sale.reminder_opt_out == False,
        ).order_by(Machine.id).all()

    def process_reminders(self) -> int:
        """Send today's reminders. Returns the number sent; never raises."""
        try:
            machines = self.get_candidate_machines()
        except Exception:
            logger.error("Error loading machines for reminders", exc_info=True)
            self.db.rollback()
            return 0

        logger.info(f"Found {len(machines)} machines to check for reminders")

        sent_count = 0
        for machine in machines:
            try:
                if not self.is_eligible(machine):
                    continue
                if self.send_reminder(machine):
                    sent_count += 1
            except Exception:
                logger.error(f"Error processing reminder for {machine.serial_number}", exc_info=True)
                self.db.rollback()

        logger.info(f"Sent {sent_count} reminders")
        return sent_count

    def is_eligible(self, machine: Machine) -> bool:
        now = self.clock()

        if not WarrantyHelper.is_warranty_active(machine, now):
            logger.debug(f"Skipping {machine.serial_number}: warranty not active")
            return False

        if not WarrantyHelper.should_send_reminder(machine, now):
            logger.debug(f"Skipping {machine.serial_number}: not a reminder day")
            return False

        day_start, day_end = day_bounds_utc(now)
        if find_reminder_between(self.db, machine.id, day_start, day_end):
            logger.debug(f"Skipping {machine.serial_number}: reminder already sent today")
            return False

        return True

    def _render(self, machine: Machine, status: WarrantyStatus, customer_name: str) -> Tuple[str, str]:
        machine_name = machine.machine_model.name if machine.machine_model else machine.serial_number
        html = generate_service_reminder_html(ReminderEmailData(
            customer_name=customer_name,
            machine_name=machine_name,
            serial_number=machine.serial_number,
            days_until_service=status.days_until_service,
            health_score=status.health_score,
            total_savings=status.total_savings,
            schedule_url=build_schedule_url(machine.id, machine.serial_number),
            warranty_active=status.warranty_active,
            warranty_expiry_date=status.warranty_expiry_date,
        ))
        subject = build_reminder_subject(status.urgency, machine_name, status.days_until_service)
        return subject, html

    def send_reminder(self, machine: Machine) -> bool:
        """Email the customer and record REMINDER_SENT. False on any failure."""
        sale = machine.sale
        if not sale or not (sale.customer_email or "").strip():
            return False

        now = self.clock()
        status = WarrantyHelper.get_warranty_status(machine, now)
        if status.next_service_due is None:
            return False

        recipient = sale.customer_email.strip()
        try:
            subject, html = self._render(machine, status, sale.customer_name)
            result = self.transport.send_mail(settings.email_from, recipient, subject, html)
        except Exception:
            logger.error(f"Failed to send reminder for {machine.serial_number}", exc_info=True)
            return False

        metadata = ReminderSentMetadata(
            daysUntilService=status.days_until_service,
            healthScore=status.health_score,
            urgency=status.urgency.value,
            sentTo=recipient,
            warrantyActive=status.warranty_active,
            warrantyExpiryDate=status.warranty_expiry_date.isoformat() if status.warranty_expiry_date else None,
            messageId=(result or {}).get("message_id"),
        )
        try:
            create_action_log(
                self.db,
                machine_id=machine.id,
                action_type=ActionType.REMINDER_SENT,
                channel=ActionChannel.EMAIL,
                metadata=metadata.model_dump(),
                created_at=now,
            )
        except Exception:
            # Without the dedup row the next run will send again
            self.db.rollback()
            logger.error(
                f"Reminder for {machine.serial_number} was sent but could not be logged",
                exc_info=True,
            )
            return False

        logger.info(f"Sent reminder for {machine.serial_number} to {recipient}")
        return True

    def send_test_reminder(self, machine_id: int, test_email: str) -> bool:
        """Send the reminder a machine would get to another address. Writes no audit row."""
        machine = self.get_machine(machine_id)
        if not machine:
            logger.error(f"Machine {machine_id} not found for test reminder")
            return False

        status = WarrantyHelper.get_warranty_status(machine, self.clock())
        if status.next_service_due is None:
            return False

        customer_name = (machine.sale.customer_name if machine.sale else None) or "Test Customer"
        try:
            subject, html = self._render(machine, status, customer_name)
            self.transport.send_mail(settings.email_from, test_email, f"[TEST] {subject}", html)
        except Exception:
            logger.error(f"Failed to send test reminder for {machine.serial_number}", exc_info=True)
            return False

        logger.info(f"Sent test reminder for {machine.serial_number} to {test_email}")
        return True
