"""
Warranty health calculations

Pure functions over a hydrated Machine (sale, machine model and service
requests with their visits loaded by the caller). Nothing here touches the
database or raises on missing optional relations.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, List
import enum

from dateutil.relativedelta import relativedelta

from primecare.core.config import settings
from primecare.core.timeutils import utcnow, local_date
from primecare.models.machine import Machine
from primecare.models.service import ServiceVisit, ServiceStatus


class RiskLevel(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Urgency(str, enum.Enum):
    OVERDUE = "OVERDUE"
    URGENT = "URGENT"
    SOON = "SOON"
    UPCOMING = "UPCOMING"


@dataclass
class WarrantyStatus:
    """Derived warranty state of a machine. Never persisted."""
    health_score: int
    risk_level: RiskLevel
    warranty_active: bool
    warranty_expiry_date: Optional[datetime]
    next_service_due: Optional[datetime]
    total_savings: float
    days_until_service: Optional[int]
    urgency: Optional[Urgency]


class WarrantyHelper:
    """Warranty status, health score and service due-date rules"""

    HEALTH_AT_DUE_DATE = 70  # score on the day service falls due
    HEALTH_DEGRADATION_RATE = 2  # points lost per day overdue
    SERVICE_BONUS_POINTS = 2  # per completed service
    MAX_SERVICE_BONUS = 10

    @staticmethod
    def service_interval_days() -> int:
        return max(1, int(settings.SERVICE_INTERVAL_DAYS))

    @staticmethod
    def warranty_period_months(machine: Machine) -> int:
        """Warranty months of the machine's model; malformed or negative values mean no warranty"""
        model = machine.machine_model
        if model is None:
            return 0
        try:
            months = int(model.warranty_period_months or 0)
        except (TypeError, ValueError):
            return 0
        return max(0, months)

    @classmethod
    def get_warranty_expiry_date(cls, machine: Machine) -> Optional[datetime]:
        if not machine.sale:
            return None
        return machine.sale.sale_date + relativedelta(months=cls.warranty_period_months(machine))

    @classmethod
    def is_warranty_active(cls, machine: Machine, now: Optional[datetime] = None) -> bool:
        expiry = cls.get_warranty_expiry_date(machine)
        if expiry is None:
            return False
        return (now or utcnow()) < expiry

    @staticmethod
    def get_completed_visits(machine: Machine) -> List[ServiceVisit]:
        visits = []
        for request in machine.service_requests or []:
            visit = request.service_visit
            if visit is None or visit.service_visit_date is None:
                continue
            if visit.status == ServiceStatus.COMPLETED:
                visits.append(visit)
        return visits

    @classmethod
    def get_last_completed_service(cls, machine: Machine) -> Optional[ServiceVisit]:
        visits = cls.get_completed_visits(machine)
        if not visits:
            return None
        return max(visits, key=lambda v: v.service_visit_date)

    @classmethod
    def get_next_service_due(cls, machine: Machine) -> Optional[datetime]:
        """Fixed cadence measured from the later of the sale and the last completed visit"""
        if not machine.sale:
            return None

        base_date = machine.sale.sale_date
        last_service = cls.get_last_completed_service(machine)
        if last_service and last_service.service_visit_date > base_date:
            base_date = last_service.service_visit_date

        return base_date + timedelta(days=cls.service_interval_days())

    @classmethod
    def get_days_until_service(cls, machine: Machine, now: Optional[datetime] = None) -> Optional[int]:
        next_due = cls.get_next_service_due(machine)
        if next_due is None:
            return None
        return (local_date(next_due) - local_date(now)).days

    @classmethod
    def get_health_score(cls, machine: Machine, now: Optional[datetime] = None) -> int:
        """
        0-100 score: 100 = perfect, 0 = critical.

        Declines linearly from 100 to HEALTH_AT_DUE_DATE across the service
        interval, then loses HEALTH_DEGRADATION_RATE points per overdue day.
        Completed services add a small bonus.
        """
        if not machine.sale:
            return 100

        days_until = cls.get_days_until_service(machine, now)
        if days_until is None:
            return 100

        if days_until < 0:
            score = cls.HEALTH_AT_DUE_DATE - abs(days_until) * cls.HEALTH_DEGRADATION_RATE
        else:
            interval = cls.service_interval_days()
            days_since = max(0, interval - days_until)
            fraction = min(1.0, days_since / interval)
            score = 100 - fraction * (100 - cls.HEALTH_AT_DUE_DATE)

        completed = len(cls.get_completed_visits(machine))
        score += min(cls.MAX_SERVICE_BONUS, completed * cls.SERVICE_BONUS_POINTS)

        return int(max(0, min(100, round(score))))

    @staticmethod
    def get_risk_level(health_score: int) -> RiskLevel:
        if health_score >= 80:
            return RiskLevel.LOW
        if health_score >= 60:
            return RiskLevel.MEDIUM
        return RiskLevel.HIGH

    @staticmethod
    def get_urgency_level(days_until_service: int) -> Urgency:
        if days_until_service < 0:
            return Urgency.OVERDUE
        if days_until_service <= 3:
            return Urgency.URGENT
        if days_until_service <= 7:
            return Urgency.SOON
        return Urgency.UPCOMING

    @classmethod
    def get_total_savings(cls, machine: Machine) -> float:
        """Cost of completed visits that fell inside the warranty period"""
        expiry = cls.get_warranty_expiry_date(machine)
        if expiry is None:
            return 0.0

        sale_date = machine.sale.sale_date
        total = 0.0
        for visit in cls.get_completed_visits(machine):
            if sale_date <= visit.service_visit_date < expiry:
                total += float(visit.total_cost or 0)
        return total

    @classmethod
    def should_send_reminder(cls, machine: Machine, now: Optional[datetime] = None) -> bool:
        """True on the configured trigger days (e.g. 15, 7, 3, 0 and 3 days overdue)"""
        days_until = cls.get_days_until_service(machine, now)
        if days_until is None:
            return False
        return days_until in settings.REMINDER_TRIGGER_DAYS

    @classmethod
    def get_warranty_status(cls, machine: Machine, now: Optional[datetime] = None) -> WarrantyStatus:
        health_score = cls.get_health_score(machine, now)
        days_until = cls.get_days_until_service(machine, now)
        return WarrantyStatus(
            health_score=health_score,
            risk_level=cls.get_risk_level(health_score),
            warranty_active=cls.is_warranty_active(machine, now),
            warranty_expiry_date=cls.get_warranty_expiry_date(machine),
            next_service_due=cls.get_next_service_due(machine),
            total_savings=cls.get_total_savings(machine),
            days_until_service=days_until,
            urgency=cls.get_urgency_level(days_until) if days_until is not None else None,
        )

    @staticmethod
    def format_service_date(value: datetime) -> str:
        """e.g. "April 29, 2024" """
        return f"{value:%B} {value.day}, {value.year}"
