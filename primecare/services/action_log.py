"""
Action log writes and audit queries
"""
from datetime import datetime, timedelta
from typing import Optional, List

from sqlalchemy import func, distinct
from sqlalchemy.orm import Session, joinedload

from primecare.core.timeutils import utcnow, isoformat_utc
from primecare.models.action_log import ActionLog, ActionType, ActionChannel
from primecare.models.machine import Machine

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return DEFAULT_PAGE_SIZE
    return max(1, min(int(limit), MAX_PAGE_SIZE))


def create_action_log(
    db: Session,
    machine_id: int,
    action_type: ActionType,
    channel: ActionChannel,
    metadata: Optional[dict] = None,
    created_at: Optional[datetime] = None,
) -> ActionLog:
    """Append an audit row"""
    log = ActionLog(
        machine_id=machine_id,
        action_type=action_type,
        channel=channel,
        extra_data=metadata or {},
        created_at=created_at or utcnow(),
    )
    db.add(log)
    db.commit()
    db.refresh(log)
    return log


def list_action_logs(
    db: Session,
    machine_id: Optional[int] = None,
    action_type: Optional[ActionType] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: Optional[int] = None,
    with_machine: bool = False,
) -> List[ActionLog]:
    """Newest first, capped at MAX_PAGE_SIZE rows"""
    query = db.query(ActionLog)
    if with_machine:
        query = query.options(joinedload(ActionLog.machine).joinedload(Machine.sale))
    if machine_id is not None:
        query = query.filter(ActionLog.machine_id == machine_id)
    if action_type is not None:
        query = query.filter(ActionLog.action_type == action_type)
    if since is not None:
        query = query.filter(ActionLog.created_at >= since)
    if until is not None:
        query = query.filter(ActionLog.created_at < until)
    return query.order_by(ActionLog.created_at.desc(), ActionLog.id.desc()).limit(clamp_limit(limit)).all()


def find_reminder_between(db: Session, machine_id: int, start: datetime, end: datetime) -> Optional[ActionLog]:
    """REMINDER_SENT row for a machine with start <= created_at < end"""
    return db.query(ActionLog).filter(
        ActionLog.machine_id == machine_id,
        ActionLog.action_type == ActionType.REMINDER_SENT,
        ActionLog.created_at >= start,
        ActionLog.created_at < end,
    ).first()


def get_reminder_log(db: Session, log_id: int) -> Optional[ActionLog]:
    return db.query(ActionLog).options(
        joinedload(ActionLog.machine).joinedload(Machine.sale),
        joinedload(ActionLog.machine).joinedload(Machine.machine_model),
    ).filter(
        ActionLog.id == log_id,
        ActionLog.action_type == ActionType.REMINDER_SENT,
    ).first()


def get_reminder_audit_stats(db: Session, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    reminders = db.query(ActionLog).filter(ActionLog.action_type == ActionType.REMINDER_SENT)

    def count_since(delta: timedelta) -> int:
        return reminders.filter(ActionLog.created_at >= now - delta).count()

    unique_machines = db.query(func.count(distinct(ActionLog.machine_id))).filter(
        ActionLog.action_type == ActionType.REMINDER_SENT
    ).scalar()

    recipients = set()
    for (metadata,) in db.query(ActionLog.extra_data).filter(ActionLog.action_type == ActionType.REMINDER_SENT):
        sent_to = (metadata or {}).get("sentTo")
        if sent_to:
            recipients.add(sent_to)

    return {
        "totalReminders": reminders.count(),
        "last24Hours": count_since(timedelta(days=1)),
        "last7Days": count_since(timedelta(days=7)),
        "last30Days": count_since(timedelta(days=30)),
        "uniqueMachines": unique_machines or 0,
        "uniqueCustomers": len(recipients),
    }


def serialize_action_log(log: ActionLog) -> dict:
    return {
        "id": log.id,
        "machineId": log.machine_id,
        "actionType": log.action_type.value,
        "channel": log.channel.value,
        "metadata": log.extra_data or {},
        "createdAt": isoformat_utc(log.created_at),
    }
