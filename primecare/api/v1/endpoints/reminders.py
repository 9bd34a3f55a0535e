"""
Reminder audit and test-send endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Body
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import logging

from primecare.api.deps import get_transport
from primecare.core.database import get_db
from primecare.core.security import verify_cron_secret
from primecare.core.timeutils import isoformat_utc
from primecare.models.action_log import ActionType
from primecare.services.action_log import (
    MAX_PAGE_SIZE,
    get_reminder_audit_stats,
    get_reminder_log,
    list_action_logs,
    serialize_action_log,
)
from primecare.services.mail_transport import MailTransport
from primecare.services.reminder_service import ReminderService

logger = logging.getLogger(__name__)

router = APIRouter()


def _serialize_reminder(log) -> dict:
    data = serialize_action_log(log)
    machine = log.machine
    sale = machine.sale if machine else None
    data["machine"] = {
        "id": machine.id,
        "serialNumber": machine.serial_number,
        "modelName": machine.machine_model.name if machine.machine_model else None,
    } if machine else None
    data["sale"] = {
        "customerName": sale.customer_name,
        "customerEmail": sale.customer_email,
        "saleDate": isoformat_utc(sale.sale_date),
        "reminderOptOut": sale.reminder_opt_out,
    } if sale else None
    return data


@router.get("/audit")
def get_reminder_audit(db: Session = Depends(get_db)):
    """Reminder statistics and the most recent reminders"""
    try:
        stats = get_reminder_audit_stats(db)
        logs = list_action_logs(
            db,
            action_type=ActionType.REMINDER_SENT,
            limit=MAX_PAGE_SIZE,
            with_machine=True,
        )
    except Exception:
        db.rollback()
        logger.error("Error fetching reminder audit", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch reminder audit"})

    return {
        "success": True,
        "stats": stats,
        "reminders": [_serialize_reminder(log) for log in logs],
    }


@router.get("/audit/{log_id}")
def get_reminder_audit_entry(log_id: int, db: Session = Depends(get_db)):
    log = get_reminder_log(db, log_id)
    if not log:
        raise HTTPException(status_code=404, detail="Reminder not found")
    return {"success": True, "reminder": _serialize_reminder(log)}


@router.post("/test", dependencies=[Depends(verify_cron_secret)])
def send_test_reminder(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    transport: MailTransport = Depends(get_transport),
):
    """Send a machine's reminder to an arbitrary address without logging it"""
    machine_id = payload.get("machineId")
    email = (payload.get("email") or "").strip()

    if not machine_id or not email:
        raise HTTPException(status_code=400, detail="machineId and email are required")

    try:
        machine_id = int(machine_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid machineId")

    sent = ReminderService(db, transport=transport).send_test_reminder(machine_id, email)
    if not sent:
        raise HTTPException(status_code=400, detail="Failed to send test reminder")

    return {"success": True, "message": f"Test reminder sent to {email}"}
