"""
Machine warranty endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.orm import Session

from primecare.core.database import get_db
from primecare.core.timeutils import isoformat_utc
from primecare.models.machine import Machine
from primecare.services.reminder_service import load_machines
from primecare.services.warranty_helper import WarrantyHelper

router = APIRouter()


def _get_machine_or_404(db: Session, serial_number: str) -> Machine:
    machine = load_machines(db).filter(Machine.serial_number == serial_number).first()
    if not machine:
        raise HTTPException(status_code=404, detail="Machine not found")
    return machine


@router.get("/{serial_number}/health")
def get_machine_health(
    serial_number: str,
    db: Session = Depends(get_db)
):
    """Warranty status, health score and next service date"""
    machine = _get_machine_or_404(db, serial_number)
    status = WarrantyHelper.get_warranty_status(machine)
    last_service = WarrantyHelper.get_last_completed_service(machine)

    return {
        "machineId": machine.id,
        "serialNumber": machine.serial_number,
        "modelName": machine.machine_model.name if machine.machine_model else None,
        "sold": machine.sale is not None,
        "healthScore": status.health_score,
        "riskLevel": status.risk_level.value,
        "warrantyActive": status.warranty_active,
        "warrantyExpiryDate": isoformat_utc(status.warranty_expiry_date),
        "nextServiceDue": isoformat_utc(status.next_service_due),
        "daysUntilService": status.days_until_service,
        "urgency": status.urgency.value if status.urgency else None,
        "totalSavings": status.total_savings,
        "lastServiceDate": isoformat_utc(last_service.service_visit_date) if last_service else None,
    }


@router.get("/{serial_number}/service-history")
def get_service_history(
    serial_number: str,
    db: Session = Depends(get_db)
):
    """Service requests with their visits, newest first"""
    machine = _get_machine_or_404(db, serial_number)
    requests = sorted(machine.service_requests, key=lambda r: (r.created_at, r.id), reverse=True)

    history = []
    for request in requests:
        visit = request.service_visit
        history.append({
            "id": request.id,
            "complaint": request.complaint,
            "status": request.status.value if request.status else None,
            "createdAt": isoformat_utc(request.created_at),
            "visit": {
                "id": visit.id,
                "serviceVisitDate": isoformat_utc(visit.service_visit_date),
                "status": visit.status.value if visit.status else None,
                "totalCost": visit.total_cost,
                "engineerName": visit.engineer_name,
                "notes": visit.notes,
            } if visit else None,
        })

    return {
        "serialNumber": machine.serial_number,
        "serviceRequests": history,
        "count": len(history),
    }


@router.patch("/{serial_number}/reminder-preferences")
def update_reminder_preferences(
    serial_number: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db)
):
    """Customer opt-out and WhatsApp number for service reminders"""
    machine = _get_machine_or_404(db, serial_number)
    sale = machine.sale
    if not sale:
        raise HTTPException(status_code=400, detail="Machine has not been sold")

    if "reminderOptOut" in payload:
        opt_out = payload["reminderOptOut"]
        if not isinstance(opt_out, bool):
            raise HTTPException(status_code=400, detail="reminderOptOut must be a boolean")
        sale.reminder_opt_out = opt_out

    if "whatsappNumber" in payload:
        number = payload["whatsappNumber"]
        if number is not None and not isinstance(number, str):
            raise HTTPException(status_code=400, detail="whatsappNumber must be a string")
        sale.whatsapp_number = (number or "").strip() or None

    db.commit()
    db.refresh(sale)

    return {
        "success": True,
        "serialNumber": machine.serial_number,
        "reminderOptOut": sale.reminder_opt_out,
        "whatsappNumber": sale.whatsapp_number,
    }
