"""
Cron endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Body
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import logging

from primecare.api.deps import get_scheduler, get_transport
from primecare.core.database import get_db
from primecare.core.security import verify_cron_secret, is_valid_cron_secret
from primecare.core.timeutils import utcnow, isoformat_utc
from primecare.services.mail_transport import MailTransport
from primecare.services.reminder_service import ReminderService
from primecare.services.scheduler import CronScheduler, JobNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


def _process_daily_reminders(db: Session, transport: MailTransport):
    try:
        logger.info("Starting daily reminder processing...")
        sent_count = ReminderService(db, transport=transport).process_reminders()
    except Exception:
        logger.error("Cron job error", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to process reminders"})

    return {
        "success": True,
        "remindersSent": sent_count,
        "timestamp": isoformat_utc(utcnow()),
    }


@router.get("/daily-reminders", dependencies=[Depends(verify_cron_secret)])
def run_daily_reminders(
    db: Session = Depends(get_db),
    transport: MailTransport = Depends(get_transport),
):
    """Entry point for an external cron (Vercel Cron, crontab, etc.)"""
    return _process_daily_reminders(db, transport)


@router.post("/daily-reminders", dependencies=[Depends(verify_cron_secret)])
def trigger_daily_reminders(
    db: Session = Depends(get_db),
    transport: MailTransport = Depends(get_transport),
):
    """Manual trigger; identical to GET"""
    return _process_daily_reminders(db, transport)


@router.get("/status")
def cron_status(scheduler: CronScheduler = Depends(get_scheduler)):
    """Run history of every scheduled job"""
    scheduler.ensure_initialized()
    statuses = scheduler.get_status()

    total_runs = sum(s.total_runs for s in statuses)
    total_success = sum(s.total_success for s in statuses)
    total_failures = sum(s.total_failures for s in statuses)
    success_rate = (total_success / total_runs) * 100 if total_runs > 0 else 0

    return {
        "success": True,
        "timestamp": isoformat_utc(utcnow()),
        "schedulerRunning": scheduler.running,
        "summary": {
            "totalJobs": len(statuses),
            "totalRuns": total_runs,
            "totalSuccess": total_success,
            "totalFailures": total_failures,
            "successRate": f"{success_rate:.2f}%",
        },
        "jobs": [s.to_dict() for s in statuses],
    }


@router.post("/status")
def trigger_cron_job(
    payload: dict = Body(default={}),
    scheduler: CronScheduler = Depends(get_scheduler),
):
    """Run a scheduled job immediately"""
    job_name = payload.get("jobName")

    if not is_valid_cron_secret(payload.get("secret")):
        raise HTTPException(status_code=401, detail="Unauthorized")

    if not job_name:
        raise HTTPException(status_code=400, detail="jobName is required")

    scheduler.ensure_initialized()
    try:
        result = scheduler.trigger_job(job_name)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail=f"Job '{job_name}' not found")
    except Exception as e:
        logger.error(f"Error triggering cron job {job_name}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to trigger job", "details": str(e)},
        )

    return {
        "success": True,
        "message": f"Job '{job_name}' executed successfully",
        "result": result,
        "timestamp": isoformat_utc(utcnow()),
    }
