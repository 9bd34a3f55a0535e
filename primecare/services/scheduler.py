"""
Cron scheduler

One instance is created at application start-up and shared through
app.state. Jobs run on APScheduler's background thread; every run, scheduled
or manual, updates the job's status record.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging
import threading

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from primecare.core.config import settings
from primecare.core.database import SessionLocal
from primecare.core.timeutils import utcnow, isoformat_utc, reminder_zone
from primecare.services.mail_transport import MailTransport, get_mail_transport
from primecare.services.reminder_service import ReminderService

logger = logging.getLogger(__name__)

DAILY_REMINDERS_JOB = "daily-reminders"


class JobNotFoundError(KeyError):
    """Raised when triggering a job name that was never scheduled"""


@dataclass
class CronJobStatus:
    job_name: str
    schedule: str
    last_run: Optional[datetime] = None
    last_success: Optional[datetime] = None
    last_failure: Optional[datetime] = None
    last_error: Optional[str] = None
    total_runs: int = 0
    total_success: int = 0
    total_failures: int = 0
    is_running: bool = False
    paused: bool = False
    next_run: Optional[datetime] = None

    @property
    def health(self) -> str:
        if self.last_failure and self.last_success:
            return "HEALTHY" if self.last_success > self.last_failure else "UNHEALTHY"
        # Never succeeded: not enough history to judge
        return "HEALTHY" if self.total_success > 0 else "UNKNOWN"

    def to_dict(self) -> dict:
        return {
            "jobName": self.job_name,
            "schedule": self.schedule,
            "lastRun": isoformat_utc(self.last_run),
            "lastSuccess": isoformat_utc(self.last_success),
            "lastFailure": isoformat_utc(self.last_failure),
            "lastError": self.last_error,
            "totalRuns": self.total_runs,
            "totalSuccess": self.total_success,
            "totalFailures": self.total_failures,
            "isRunning": self.is_running,
            "paused": self.paused,
            "nextRun": self.next_run.isoformat() if self.next_run else None,
            "status": "RUNNING" if self.is_running else "IDLE",
            "health": self.health,
        }


class CronScheduler:
    def __init__(
        self,
        session_factory: Callable = SessionLocal,
        transport_factory: Callable[[], MailTransport] = get_mail_transport,
    ):
        self.session_factory = session_factory
        self.transport_factory = transport_factory
        self._scheduler = BackgroundScheduler(timezone=reminder_zone())
        self._tasks: Dict[str, Callable[[], Any]] = {}
        self._triggers: Dict[str, CronTrigger] = {}
        self._status: Dict[str, CronJobStatus] = {}
        self._lock = threading.Lock()
        self.initialized = False

    def ensure_initialized(self) -> None:
        """Register all jobs. Safe to call repeatedly."""
        with self._lock:
            if self.initialized:
                return
            self._schedule_job(
                DAILY_REMINDERS_JOB,
                f"{settings.REMINDER_CRON_MINUTE} {settings.REMINDER_CRON_HOUR} * * *",
                self.run_daily_reminders,
            )
            self.initialized = True

        logger.info("Cron scheduler initialized")
        for status in self._status.values():
            logger.info(f"  - {status.job_name}: {status.schedule} (next run {status.next_run})")

    def _schedule_job(self, name: str, schedule: str, task: Callable[[], Any]) -> None:
        trigger = CronTrigger.from_crontab(schedule, timezone=reminder_zone())
        self._tasks[name] = task
        self._triggers[name] = trigger
        self._status[name] = CronJobStatus(job_name=name, schedule=schedule, next_run=self._next_run(name))
        self._scheduler.add_job(
            self._run_scheduled,
            trigger,
            args=[name],
            id=name,
            name=name,
            replace_existing=True,
        )

    def _next_run(self, name: str) -> Optional[datetime]:
        trigger = self._triggers.get(name)
        status = self._status.get(name)
        if trigger is None or (status is not None and status.paused):
            return None
        return trigger.get_next_fire_time(None, datetime.now(reminder_zone()))

    def _run(self, name: str) -> Any:
        task = self._tasks[name]
        status = self._status[name]
        with self._lock:
            status.is_running = True
            status.last_run = utcnow()
            status.total_runs += 1

        try:
            result = task()
        except Exception as e:
            with self._lock:
                status.last_failure = utcnow()
                status.total_failures += 1
                status.last_error = str(e)
                status.is_running = False
                status.next_run = self._next_run(name)
            raise

        with self._lock:
            status.last_success = utcnow()
            status.total_success += 1
            status.last_error = None
            status.is_running = False
            status.next_run = self._next_run(name)
        return result

    def _run_scheduled(self, name: str) -> None:
        logger.info(f"Running cron job: {name}")
        try:
            result = self._run(name)
        except Exception:
            logger.error(f"Cron job '{name}' failed", exc_info=True)
            return
        logger.info(f"Cron job '{name}' completed: {result}")

    def trigger_job(self, name: str) -> Any:
        """Run a job now on the caller's thread. Errors propagate to the caller."""
        if name not in self._tasks:
            raise JobNotFoundError(name)
        logger.info(f"Manually triggering job: {name}")
        return self._run(name)

    def pause_job(self, name: str) -> None:
        """Stop firing a job on schedule. Manual triggers still work."""
        if name not in self._tasks:
            raise JobNotFoundError(name)
        self._scheduler.pause_job(name)
        with self._lock:
            self._status[name].paused = True
            self._status[name].next_run = None
        logger.info(f"Paused job: {name}")

    def resume_job(self, name: str) -> None:
        if name not in self._tasks:
            raise JobNotFoundError(name)
        self._scheduler.resume_job(name)
        with self._lock:
            self._status[name].paused = False
            self._status[name].next_run = self._next_run(name)
        logger.info(f"Resumed job: {name}")

    def pause_all(self) -> None:
        for name in list(self._tasks):
            self.pause_job(name)

    def resume_all(self) -> None:
        for name in list(self._tasks):
            self.resume_job(name)

    def get_status(self) -> List[CronJobStatus]:
        return list(self._status.values())

    def get_job_status(self, name: str) -> Optional[CronJobStatus]:
        return self._status.get(name)

    def run_daily_reminders(self) -> dict:
        db = self.session_factory()
        try:
            service = ReminderService(db, transport=self.transport_factory())
            sent_count = service.process_reminders()
        finally:
            db.close()
        return {"success": True, "remindersSent": sent_count}

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        self.ensure_initialized()
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Cron scheduler started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Cron scheduler stopped")
