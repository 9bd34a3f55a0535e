"""
Cron scheduler tests
"""
import threading
from datetime import datetime
from unittest.mock import patch

import pytest

from primecare.services.scheduler import CronJobStatus, DAILY_REMINDERS_JOB, JobNotFoundError


@pytest.mark.unit
def test_ensure_initialized_is_idempotent(scheduler):
    scheduler.ensure_initialized()
    scheduler.ensure_initialized()

    statuses = scheduler.get_status()
    assert [s.job_name for s in statuses] == [DAILY_REMINDERS_JOB]
    assert statuses[0].next_run is not None
    assert scheduler.running is False


@pytest.mark.unit
def test_trigger_unknown_job(scheduler):
    scheduler.ensure_initialized()

    with pytest.raises(JobNotFoundError):
        scheduler.trigger_job("weekly-digest")


@pytest.mark.unit
def test_trigger_runs_daily_reminders(scheduler, make_machine, mail_transport):
    scheduler.ensure_initialized()
    make_machine(sold_days_ago=83)

    result = scheduler.trigger_job(DAILY_REMINDERS_JOB)

    assert result == {"success": True, "remindersSent": 1}
    status = scheduler.get_job_status(DAILY_REMINDERS_JOB)
    assert status.total_runs == 1
    assert status.total_success == 1
    assert status.is_running is False
    assert status.health == "HEALTHY"


@pytest.mark.unit
def test_scheduled_run_swallows_and_records_failure(scheduler):
    scheduler.ensure_initialized()

    with patch("primecare.services.scheduler.ReminderService") as service_cls:
        service_cls.return_value.process_reminders.side_effect = RuntimeError("boom")
        scheduler._run_scheduled(DAILY_REMINDERS_JOB)

    status = scheduler.get_job_status(DAILY_REMINDERS_JOB)
    assert status.total_failures == 1
    assert status.last_error == "boom"
    assert status.health == "UNKNOWN"


@pytest.mark.unit
def test_start_and_shutdown(scheduler):
    scheduler.start()
    assert scheduler.running is True

    scheduler.shutdown()
    assert scheduler.running is False


@pytest.mark.unit
@pytest.mark.parametrize("successes,failure_first,expected", [
    (0, None, "UNKNOWN"),
    (0, True, "UNKNOWN"),
    (1, None, "HEALTHY"),
    (1, True, "HEALTHY"),
    (1, False, "UNHEALTHY"),
])
def test_job_health(successes, failure_first, expected):
    status = CronJobStatus(job_name="daily-reminders", schedule="0 9 * * *", total_success=successes)
    status.total_failures = 0 if failure_first is None else 1
    if successes:
        status.last_success = datetime(2026, 3, 10, 9, 0)
    if failure_first is True:
        status.last_failure = datetime(2026, 3, 9, 9, 0)
    elif failure_first is False:
        status.last_failure = datetime(2026, 3, 11, 9, 0)

    assert status.health == expected


@pytest.mark.unit
def test_concurrent_initialization_registers_job_before_returning(scheduler):
    barrier = threading.Barrier(4)
    seen = []

    def init():
        barrier.wait()
        scheduler.ensure_initialized()
        seen.append(scheduler.get_job_status(DAILY_REMINDERS_JOB))

    threads = [threading.Thread(target=init) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(seen) == 4
    assert all(status is not None for status in seen)
    assert len(scheduler.get_status()) == 1


@pytest.mark.unit
def test_pause_and_resume_job(scheduler):
    scheduler.ensure_initialized()
    scheduler.start()

    scheduler.pause_job(DAILY_REMINDERS_JOB)
    status = scheduler.get_job_status(DAILY_REMINDERS_JOB)
    assert status.paused is True
    assert status.next_run is None
    assert status.to_dict()["paused"] is True
    assert scheduler._scheduler.get_job(DAILY_REMINDERS_JOB).next_run_time is None

    scheduler.resume_job(DAILY_REMINDERS_JOB)
    status = scheduler.get_job_status(DAILY_REMINDERS_JOB)
    assert status.paused is False
    assert status.next_run is not None
    assert scheduler._scheduler.get_job(DAILY_REMINDERS_JOB).next_run_time is not None


@pytest.mark.unit
def test_paused_job_can_still_be_triggered(scheduler, make_machine, mail_transport):
    scheduler.ensure_initialized()
    make_machine(sold_days_ago=83)
    scheduler.pause_all()

    result = scheduler.trigger_job(DAILY_REMINDERS_JOB)

    assert result["remindersSent"] == 1
    assert scheduler.get_job_status(DAILY_REMINDERS_JOB).paused is True

    scheduler.resume_all()
    assert scheduler.get_job_status(DAILY_REMINDERS_JOB).paused is False


@pytest.mark.unit
def test_pause_unknown_job(scheduler):
    scheduler.ensure_initialized()

    with pytest.raises(JobNotFoundError):
        scheduler.pause_job("weekly-digest")
    with pytest.raises(JobNotFoundError):
        scheduler.resume_job("weekly-digest")
