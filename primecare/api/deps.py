"""
Shared API dependencies
"""
from fastapi import Request

from primecare.services.mail_transport import MailTransport, get_mail_transport
from primecare.services.scheduler import CronScheduler


def get_scheduler(request: Request) -> CronScheduler:
    """The process-wide scheduler created at application start-up"""
    return request.app.state.scheduler


def get_transport() -> MailTransport:
    return get_mail_transport()
