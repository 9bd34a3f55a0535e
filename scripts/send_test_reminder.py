"""
Send a test service reminder for a machine to any address.

Usage: python scripts/send_test_reminder.py <machine_id> <email>
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from primecare.core.config import settings
from primecare.core.database import SessionLocal
from primecare.core.logging_config import configure_logging
from primecare.services.reminder_service import ReminderService


def main(argv) -> int:
    if len(argv) != 3:
        print(__doc__.strip())
        return 2

    try:
        machine_id = int(argv[1])
    except ValueError:
        print(f"Error: machine id must be a number, got {argv[1]!r}")
        return 2
    email = argv[2]

    configure_logging(settings.LOG_LEVEL)
    db = SessionLocal()
    try:
        sent = ReminderService(db).send_test_reminder(machine_id, email)
    finally:
        db.close()

    if sent:
        print(f"[OK] Test reminder for machine {machine_id} sent to {email}")
        return 0
    print(f"[FAILED] Could not send test reminder for machine {machine_id}")
    return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
