"""
Schedule-link tokens and cron secret checks
"""
import hmac
from datetime import timedelta
from typing import Optional

from fastapi import Header, HTTPException, status
from jose import JWTError, jwt

from primecare.core.config import settings
from primecare.core.timeutils import utcnow


def create_schedule_token(machine_id: int, serial_number: str, expires_days: Optional[int] = None) -> str:
    """Signed token embedded in the "Schedule Service" link of reminder emails"""
    issued_at = utcnow()
    expire = issued_at + timedelta(days=expires_days or settings.SCHEDULE_TOKEN_EXPIRE_DAYS)
    to_encode = {
        "machineId": machine_id,
        "serialNumber": serial_number,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_schedule_token(token: str) -> Optional[dict]:
    """Return the token claims, or None if the token is invalid or expired"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def build_schedule_url(machine_id: int, serial_number: str) -> str:
    token = create_schedule_token(machine_id, serial_number)
    base = settings.APP_URL.rstrip("/")
    return f"{base}/machines/{serial_number}/schedule-warranty?token={token}"


def is_valid_cron_secret(provided: Optional[str]) -> bool:
    """An unset CRON_SECRET leaves cron endpoints open"""
    if not settings.CRON_SECRET:
        return True
    if not isinstance(provided, str):
        return False
    return hmac.compare_digest(provided.encode("utf-8"), settings.CRON_SECRET.encode("utf-8"))


async def verify_cron_secret(authorization: Optional[str] = Header(default=None)):
    """Dependency: require `Authorization: Bearer <CRON_SECRET>`"""
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):]
    if not is_valid_cron_secret(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
