"""
Service reminder email rendering
"""
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Optional

from primecare.core.config import settings
from primecare.services.warranty_helper import WarrantyHelper, Urgency

URGENCY_COLORS = {
    Urgency.OVERDUE: "#dc2626",
    Urgency.URGENT: "#f59e0b",
    Urgency.SOON: "#3b82f6",
    Urgency.UPCOMING: "#10b981",
}


@dataclass
class ReminderEmailData:
    customer_name: str
    machine_name: str
    serial_number: str
    days_until_service: int
    health_score: int
    total_savings: float
    schedule_url: str
    warranty_active: bool = True
    warranty_expiry_date: Optional[datetime] = None


def build_reminder_subject(urgency: Urgency, machine_name: str, days_until_service: int) -> str:
    if urgency == Urgency.OVERDUE:
        return f"Overdue: Service Required - {machine_name}"
    if urgency == Urgency.URGENT:
        return f"Urgent: Service Due Soon - {machine_name}"
    if urgency == Urgency.SOON:
        return f"Reminder: Service Due in {days_until_service} Days - {machine_name}"
    return f"Service Reminder - {machine_name}"


def _health_color(score: int) -> str:
    if score >= 80:
        return "#10b981"
    if score >= 60:
        return "#f59e0b"
    return "#dc2626"


def _due_text(days: int) -> str:
    if days > 0:
        return f"Service due in {days} days"
    if days == 0:
        return "Service due today"
    return f"Service {abs(days)} days overdue"


def _warranty_block(data: ReminderEmailData) -> str:
    if not data.warranty_expiry_date:
        return ""
    expiry = escape(WarrantyHelper.format_service_date(data.warranty_expiry_date))
    if data.warranty_active:
        return (
            '<p style="margin: 0 0 24px; color: #047857;">'
            f"Your warranty is active until <strong>{expiry}</strong>. "
            "Servicing on schedule keeps your coverage intact.</p>"
        )
    return (
        '<p style="margin: 0 0 24px; color: #b45309;">'
        f"Your warranty expired on <strong>{expiry}</strong>. "
        "Paid service plans are available on request.</p>"
    )


def generate_service_reminder_html(data: ReminderEmailData) -> str:
    """Render the reminder email. All interpolated values are HTML escaped."""
    urgency = WarrantyHelper.get_urgency_level(data.days_until_service)
    urgency_color = URGENCY_COLORS[urgency]
    health_color = _health_color(data.health_score)

    overdue_block = ""
    if urgency == Urgency.OVERDUE:
        overdue_block = """
      <div style="background: #fef2f2; border: 1px solid #fecaca; border-radius: 8px; padding: 16px; margin-bottom: 24px;">
        <p style="margin: 0; color: #dc2626;">
          <strong>Important:</strong> Delaying service may affect your warranty coverage and increase breakdown risk.
        </p>
      </div>"""

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; margin: 0; padding: 20px; background-color: #f3f4f6;">
  <div style="max-width: 600px; margin: 0 auto; background: white; border-radius: 8px; overflow: hidden;">
    <div style="background: #1a5f7a; color: white; padding: 24px; text-align: center;">
      <h1 style="margin: 0; font-size: 24px;">Service Reminder</h1>
      <p style="margin: 8px 0 0; opacity: 0.9;">Keep your equipment running smoothly</p>
    </div>
    <div style="padding: 32px;">
      <p style="margin: 0 0 24px; font-size: 16px;">Hello {escape(data.customer_name)},</p>
      <div style="background: #f9fafb; border-left: 4px solid {urgency_color}; padding: 16px; margin-bottom: 24px;">
        <h2 style="margin: 0 0 8px; font-size: 18px;">{escape(data.machine_name)}</h2>
        <p style="margin: 0 0 8px; color: #6b7280;">Serial: {escape(data.serial_number)}</p>
        <p style="margin: 0; font-size: 20px; font-weight: bold; color: {urgency_color};">{_due_text(data.days_until_service)}</p>
      </div>
      {_warranty_block(data)}
      <table role="presentation" width="100%" style="margin-bottom: 32px;">
        <tr>
          <td style="text-align: center; padding: 16px; background: #f9fafb;">
            <div style="color: #6b7280; font-size: 14px;">Health Score</div>
            <div style="font-size: 32px; font-weight: bold; color: {health_color};">{int(data.health_score)}/100</div>
          </td>
          <td style="text-align: center; padding: 16px; background: #f9fafb;">
            <div style="color: #6b7280; font-size: 14px;">Total Savings</div>
            <div style="font-size: 32px; font-weight: bold; color: #10b981;">&#8377;{data.total_savings:,.0f}</div>
          </td>
        </tr>
      </table>{overdue_block}
      <div style="text-align: center; margin: 32px 0;">
        <a href="{escape(data.schedule_url, quote=True)}" style="display: inline-block; background: #1a5f7a; color: white; padding: 12px 32px; text-decoration: none; border-radius: 6px; font-weight: bold;">Schedule Service Now</a>
      </div>
      <p style="margin: 24px 0 0; padding-top: 24px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px;">
        This link will expire in {settings.SCHEDULE_TOKEN_EXPIRE_DAYS} days. For assistance, call <strong>{escape(settings.SUPPORT_PHONE)}</strong>
        or email <strong>{escape(settings.SUPPORT_EMAIL)}</strong>
      </p>
    </div>
  </div>
</body>
</html>
"""
