from primecare.schemas.action_log import (
    ActionLogCreate,
    ActionLogValidationError,
    ReminderSentMetadata,
    ServiceScheduledMetadata,
    WarrantyViewedMetadata,
    EmailOpenedMetadata,
    LinkClickedMetadata,
    parse_action_metadata,
)

__all__ = [
    "ActionLogCreate",
    "ActionLogValidationError",
    "ReminderSentMetadata",
    "ServiceScheduledMetadata",
    "WarrantyViewedMetadata",
    "EmailOpenedMetadata",
    "LinkClickedMetadata",
    "parse_action_metadata",
]
