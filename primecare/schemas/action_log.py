"""
Action log schemas

Metadata is a tagged union keyed by actionType: each action type validates
its payload against its own model at the HTTP boundary.
"""
from pydantic import BaseModel, ValidationError
from typing import Optional, Dict, Type

from primecare.models.action_log import ActionType, ActionChannel

VALID_ACTION_TYPES = [t.value for t in ActionType]
VALID_CHANNELS = [c.value for c in ActionChannel]


class ActionLogValidationError(ValueError):
    """Bad action log payload; surfaced as HTTP 400"""


class ReminderSentMetadata(BaseModel):
    daysUntilService: Optional[int] = None
    healthScore: Optional[int] = None
    urgency: Optional[str] = None
    sentTo: Optional[str] = None
    warrantyActive: Optional[bool] = None
    warrantyExpiryDate: Optional[str] = None
    messageId: Optional[str] = None

    class Config:
        extra = "allow"


class ServiceScheduledMetadata(BaseModel):
    serviceRequestId: Optional[int] = None
    preferredDate: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        extra = "allow"


class WarrantyViewedMetadata(BaseModel):
    source: Optional[str] = None

    class Config:
        extra = "allow"


class EmailOpenedMetadata(BaseModel):
    userAgent: Optional[str] = None

    class Config:
        extra = "allow"


class LinkClickedMetadata(BaseModel):
    url: Optional[str] = None

    class Config:
        extra = "allow"


METADATA_MODELS: Dict[ActionType, Type[BaseModel]] = {
    ActionType.REMINDER_SENT: ReminderSentMetadata,
    ActionType.SERVICE_SCHEDULED: ServiceScheduledMetadata,
    ActionType.WARRANTY_VIEWED: WarrantyViewedMetadata,
    ActionType.EMAIL_OPENED: EmailOpenedMetadata,
    ActionType.LINK_CLICKED: LinkClickedMetadata,
}


def parse_action_metadata(action_type: ActionType, raw: Optional[dict]) -> BaseModel:
    model = METADATA_MODELS[action_type]
    try:
        return model(**(raw or {}))
    except ValidationError as e:
        raise ActionLogValidationError(f"Invalid metadata for {action_type.value}: {e.errors()[0]['msg']}")


class ActionLogCreate(BaseModel):
    machine_id: int
    action_type: ActionType
    channel: ActionChannel
    metadata: BaseModel

    @classmethod
    def from_payload(cls, payload: dict) -> "ActionLogCreate":
        """Validate a camelCase request body"""
        machine_id = payload.get("machineId")
        action_type = payload.get("actionType")
        channel = payload.get("channel")

        if not machine_id or not action_type or not channel:
            raise ActionLogValidationError("Missing required fields: machineId, actionType, channel")

        if action_type not in VALID_ACTION_TYPES:
            raise ActionLogValidationError(
                f"Invalid actionType. Must be one of: {', '.join(VALID_ACTION_TYPES)}"
            )

        if channel not in VALID_CHANNELS:
            raise ActionLogValidationError(
                f"Invalid channel. Must be one of: {', '.join(VALID_CHANNELS)}"
            )

        try:
            machine_id = int(machine_id)
        except (TypeError, ValueError):
            raise ActionLogValidationError("Invalid machineId")

        metadata = payload.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ActionLogValidationError("metadata must be an object")

        action_type = ActionType(action_type)
        return cls(
            machine_id=machine_id,
            action_type=action_type,
            channel=ActionChannel(channel),
            metadata=parse_action_metadata(action_type, metadata),
        )

