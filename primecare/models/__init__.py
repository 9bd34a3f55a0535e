from primecare.models.machine import Machine, MachineModel
from primecare.models.sale import Sale
from primecare.models.service import ServiceRequest, ServiceVisit, ServiceStatus
from primecare.models.action_log import ActionLog, ActionType, ActionChannel

__all__ = [
    "Machine",
    "MachineModel",
    "Sale",
    "ServiceRequest",
    "ServiceVisit",
    "ServiceStatus",
    "ActionLog",
    "ActionType",
    "ActionChannel",
]
