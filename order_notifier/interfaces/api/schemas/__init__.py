from .event import EventAccepted
from .health import EmailStatus, HealthRead

__all__ = ["EmailStatus", "EventAccepted", "HealthRead"]
