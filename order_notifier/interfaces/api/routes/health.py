from fastapi import APIRouter, Depends

from order_notifier.bootstrap import NotificationServices
from order_notifier.interfaces.api.dependencies import get_services
from order_notifier.interfaces.api.schemas import EmailStatus, HealthRead

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthRead)
async def health(services: NotificationServices = Depends(get_services)) -> HealthRead:
    return HealthRead(
        status="ok",
        subscribers=len(services.registry),
        email=EmailStatus(configured=services.engine.is_configured()),
    )
