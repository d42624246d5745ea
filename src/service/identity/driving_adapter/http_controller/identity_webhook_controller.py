import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError
from src.platform.logging.loguru_io import Logger
from src.service.identity.app.command.sync_user_use_case import SyncUserUseCase
from src.service.identity.driving_adapter.http_controller.schema.identity_schema import (
    IdentityWebhookRequest,
    IdentityWebhookResponse,
)


router = APIRouter()


def verify_webhook_secret(x_webhook_secret: Optional[str] = Header(None)) -> None:
    expected = settings.IDENTITY_WEBHOOK_SECRET.get_secret_value()
    if not x_webhook_secret or not hmac.compare_digest(x_webhook_secret, expected):
        raise AuthenticationError('Invalid webhook secret')


@router.post('/webhook', dependencies=[Depends(verify_webhook_secret)])
@Logger.io
async def identity_webhook(
    request: IdentityWebhookRequest,
    use_case: SyncUserUseCase = Depends(SyncUserUseCase.depends),
) -> IdentityWebhookResponse:
    await use_case.handle(event_type=request.type, data=request.data)
    return IdentityWebhookResponse(success=True)
