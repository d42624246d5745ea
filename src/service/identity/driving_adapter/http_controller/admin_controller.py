from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.identity.domain.entity.user_entity import UserEntity
from src.service.identity.driving_adapter.http_controller.auth.role_auth import require_admin
from src.service.identity.driving_adapter.http_controller.schema.identity_schema import (
    IsAdminResponse,
)


router = APIRouter()


@router.get('/is-admin')
@Logger.io
async def is_admin(current_user: UserEntity = Depends(require_admin)) -> IsAdminResponse:
    return IsAdminResponse(success=True, isAdmin=True)
