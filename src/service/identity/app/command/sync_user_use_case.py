from enum import StrEnum
from typing import Any, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.identity.app.interface.i_user_repo import IUserRepo
from src.service.identity.domain.entity.user_entity import User


class IdentityEventType(StrEnum):
    USER_CREATED = 'user.created'
    USER_UPDATED = 'user.updated'
    USER_DELETED = 'user.deleted'


class SyncUserUseCase:
    """Mirror identity-provider user lifecycle events into the local user table."""

    def __init__(self, *, user_repo: IUserRepo) -> None:
        self.user_repo = user_repo

    @classmethod
    @inject
    def depends(cls, user_repo: IUserRepo = Depends(Provide[Container.user_repo])) -> Self:
        return cls(user_repo=user_repo)

    @Logger.io
    async def handle(self, *, event_type: str, data: dict[str, Any]) -> Optional[User]:
        try:
            event = IdentityEventType(event_type)
        except ValueError:
            # The provider sends many event types; only user lifecycle is mirrored
            Logger.base.info(f'⏭️  [IDENTITY] Ignoring event type {event_type}')
            return None

        if event is IdentityEventType.USER_DELETED:
            user_id = data.get('id')
            if not user_id:
                raise DomainError('User payload is missing an id')
            deleted = await self.user_repo.delete(user_id=str(user_id))
            Logger.base.info(f'🗑️  [IDENTITY] user {user_id} deleted (existed={deleted})')
            return None

        # created and updated both upsert, so out-of-order delivery converges
        user = await self.user_repo.upsert(user=User.from_identity_payload(data))
        Logger.base.info(f'👤 [IDENTITY] {event.value} synced user {user.id}')
        return user
