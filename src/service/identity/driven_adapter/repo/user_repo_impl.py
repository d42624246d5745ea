from typing import AsyncContextManager, Callable, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import ensure_utc
from src.service.identity.app.interface.i_user_repo import IUserRepo
from src.service.identity.domain.entity.user_entity import User
from src.service.identity.driven_adapter.model.user_model import UserModel


class UserRepoImpl(IUserRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @staticmethod
    def _to_entity(db_user: UserModel) -> User:
        return User(
            id=db_user.id,
            name=db_user.name,
            email=db_user.email,
            image=db_user.image,
            created_at=ensure_utc(db_user.created_at),
            updated_at=ensure_utc(db_user.updated_at),
        )

    @Logger.io
    async def upsert(self, *, user: User) -> User:
        async with self.session_factory() as session:
            # merge() is a portable select-then-insert/update by primary key
            db_user = await session.merge(
                UserModel(id=user.id, name=user.name, email=user.email, image=user.image)
            )
            await session.commit()
            await session.refresh(db_user)
            return self._to_entity(db_user)

    @Logger.io
    async def delete(self, *, user_id: str) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(delete(UserModel).where(UserModel.id == user_id))
            await session.commit()
            return result.rowcount > 0  # type: ignore[attr-defined]

    @Logger.io
    async def get_by_id(self, *, user_id: str) -> Optional[User]:
        async with self.session_factory() as session:
            db_user = await session.get(UserModel, user_id)
            return self._to_entity(db_user) if db_user else None

    @Logger.io
    async def get_by_ids(self, *, user_ids: Sequence[str]) -> list[User]:
        if not user_ids:
            return []
        async with self.session_factory() as session:
            result = await session.execute(
                select(UserModel).where(UserModel.id.in_(set(user_ids))).order_by(UserModel.id)
            )
            return [self._to_entity(u) for u in result.scalars().all()]

    @Logger.io
    async def list_all(self) -> list[User]:
        async with self.session_factory() as session:
            result = await session.execute(select(UserModel).order_by(UserModel.created_at))
            return [self._to_entity(u) for u in result.scalars().all()]
