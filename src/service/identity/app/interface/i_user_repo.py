from abc import ABC, abstractmethod
from typing import Optional, Sequence

from src.service.identity.domain.entity.user_entity import User


class IUserRepo(ABC):
    @abstractmethod
    async def upsert(self, *, user: User) -> User:
        pass

    @abstractmethod
    async def delete(self, *, user_id: str) -> bool:
        """Returns False when the user did not exist."""
        pass

    @abstractmethod
    async def get_by_id(self, *, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_ids(self, *, user_ids: Sequence[str]) -> list[User]:
        pass

    @abstractmethod
    async def list_all(self) -> list[User]:
        pass
