from datetime import datetime
from typing import Any, Optional

import attrs

from src.platform.exception.exceptions import DomainError


@attrs.define
class User:
    """Local mirror of an identity-provider user; only name and email are read by the core."""

    id: str
    name: str
    email: str
    image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_identity_payload(cls, data: dict[str, Any]) -> 'User':
        """
        Build from a `user.created` / `user.updated` payload.

        name = "first last", email = first listed address.
        """
        user_id = data.get('id')
        if not user_id:
            raise DomainError('User payload is missing an id')

        addresses = data.get('email_addresses') or []
        if not addresses or not addresses[0].get('email_address'):
            raise DomainError('User payload has no email address')

        first_name = data.get('first_name') or ''
        last_name = data.get('last_name') or ''
        return cls(
            id=str(user_id),
            name=f'{first_name} {last_name}'.strip(),
            email=addresses[0]['email_address'],
            image=data.get('image_url'),
        )


@attrs.define
class UserEntity:
    """Authenticated principal rebuilt from a bearer token (no DB query)."""

    id: str
    role: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None

    def has_role(self, role: str) -> bool:
        return self.role == role
