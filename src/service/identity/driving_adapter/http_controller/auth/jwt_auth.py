"""
Bearer token verification.

Tokens are issued by the identity provider and signed with the shared
SECRET_KEY; `sub` is the user id and the optional `role` claim carries the
admin flag. `create_jwt_token` exists for scripts and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError
from src.service.identity.domain.entity.user_entity import UserEntity


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_days = 7

    def create_jwt_token(
        self, *, user_id: str, role: Optional[str] = None, **claims: Any
    ) -> str:
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            'sub': user_id,
            'iat': now,
            'exp': now + timedelta(days=self.token_expire_days),
            **claims,
        }
        if role:
            payload['role'] = role
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid authentication')

    def get_current_user_info_from_jwt(self, token: Optional[str]) -> UserEntity:
        if not token:
            raise AuthenticationError('Authentication required')

        payload = self.decode_jwt_token(token)
        user_id = payload.get('sub')
        if not user_id:
            raise AuthenticationError('Invalid authentication')

        return UserEntity(
            id=str(user_id),
            role=payload.get('role'),
            email=payload.get('email'),
            name=payload.get('name'),
        )
