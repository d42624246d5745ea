from typing import Any

from pydantic import BaseModel


class IdentityWebhookRequest(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'type': 'user.created',
                'data': {
                    'id': 'user_2abc',
                    'first_name': 'Asha',
                    'last_name': 'Rao',
                    'email_addresses': [{'email_address': 'asha@example.com'}],
                    'image_url': 'https://img.example.com/asha.png',
                },
            }
        }
    }

    type: str
    data: dict[str, Any]


class IdentityWebhookResponse(BaseModel):
    success: bool = True


class IsAdminResponse(BaseModel):
    success: bool = True
    isAdmin: bool
