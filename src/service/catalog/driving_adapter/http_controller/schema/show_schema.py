from datetime import datetime
from decimal import Decimal
from typing import Any, List

from pydantic import BaseModel, Field


class ShowInputItem(BaseModel):
    date: str  # YYYY-MM-DD
    time: List[str]  # HH:MM, display timezone


class AddShowsRequest(BaseModel):
    model_config = {
        'populate_by_name': True,
        'json_schema_extra': {
            'example': {
                'movieId': 550,
                'showInput': [{'date': '2025-01-12', 'time': ['14:30', '18:00']}],
                'showPrice': 12.5,
            }
        },
    }

    movie_id: int = Field(alias='movieId')
    show_input: List[ShowInputItem] = Field(alias='showInput', min_length=1)
    show_price: Decimal = Field(alias='showPrice', gt=0)


class AddShowsResponse(BaseModel):
    success: bool = True
    message: str = 'Shows added successfully'


class ShowListResponse(BaseModel):
    success: bool = True
    shows: List[dict[str, Any]]


class ShowTimeResponse(BaseModel):
    time: datetime
    showId: str


class ShowScheduleResponse(BaseModel):
    success: bool = True
    movie: dict[str, Any]
    dateTime: dict[str, List[ShowTimeResponse]]
