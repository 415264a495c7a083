from typing import Any

from pydantic import BaseModel


class ConnectedAccountOut(BaseModel):
    id: str
    email: str
    is_default: bool
    created_at: str


class ConnectedAccountsResponse(BaseModel):
    accounts: list[ConnectedAccountOut]


class ConnectUrlResponse(BaseModel):
    auth_url: str


class CalendarEventsResponse(BaseModel):
    events: list[dict[str, Any]]
