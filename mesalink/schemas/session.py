# mesalink/schemas/session.py
from datetime import datetime
from typing import List, Optional
import uuid

from pydantic import Field

from mesalink.schemas.base import CamelModel


class SessionRequest(CamelModel):
    restaurant_id: uuid.UUID
    table_id: uuid.UUID
    persistent: Optional[bool] = False


class SessionOut(CamelModel):
    session_token: str
    expires_at: datetime


class RenewAllRequest(CamelModel):
    restaurant_id: uuid.UUID


class RenewedTable(CamelModel):
    id: uuid.UUID
    table_number: int
    session_token: str
    session_expires_at: Optional[datetime] = None


class RenewFailure(CamelModel):
    id: uuid.UUID
    table_number: int
    message: str


class RenewAllOut(CamelModel):
    tables: List[RenewedTable] = Field(default_factory=list)
    failed: List[RenewFailure] = Field(default_factory=list)
