# mesalink/schemas/table.py
from datetime import datetime
from typing import Optional
import uuid

from pydantic import Field

from mesalink.schemas.base import CamelModel


class TableCreate(CamelModel):
    restaurant_id: uuid.UUID
    table_number: int = Field(..., ge=1, examples=[12])
    is_active: bool = True


class TableOut(CamelModel):
    id: uuid.UUID
    restaurant_id: uuid.UUID
    table_number: int
    is_active: bool
    session_expires_at: Optional[datetime] = None
