# mesalink/schemas/menu_item.py
from decimal import Decimal
from typing import List, Optional
import uuid

from pydantic import Field

from mesalink.schemas.base import CamelModel


class MenuItemBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=120, examples=["Tacos al pastor"])
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, le=Decimal("99999999.99"), examples=[89.50])
    category: Optional[str] = Field(None, examples=["platos_fuertes"])
    image_urls: List[str] = Field(default_factory=list)
    allergens: List[str] = Field(default_factory=list)
    is_available: bool = True


class MenuItemCreate(MenuItemBase):
    restaurant_id: uuid.UUID


class MenuItemOut(MenuItemBase):
    id: uuid.UUID
    price: float


class MenuItemListOut(CamelModel):
    items: List[MenuItemOut] = Field(default_factory=list)
