# mesalink/schemas/order.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import uuid

from pydantic import Field, field_validator

from mesalink.core.text_sanitizer import sanitize_optional, sanitize_plain_text
from mesalink.db.models.order import OrderStatus
from mesalink.schemas.base import CamelModel

MAX_ORDER_LINES = 99
MAX_LINE_QUANTITY = 99
MAX_NOTES_LENGTH = 500
# Numeric(10, 2)
MAX_AMOUNT = Decimal("99999999.99")


# --- Linhas do pedido ---
class OrderLineIn(CamelModel):
    menu_item_id: uuid.UUID
    name: str
    price: Decimal = Field(..., ge=0, le=MAX_AMOUNT)
    quantity: int = Field(..., ge=1, le=MAX_LINE_QUANTITY, strict=True)

    @field_validator("name")
    @classmethod
    def sanitize_name(cls, v: str) -> str:
        return sanitize_plain_text(v, field_label="Nome do prato", max_length=120, min_length=1)

    def snapshot(self) -> dict:
        """Cópia por valor gravada no pedido; edições futuras do cardápio não a alteram."""
        return {
            "menuItemId": str(self.menu_item_id),
            "name": self.name,
            "price": float(self.price.quantize(Decimal("0.01"))),
            "quantity": self.quantity,
        }


class OrderLineOut(CamelModel):
    menu_item_id: uuid.UUID
    name: str
    price: float
    quantity: int


# --- Pedido ---
class OrderCreate(CamelModel):
    restaurant_id: uuid.UUID
    table_id: uuid.UUID
    session_token: str = Field(..., min_length=1)
    items: List[OrderLineIn] = Field(..., min_length=1, max_length=MAX_ORDER_LINES)
    allergy_notes: Optional[str] = None
    notes: Optional[str] = None
    subtotal: Decimal = Field(..., ge=0, le=MAX_AMOUNT)
    tax: Decimal = Field(..., ge=0, le=MAX_AMOUNT)
    total: Decimal = Field(..., ge=0, le=MAX_AMOUNT)

    @field_validator("allergy_notes")
    @classmethod
    def sanitize_allergy_notes(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_optional(v, field_label="Notas de alergia", max_length=MAX_NOTES_LENGTH)

    @field_validator("notes")
    @classmethod
    def sanitize_notes(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_optional(v, field_label="Notas", max_length=MAX_NOTES_LENGTH, allow_newlines=True)


class OrderCreated(CamelModel):
    order_id: uuid.UUID


class OrderOut(CamelModel):
    id: uuid.UUID
    table_id: uuid.UUID
    status: OrderStatus
    items: List[OrderLineOut]
    allergy_notes: Optional[str] = None
    notes: Optional[str] = None
    subtotal: float
    tax: float
    total: float
    created_at: datetime


class OrderListOut(CamelModel):
    orders: List[OrderOut] = Field(default_factory=list)


# --- Transição de status ---
class OrderStatusUpdate(CamelModel):
    restaurant_id: uuid.UUID
    order_id: uuid.UUID
    next_status: OrderStatus


class OrderStatusOut(CamelModel):
    order_id: uuid.UUID
    status: OrderStatus
