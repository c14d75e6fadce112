"""Carrinho do comensal, persistido no dispositivo em `mesalink-cart`."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mesalink.client.storage import KeyValueStorage, read_json, write_json

logger = logging.getLogger(__name__)

CART_KEY = "mesalink-cart"
MAX_QUANTITY = 99


def _clamp(quantity: int) -> int:
    return min(max(quantity, 1), MAX_QUANTITY)


@dataclass
class CartItem:
    id: str
    name: str
    price: float
    category: Optional[str] = None
    description: Optional[str] = None
    allergens: List[str] = field(default_factory=list)

    @classmethod
    def from_menu_item(cls, data: Dict[str, Any]) -> "CartItem":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            price=float(data["price"]),
            category=data.get("category"),
            description=data.get("description"),
            allergens=list(data.get("allergens") or []),
        )


@dataclass
class CartLine:
    item: CartItem
    quantity: int
    notes: Optional[str] = None

    @property
    def line_total(self) -> float:
        return self.item.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": {
                "id": self.item.id,
                "name": self.item.name,
                "price": self.item.price,
                "category": self.item.category,
                "description": self.item.description,
                "allergens": self.item.allergens,
            },
            "quantity": self.quantity,
            "notes": self.notes,
        }


class Cart:
    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self.lines: List[CartLine] = []
        self._hydrated = False

    def hydrate(self) -> None:
        """Carrega do armazenamento uma única vez; chamadas seguintes não fazem nada."""
        if self._hydrated:
            return
        self._hydrated = True

        data = read_json(self.storage, CART_KEY)
        raw_lines = data.get("lines") if isinstance(data, dict) else None
        if not isinstance(raw_lines, list):
            self.lines = []
            return

        lines = []
        try:
            for raw in raw_lines:
                quantity = int(raw["quantity"])
                lines.append(
                    CartLine(item=CartItem.from_menu_item(raw["item"]), quantity=_clamp(quantity), notes=raw.get("notes"))
                )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Carrinho salvo corrompido, começando vazio: {exc!r}")
            lines = []
        self.lines = lines

    def _save(self) -> None:
        write_json(self.storage, CART_KEY, {"lines": [line.to_dict() for line in self.lines]})

    def _find(self, item_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.item.id == item_id), None)

    def add_item(self, item: CartItem, quantity: int = 1) -> None:
        existing = self._find(item.id)
        if existing:
            existing.quantity = _clamp(existing.quantity + quantity)
        else:
            self.lines.append(CartLine(item=item, quantity=_clamp(quantity)))
        self._save()

    def update_quantity(self, item_id: str, quantity: int) -> None:
        line = self._find(item_id)
        if line:
            line.quantity = _clamp(quantity)
            self._save()

    def remove_item(self, item_id: str) -> None:
        self.lines = [line for line in self.lines if line.item.id != item_id]
        self._save()

    def clear(self) -> None:
        self.lines = []
        self._save()

    def total(self) -> float:
        return sum(line.line_total for line in self.lines)

    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def is_empty(self) -> bool:
        return not self.lines

    def order_items(self) -> List[Dict[str, Any]]:
        """Linhas no formato do corpo de `POST /orders`."""
        return [
            {"menuItemId": line.item.id, "name": line.item.name, "price": line.item.price, "quantity": line.quantity}
            for line in self.lines
        ]
