from mesalink.db.models.menu_item import MenuItem
from mesalink.db.models.order import Order, OrderStatus
from mesalink.db.models.table import DiningTable

__all__ = ["DiningTable", "MenuItem", "Order", "OrderStatus"]
