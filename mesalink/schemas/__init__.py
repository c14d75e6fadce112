from .menu_item import MenuItemCreate, MenuItemListOut, MenuItemOut
from .order import (
    OrderCreate,
    OrderCreated,
    OrderLineIn,
    OrderLineOut,
    OrderListOut,
    OrderOut,
    OrderStatusOut,
    OrderStatusUpdate,
)
from .session import RenewAllOut, RenewAllRequest, RenewedTable, RenewFailure, SessionOut, SessionRequest
from .table import TableCreate, TableOut
