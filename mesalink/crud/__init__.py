from .crud_menu_item import menu_item
from .crud_order import order
from .crud_table import table
