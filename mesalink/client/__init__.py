from .api import MesaLinkApi
from .cart import Cart, CartItem, CartLine
from .kitchen_board import KitchenBoard, KitchenOrder
from .offline_queue import FlushResult, OfflineOrderQueue
from .ordering import EmptyCartError, OrderingClient, SessionUnavailableError, SubmitResult, SubmitStatus
from .session_cache import CachedSession, SessionCache
from .storage import JsonFileStorage, MemoryStorage
