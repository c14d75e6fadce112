from fastapi import APIRouter

from mesalink.api.v1.endpoints import menu_items, orders, sessions, tables

api_router_v1 = APIRouter()

api_router_v1.include_router(sessions.router, prefix="/sessions", tags=["Sessões de mesa"])
api_router_v1.include_router(orders.router, prefix="/orders", tags=["Pedidos"])
api_router_v1.include_router(tables.router, prefix="/tables", tags=["Mesas"])
api_router_v1.include_router(menu_items.router, prefix="/menu-items", tags=["Cardápio"])


@api_router_v1.get("/", tags=["Root V1"])
def read_root_v1():
    return {"message": "API V1 Operacional"}
