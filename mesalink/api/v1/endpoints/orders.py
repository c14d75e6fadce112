# mesalink/api/v1/endpoints/orders.py
from typing import Any, List, Optional
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from mesalink import schemas
from mesalink.api import deps
from mesalink.core.security import StaffClaims
from mesalink.db.models.order import OrderStatus
from mesalink.services.order_service import order_service

router = APIRouter()


@router.post("", response_model=schemas.OrderCreated, status_code=status.HTTP_201_CREATED)
def create_order(
    order_in: schemas.OrderCreate,
    db: Session = Depends(deps.get_db),
) -> Any:
    """
    Cria um pedido a partir do carrinho do comensal.
    O token de sessão precisa ser o token vigente da mesa.
    """
    order = order_service.submit_order(db, order_in=order_in)
    return schemas.OrderCreated(order_id=order.id)


@router.get("", response_model=schemas.OrderListOut)
def list_orders(
    restaurant_id: uuid.UUID = Query(..., alias="restaurantId"),
    statuses: Optional[List[OrderStatus]] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=500),
    db: Session = Depends(deps.get_db),
    current_staff: Optional[StaffClaims] = Depends(deps.get_current_staff),
) -> Any:
    """
    Lista os pedidos do restaurante, do mais recente ao mais antigo.
    Filtro opcional por status; repita o parâmetro para vários
    (ex.: `?status=pending&status=preparing`).
    """
    deps.ensure_restaurant_access(current_staff, restaurant_id)
    orders = order_service.list_orders(
        db, restaurant_id=restaurant_id, statuses=statuses, skip=skip, limit=limit
    )
    return schemas.OrderListOut(orders=[schemas.OrderOut.model_validate(o) for o in orders])


@router.patch("", response_model=schemas.OrderStatusOut)
def update_order_status(
    status_in: schemas.OrderStatusUpdate,
    db: Session = Depends(deps.get_db),
    current_staff: Optional[StaffClaims] = Depends(deps.get_current_staff),
) -> Any:
    """
    Avança o status de um pedido (pending → preparing → ready → delivered).
    Repetir o status atual é aceito como no-op.
    """
    deps.ensure_restaurant_access(current_staff, status_in.restaurant_id)
    order = order_service.transition(
        db,
        order_id=status_in.order_id,
        restaurant_id=status_in.restaurant_id,
        next_status=status_in.next_status,
    )
    return schemas.OrderStatusOut(order_id=order.id, status=order.status)
