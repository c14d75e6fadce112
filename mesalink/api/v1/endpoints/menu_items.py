# mesalink/api/v1/endpoints/menu_items.py
from typing import Any
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from mesalink import crud, schemas
from mesalink.api import deps

router = APIRouter()


@router.get("", response_model=schemas.MenuItemListOut)
def read_menu_items(
    restaurant_id: uuid.UUID = Query(..., alias="restaurantId"),
    db: Session = Depends(deps.get_db),
) -> Any:
    """
    Cardápio público do restaurante (somente itens disponíveis).
    """
    items = crud.menu_item.get_available_by_restaurant(db, restaurant_id=restaurant_id)
    return schemas.MenuItemListOut(items=[schemas.MenuItemOut.model_validate(i) for i in items])
