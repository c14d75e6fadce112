# mesalink/api/v1/endpoints/tables.py
from typing import Any, Optional
import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from mesalink import crud, schemas
from mesalink.api import deps
from mesalink.core.exceptions import ValidationError
from mesalink.core.security import StaffClaims
from mesalink.services import qrcode_service
from mesalink.services.session_service import profile_for, session_service

router = APIRouter()


@router.post("", response_model=schemas.TableOut, status_code=status.HTTP_201_CREATED)
def create_table(
    table_in: schemas.TableCreate,
    db: Session = Depends(deps.get_db),
    current_staff: Optional[StaffClaims] = Depends(deps.get_current_staff),
) -> Any:
    """
    Cadastra uma nova mesa no restaurante.
    A sessão é criada depois, no primeiro escaneamento do QR.
    """
    deps.ensure_restaurant_access(current_staff, table_in.restaurant_id)
    try:
        return crud.table.create(db, obj_in=table_in)
    except ValueError as e:
        raise ValidationError(str(e), errors=[{"loc": ["body", "tableNumber"], "msg": str(e)}])


@router.get("/{table_id}/qrcode", responses={200: {"content": {"image/png": {}}}}, response_class=Response)
def get_table_qrcode(
    table_id: uuid.UUID,
    restaurant_id: uuid.UUID = Query(..., alias="restaurantId"),
    db: Session = Depends(deps.get_db),
    current_staff: Optional[StaffClaims] = Depends(deps.get_current_staff),
) -> Response:
    """
    Gera a imagem do QR Code da mesa.
    O QR aponta para o cardápio da mesa com o token da sessão vigente.
    """
    deps.ensure_restaurant_access(current_staff, restaurant_id)
    table_session = session_service.ensure_session(
        db, table_id=table_id, restaurant_id=restaurant_id, profile=profile_for(table_id)
    )
    url = qrcode_service.build_table_url(restaurant_id, table_session.table_number, table_session.token)
    return Response(content=qrcode_service.render_png(url), media_type="image/png")
