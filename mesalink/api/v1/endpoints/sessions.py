# mesalink/api/v1/endpoints/sessions.py
from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mesalink import schemas
from mesalink.api import deps
from mesalink.core.security import StaffClaims
from mesalink.services.session_service import profile_for, session_service

router = APIRouter()


@router.post("", response_model=schemas.SessionOut)
def ensure_table_session(
    session_in: schemas.SessionRequest,
    db: Session = Depends(deps.get_db),
) -> Any:
    """
    Garante uma sessão de mesa para o comensal que escaneou o QR.
    Reutiliza o token vigente enquanto ele não estiver perto de expirar.
    """
    profile = profile_for(session_in.table_id, persistent=bool(session_in.persistent))
    table_session = session_service.ensure_session(
        db,
        table_id=session_in.table_id,
        restaurant_id=session_in.restaurant_id,
        profile=profile,
    )
    return schemas.SessionOut(session_token=table_session.token, expires_at=table_session.expires_at)


@router.post("/renew-all", response_model=schemas.RenewAllOut)
def renew_all_sessions(
    renew_in: schemas.RenewAllRequest,
    db: Session = Depends(deps.get_db),
    current_staff: Optional[StaffClaims] = Depends(deps.get_current_staff),
) -> Any:
    """
    Garante sessão para todas as mesas do restaurante (usado ao gerar os QR Codes).
    Mesas que falharem são reportadas em `failed`.
    """
    deps.ensure_restaurant_access(current_staff, renew_in.restaurant_id)
    renewed, failed = session_service.renew_all(db, restaurant_id=renew_in.restaurant_id)
    return schemas.RenewAllOut(
        tables=[
            schemas.RenewedTable(
                id=s.table_id,
                table_number=s.table_number,
                session_token=s.token,
                session_expires_at=s.expires_at,
            )
            for s in renewed
        ],
        failed=[
            schemas.RenewFailure(id=f.table_id, table_number=f.table_number, message=f.message) for f in failed
        ],
    )
