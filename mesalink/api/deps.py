# mesalink/api/deps.py
from typing import Optional
import uuid

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mesalink.core import security
from mesalink.core.config import settings
from mesalink.core.exceptions import AuthError, ForbiddenError
from mesalink.database import get_db  # noqa: F401  (reexportado para os endpoints)

reusable_bearer = HTTPBearer(auto_error=False)


def get_current_staff(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(reusable_bearer),
) -> Optional[security.StaffClaims]:
    """Equipe autenticada (cozinha/dono). Retorna None se a autenticação estiver desligada."""
    if not settings.STAFF_AUTH_ENABLED:
        return None
    if credentials is None or not credentials.credentials:
        raise AuthError("Não autenticado")
    return security.decode_token(credentials.credentials)


def ensure_restaurant_access(staff: Optional[security.StaffClaims], restaurant_id: uuid.UUID) -> None:
    if staff is not None and staff.restaurant_id != restaurant_id:
        raise ForbiddenError("Sem permissão para este restaurante")
