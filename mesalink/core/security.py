from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

from jose import JWTError, jwt

from mesalink.core.config import settings
from mesalink.core.exceptions import AuthError


@dataclass(frozen=True)
class StaffClaims:
    subject: str
    restaurant_id: uuid.UUID
    role: str


def create_access_token(
    subject: str,
    restaurant_id: uuid.UUID,
    role: str = "kitchen",
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Cria um token JWT de acesso para a equipe (cozinha/dono)."""
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "sub": subject,
        "restaurant_id": str(restaurant_id),
        "role": role,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> StaffClaims:
    """Decodifica e valida um token JWT da equipe."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        raise AuthError("Token inválido") from e

    if payload.get("type") != "access" or not payload.get("sub"):
        raise AuthError("Token inválido")
    try:
        restaurant_id = uuid.UUID(str(payload.get("restaurant_id")))
    except ValueError as e:
        raise AuthError("Token inválido") from e

    return StaffClaims(subject=payload["sub"], restaurant_id=restaurant_id, role=payload.get("role", "kitchen"))
