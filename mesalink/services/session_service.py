# mesalink/services/session_service.py
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import List, Optional, Tuple
import uuid

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from mesalink import crud
from mesalink.core.config import Settings, settings
from mesalink.core.exceptions import ForbiddenError, NotFoundError, TransientInfraError
from mesalink.db.base_class import as_utc
from mesalink.db.models.table import DiningTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionProfile:
    duration: timedelta
    threshold: timedelta


@dataclass(frozen=True)
class TableSession:
    table_id: uuid.UUID
    table_number: int
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class SessionFailure:
    table_id: uuid.UUID
    table_number: int
    message: str


def standard_profile(config: Settings = settings) -> SessionProfile:
    return SessionProfile(
        duration=timedelta(milliseconds=config.SESSION_DURATION_MS),
        threshold=timedelta(milliseconds=config.SESSION_THRESHOLD_MS),
    )


def persistent_profile(config: Settings = settings) -> SessionProfile:
    return SessionProfile(
        duration=timedelta(milliseconds=config.SESSION_PERSISTENT_DURATION_MS),
        threshold=timedelta(milliseconds=config.SESSION_PERSISTENT_THRESHOLD_MS),
    )


def profile_for(table_id: uuid.UUID, persistent: bool = False, config: Settings = settings) -> SessionProfile:
    """Mesas tipo quiosque (allow-list) ou pedidos explícitos usam o perfil persistente."""
    if persistent or str(table_id) in config.persistent_table_ids:
        return persistent_profile(config)
    return standard_profile(config)


class SessionService:
    def ensure_session(
        self,
        db: Session,
        *,
        table_id: uuid.UUID,
        restaurant_id: uuid.UUID,
        profile: SessionProfile,
        now: Optional[datetime] = None,
    ) -> TableSession:
        """
        Garante uma sessão válida para a mesa (idempotente).

        Reutiliza o token atual se o tempo restante excede o threshold do
        perfil; senão gera um novo token e estende a expiração.
        """
        table = crud.table.get_for_restaurant(db, table_id=table_id, restaurant_id=restaurant_id)
        if not table:
            logger.info("ensure_session: mesa %s não encontrada no restaurante %s", table_id, restaurant_id)
            raise NotFoundError("Mesa não encontrada")
        if not table.is_active:
            logger.info("ensure_session: mesa %s inativa (restaurante %s)", table_id, restaurant_id)
            raise ForbiddenError("Mesa inativa")

        try:
            table = crud.table.ensure_session(
                db,
                table_id=table_id,
                restaurant_id=restaurant_id,
                duration=profile.duration,
                threshold=profile.threshold,
                now=now,
            )
        except OperationalError:
            db.rollback()
            logger.warning(
                "ensure_session atômico indisponível; usando atualização direta não atômica "
                "(mesa %s, restaurante %s)",
                table_id,
                restaurant_id,
                exc_info=True,
            )
            table = self._fallback(db, table_id=table_id, restaurant_id=restaurant_id, profile=profile, now=now)

        if table is None or not table.session_token:
            raise NotFoundError("Mesa não encontrada")
        return self._to_session(table)

    def _fallback(
        self,
        db: Session,
        *,
        table_id: uuid.UUID,
        restaurant_id: uuid.UUID,
        profile: SessionProfile,
        now: Optional[datetime],
    ) -> Optional[DiningTable]:
        try:
            return crud.table.force_new_session(
                db, table_id=table_id, restaurant_id=restaurant_id, duration=profile.duration, now=now
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                "Falha no fallback de ensure_session (mesa %s, restaurante %s)",
                table_id,
                restaurant_id,
                exc_info=True,
            )
            raise TransientInfraError("Não foi possível atualizar a sessão") from e

    def renew_all(
        self, db: Session, *, restaurant_id: uuid.UUID, now: Optional[datetime] = None
    ) -> Tuple[List[TableSession], List[SessionFailure]]:
        """
        Garante sessão para todas as mesas do restaurante (threshold 0:
        tokens ainda válidos são mantidos, vencidos são trocados).
        Retorna (sessões renovadas, falhas por mesa).
        """
        renewed: List[TableSession] = []
        failed: List[SessionFailure] = []
        for table in crud.table.get_multi_by_restaurant(db, restaurant_id=restaurant_id):
            table_id, table_number = table.id, table.table_number
            profile = profile_for(table_id)
            try:
                renewed.append(
                    self.ensure_session(
                        db,
                        table_id=table_id,
                        restaurant_id=restaurant_id,
                        profile=SessionProfile(duration=profile.duration, threshold=timedelta(0)),
                        now=now,
                    )
                )
            except (NotFoundError, ForbiddenError, TransientInfraError) as e:
                logger.warning(
                    "renew_all: mesa %s (restaurante %s) não renovada: %s", table_id, restaurant_id, e.message
                )
                failed.append(SessionFailure(table_id=table_id, table_number=table_number, message=e.message))
        return renewed, failed

    @staticmethod
    def _to_session(table: DiningTable) -> TableSession:
        return TableSession(
            table_id=table.id,
            table_number=table.table_number,
            token=table.session_token,
            expires_at=as_utc(table.session_expires_at),
        )


session_service = SessionService()
