# mesalink/crud/crud_table.py
from datetime import datetime, timedelta
from typing import List, Optional
import secrets
import uuid

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from mesalink.db.base_class import utcnow
from mesalink.db.models.table import DiningTable
from mesalink.schemas.table import TableCreate

SESSION_TOKEN_BYTES = 32


def generate_session_token() -> str:
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


class CRUDTable:
    def get(self, db: Session, id: uuid.UUID) -> Optional[DiningTable]:
        return db.query(DiningTable).filter(DiningTable.id == id).first()

    def get_for_restaurant(
        self, db: Session, *, table_id: uuid.UUID, restaurant_id: uuid.UUID
    ) -> Optional[DiningTable]:
        return (
            db.query(DiningTable)
            .filter(DiningTable.id == table_id, DiningTable.restaurant_id == restaurant_id)
            .populate_existing()
            .first()
        )

    def get_by_number(self, db: Session, *, restaurant_id: uuid.UUID, table_number: int) -> Optional[DiningTable]:
        return (
            db.query(DiningTable)
            .filter(DiningTable.restaurant_id == restaurant_id, DiningTable.table_number == table_number)
            .first()
        )

    def get_multi_by_restaurant(self, db: Session, *, restaurant_id: uuid.UUID) -> List[DiningTable]:
        return (
            db.query(DiningTable)
            .filter(DiningTable.restaurant_id == restaurant_id)
            .order_by(DiningTable.table_number)
            .all()
        )

    def create(self, db: Session, *, obj_in: TableCreate) -> DiningTable:
        existing = self.get_by_number(db, restaurant_id=obj_in.restaurant_id, table_number=obj_in.table_number)
        if existing:
            raise ValueError(f"Mesa {obj_in.table_number} já existe neste restaurante.")

        db_obj = DiningTable(
            restaurant_id=obj_in.restaurant_id,
            table_number=obj_in.table_number,
            is_active=obj_in.is_active,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def ensure_session(
        self,
        db: Session,
        *,
        table_id: uuid.UUID,
        restaurant_id: uuid.UUID,
        duration: timedelta,
        threshold: timedelta,
        now: Optional[datetime] = None,
    ) -> Optional[DiningTable]:
        """
        Renova-ou-reutiliza a sessão da mesa em uma única instrução atômica.

        O UPDATE só casa quando não há token ou quando o tempo restante é
        <= threshold; o banco serializa atualizações concorrentes da mesma
        linha, então quem perde a corrida não casa mais o WHERE e apenas lê
        o token vencedor. Retorna a mesa (já com o token vigente) ou None se
        ela não existe, é de outro restaurante ou está inativa.
        """
        now = now or utcnow()
        stmt = (
            update(DiningTable)
            .where(
                DiningTable.id == table_id,
                DiningTable.restaurant_id == restaurant_id,
                DiningTable.is_active.is_(True),
                or_(
                    DiningTable.session_token.is_(None),
                    DiningTable.session_expires_at.is_(None),
                    DiningTable.session_expires_at <= now + threshold,
                ),
            )
            .values(session_token=generate_session_token(), session_expires_at=now + duration, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        db.execute(stmt)
        table = self.get_for_restaurant(db, table_id=table_id, restaurant_id=restaurant_id)
        db.commit()
        if table is None or not table.is_active:
            return None
        return table

    def force_new_session(
        self,
        db: Session,
        *,
        table_id: uuid.UUID,
        restaurant_id: uuid.UUID,
        duration: timedelta,
        now: Optional[datetime] = None,
    ) -> Optional[DiningTable]:
        """Atualização direta (não atômica) usada apenas como caminho degradado."""
        table = self.get_for_restaurant(db, table_id=table_id, restaurant_id=restaurant_id)
        if table is None or not table.is_active:
            return None
        now = now or utcnow()
        table.session_token = generate_session_token()
        table.session_expires_at = now + duration
        db.add(table)
        db.commit()
        db.refresh(table)
        return table


table = CRUDTable()
