# mesalink/crud/crud_order.py
from decimal import Decimal
from typing import List, Optional, Sequence
import uuid

from sqlalchemy import update
from sqlalchemy.orm import Session

from mesalink.db.base_class import utcnow
from mesalink.db.models.order import Order, OrderStatus
from mesalink.schemas.order import OrderCreate


class CRUDOrder:
    def get(self, db: Session, id: uuid.UUID) -> Optional[Order]:
        return db.query(Order).filter(Order.id == id).populate_existing().first()

    def get_multi_by_restaurant(
        self,
        db: Session,
        *,
        restaurant_id: uuid.UUID,
        statuses: Optional[Sequence[OrderStatus]] = None,
        skip: int = 0,
        limit: int = 200,
    ) -> List[Order]:
        query = db.query(Order).filter(Order.restaurant_id == restaurant_id)
        if statuses:
            query = query.filter(Order.status.in_(list(statuses)))
        return query.order_by(Order.created_at.desc()).offset(skip).limit(limit).all()

    def create(self, db: Session, *, obj_in: OrderCreate) -> Order:
        db_obj = Order(
            restaurant_id=obj_in.restaurant_id,
            table_id=obj_in.table_id,
            session_token=obj_in.session_token,
            items=[line.snapshot() for line in obj_in.items],
            allergy_notes=obj_in.allergy_notes,
            notes=obj_in.notes,
            subtotal=obj_in.subtotal.quantize(Decimal("0.01")),
            tax=obj_in.tax.quantize(Decimal("0.01")),
            total=obj_in.total.quantize(Decimal("0.01")),
            status=OrderStatus.PENDING,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def compare_and_set_status(
        self, db: Session, *, order_id: uuid.UUID, expected: OrderStatus, new: OrderStatus
    ) -> bool:
        """Grava `new` somente se o status ainda for `expected`. Retorna se a linha foi alterada."""
        result = db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == expected)
            .values(status=new, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        db.commit()
        return result.rowcount == 1


order = CRUDOrder()
