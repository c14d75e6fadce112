from typing import List, Optional
import uuid

from sqlalchemy.orm import Session

from mesalink.db.models.menu_item import MenuItem
from mesalink.schemas.menu_item import MenuItemCreate


class CRUDMenuItem:
    """Leitura do cardápio público. O cadastro fica no painel do dono; `create` serve para carga inicial."""

    def get(self, db: Session, id: uuid.UUID) -> Optional[MenuItem]:
        return db.query(MenuItem).filter(MenuItem.id == id).first()

    def get_available_by_restaurant(self, db: Session, *, restaurant_id: uuid.UUID) -> List[MenuItem]:
        return (
            db.query(MenuItem)
            .filter(MenuItem.restaurant_id == restaurant_id, MenuItem.is_available.is_(True))
            .order_by(MenuItem.category, MenuItem.name)
            .all()
        )

    def create(self, db: Session, *, obj_in: MenuItemCreate) -> MenuItem:
        db_obj = MenuItem(**obj_in.model_dump())
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


menu_item = CRUDMenuItem()
