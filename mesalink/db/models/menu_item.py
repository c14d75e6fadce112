# mesalink/db/models/menu_item.py
from sqlalchemy import JSON, Boolean, Column, Numeric, String, Text, Uuid

from mesalink.db.base_class import Base


class MenuItem(Base):
    __tablename__ = "menu_items"

    restaurant_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    name = Column(String(120), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(40), nullable=True, index=True)
    image_urls = Column(JSON, nullable=False, default=list)
    allergens = Column(JSON, nullable=False, default=list)
    is_available = Column(Boolean, default=True, nullable=False)
