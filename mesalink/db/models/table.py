# mesalink/db/models/table.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from mesalink.db.base_class import Base


class DiningTable(Base):
    """Mesa física de um restaurante. A sessão ativa (token + expiração) vive na própria linha."""

    __tablename__ = "tables"
    __table_args__ = (UniqueConstraint("restaurant_id", "table_number", name="uq_tables_restaurant_number"),)

    restaurant_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    table_number = Column(Integer, nullable=False)
    session_token = Column(String(128), nullable=True, unique=True)
    session_expires_at = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    orders = relationship("Order", back_populates="table", order_by="Order.created_at.desc()")
