# mesalink/db/models/order.py
import enum

from sqlalchemy import JSON, Column, Enum as SAEnum, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from mesalink.db.base_class import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"  # terminal


class Order(Base):
    restaurant_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    table_id = Column(ForeignKey("tables.id"), nullable=False, index=True)
    # Token apresentado no envio; só para auditoria, nunca reutilizado para autorizar
    session_token = Column(String(128), nullable=False)

    # Snapshot das linhas: [{menuItemId, name, price, quantity}]
    items = Column(JSON, nullable=False)
    allergy_notes = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    status = Column(
        SAEnum(
            OrderStatus,
            name="order_status",
            native_enum=False,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )

    table = relationship("DiningTable", back_populates="orders")
