# mesalink/services/order_service.py
import logging
import secrets
from typing import List, Optional, Sequence
import uuid

from sqlalchemy.orm import Session

from mesalink import crud
from mesalink.core.exceptions import ForbiddenError, NotFoundError
from mesalink.db.base_class import as_utc, utcnow
from mesalink.db.models.order import Order, OrderStatus
from mesalink.schemas.order import OrderCreate
from mesalink.services.order_state_machine import OrderStateMachine, order_state_machine
from mesalink.services.redis_service import RedisPublisher, orders_channel, redis_publisher

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "A sessão da mesa expirou"


class OrderService:
    def __init__(
        self,
        state_machine: OrderStateMachine = order_state_machine,
        publisher: RedisPublisher = redis_publisher,
    ):
        self.state_machine = state_machine
        self.publisher = publisher

    def submit_order(self, db: Session, *, order_in: OrderCreate) -> Order:
        """
        Valida a mesa e a sessão apresentada e grava o pedido como `pending`.

        O envio é o portão definitivo: a sessão pode ter sido renovada ou
        trocada entre o carregamento do cardápio e o envio do pedido.
        """
        table = crud.table.get(db, id=order_in.table_id)
        if not table or table.restaurant_id != order_in.restaurant_id:
            logger.info(
                "submit_order: mesa %s inválida para restaurante %s", order_in.table_id, order_in.restaurant_id
            )
            raise NotFoundError("Mesa não válida")

        if not table.is_active or not table.session_token:
            logger.info("submit_order: mesa %s sem sessão ativa", table.id)
            raise ForbiddenError(SESSION_EXPIRED_MESSAGE)

        presented = order_in.session_token.encode("utf-8")
        if not secrets.compare_digest(table.session_token.encode("utf-8"), presented):
            logger.info("submit_order: token não confere para a mesa %s", table.id)
            raise ForbiddenError(SESSION_EXPIRED_MESSAGE)

        if table.session_expires_at and as_utc(table.session_expires_at) < utcnow():
            logger.info("submit_order: sessão vencida para a mesa %s", table.id)
            raise ForbiddenError(SESSION_EXPIRED_MESSAGE)

        order = crud.order.create(db, obj_in=order_in)
        logger.info("Pedido %s criado para a mesa %s (restaurante %s)", order.id, table.id, order.restaurant_id)

        self.publisher.publish(
            orders_channel(order.restaurant_id),
            {
                "event": "order_created",
                "orderId": str(order.id),
                "tableId": str(order.table_id),
                "itemsCount": len(order.items),
            },
        )
        return order

    def list_orders(
        self,
        db: Session,
        *,
        restaurant_id: uuid.UUID,
        statuses: Optional[Sequence[OrderStatus]] = None,
        skip: int = 0,
        limit: int = 200,
    ) -> List[Order]:
        return crud.order.get_multi_by_restaurant(
            db, restaurant_id=restaurant_id, statuses=statuses, skip=skip, limit=limit
        )

    def transition(
        self, db: Session, *, order_id: uuid.UUID, restaurant_id: uuid.UUID, next_status: OrderStatus
    ) -> Order:
        """
        Avança o status do pedido.

        Mesmo status é no-op (retries idempotentes). A gravação é um
        compare-and-set sobre o status lido; se outra requisição mudou o
        pedido no meio tempo, ele é relido e avaliado de novo.
        """
        while True:
            order = crud.order.get(db, id=order_id)
            if not order or order.restaurant_id != restaurant_id:
                logger.info("transition: pedido %s não encontrado no restaurante %s", order_id, restaurant_id)
                raise NotFoundError("Pedido não encontrado")

            current = order.status
            if self.state_machine.is_noop(current, next_status):
                return order

            self.state_machine.validate(current, next_status)

            if crud.order.compare_and_set_status(db, order_id=order_id, expected=current, new=next_status):
                order = crud.order.get(db, id=order_id)
                logger.info("Pedido %s: %s -> %s", order_id, current.value, next_status.value)
                self.publisher.publish(
                    orders_channel(restaurant_id),
                    {
                        "event": "order_status_changed",
                        "orderId": str(order_id),
                        "previousStatus": current.value,
                        "status": next_status.value,
                    },
                )
                return order

            logger.info("transition: pedido %s mudou durante a atualização; reavaliando", order_id)


order_service = OrderService()
