"""
Quadro da cozinha: consulta periódica de `GET /orders` e avanço de status.

Os pedidos ficam agrupados em três colunas fixas (pending, preparing, ready);
entregues somem do quadro. Cada tick do intervalo roda como tarefa
independente, então um request travado nunca atrasa o próximo.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from mesalink.client.api import MesaLinkApi
from mesalink.client.config import client_settings
from mesalink.core.exceptions import AppError

logger = logging.getLogger(__name__)

BOARD_COLUMNS = ("pending", "preparing", "ready")
# Limite máximo aceito por `GET /orders`
BOARD_PAGE_SIZE = 500

NEXT_STATUS = {
    "pending": "preparing",
    "preparing": "ready",
    "ready": "delivered",
}

COLUMN_TITLES = {
    "pending": "Recebidos",
    "preparing": "Em preparo",
    "ready": "Prontos",
}

LOAD_ERROR_MESSAGE = "Não foi possível carregar os pedidos. Tentaremos novamente em instantes."
ADVANCE_ERROR_MESSAGE = "Não foi possível atualizar o pedido. Tente novamente."


@dataclass
class KitchenOrderItem:
    name: str
    quantity: int


@dataclass
class KitchenOrder:
    id: str
    table_id: str
    status: str
    items: List[KitchenOrderItem] = field(default_factory=list)
    allergy_notes: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None


def parse_items(raw: Any) -> List[KitchenOrderItem]:
    """Linhas sem nome ou sem quantidade numérica são descartadas."""
    if not isinstance(raw, list):
        return []
    items = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        quantity = entry.get("quantity")
        if not isinstance(name, str) or not name:
            continue
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
            continue
        items.append(KitchenOrderItem(name=name, quantity=int(quantity)))
    return items


def map_order(raw: Dict[str, Any]) -> KitchenOrder:
    return KitchenOrder(
        id=str(raw["id"]),
        table_id=str(raw.get("tableId", "")),
        status=raw.get("status", ""),
        items=parse_items(raw.get("items")),
        allergy_notes=raw.get("allergyNotes"),
        notes=raw.get("notes"),
        created_at=raw.get("createdAt"),
    )


class KitchenBoard:
    def __init__(
        self,
        api: MesaLinkApi,
        restaurant_id: str,
        poll_interval: float = client_settings.POLL_INTERVAL,
    ):
        self.api = api
        self.restaurant_id = restaurant_id
        self.poll_interval = poll_interval
        self.orders: List[KitchenOrder] = []
        self.error: Optional[str] = None
        self.loading = True
        self._advancing: Set[str] = set()
        self._loop_task: Optional[asyncio.Task] = None
        self._tick_tasks: Set[asyncio.Task] = set()
        self._refresh_seq = 0
        self._applied_seq = 0

    @property
    def columns(self) -> Dict[str, List[KitchenOrder]]:
        return {status: [order for order in self.orders if order.status == status] for status in BOARD_COLUMNS}

    def is_advancing(self, order_id: str) -> bool:
        return order_id in self._advancing

    async def refresh(self) -> None:
        """Recarrega os pedidos; em caso de falha mantém a lista anterior e registra `error`.

        Respostas que chegam depois de uma mais recente já aplicada são descartadas.
        """
        self._refresh_seq += 1
        seq = self._refresh_seq
        try:
            rows = await self.api.list_orders(self.restaurant_id, statuses=BOARD_COLUMNS, limit=BOARD_PAGE_SIZE)
        except AppError as exc:
            logger.error(f"Falha ao carregar pedidos do restaurante {self.restaurant_id}: {exc.message}")
            if self._apply(seq):
                self.error = exc.message if exc.status_code < 500 else LOAD_ERROR_MESSAGE
            return

        orders = []
        for row in rows:
            try:
                orders.append(map_order(row))
            except (KeyError, TypeError) as exc:
                logger.warning(f"Pedido malformado ignorado no quadro: {exc!r}")
        if self._apply(seq):
            self.orders = [order for order in orders if order.status != "delivered"]
            self.error = None

    def _apply(self, seq: int) -> bool:
        self.loading = False
        if seq < self._applied_seq:
            logger.debug(f"Resposta antiga do quadro descartada (#{seq} < #{self._applied_seq})")
            return False
        self._applied_seq = seq
        return True

    async def advance(self, order: KitchenOrder) -> bool:
        """Move o pedido para a próxima coluna. Retorna False se já há um avanço em andamento."""
        next_status = NEXT_STATUS.get(order.status)
        if next_status is None or order.id in self._advancing:
            return False

        self._advancing.add(order.id)
        self.error = None
        try:
            await self.api.update_order_status(self.restaurant_id, order.id, next_status)
        except AppError as exc:
            logger.error(f"Falha ao avançar pedido {order.id} para {next_status}: {exc.message}")
            self.error = exc.message if exc.status_code < 500 else ADVANCE_ERROR_MESSAGE
            return False
        finally:
            self._advancing.discard(order.id)

        await self.refresh()
        return True

    def _spawn_tick(self) -> None:
        task = asyncio.create_task(self.refresh())
        self._tick_tasks.add(task)
        task.add_done_callback(self._tick_tasks.discard)

    async def _run(self) -> None:
        while True:
            self._spawn_tick()
            await asyncio.sleep(self.poll_interval)

    def start(self) -> None:
        if self._loop_task is None or self._loop_task.done():
            self._loop_task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        tasks = list(self._tick_tasks)
        if self._loop_task is not None:
            tasks.append(self._loop_task)
            self._loop_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tick_tasks.clear()

    async def __aenter__(self) -> "KitchenBoard":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
