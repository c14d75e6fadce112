"""Fila de pedidos feitos sem conexão, reenviados quando a rede volta."""
import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List

from mesalink.client.storage import KeyValueStorage, read_json, write_json
from mesalink.core.exceptions import AppError

logger = logging.getLogger(__name__)

ORDER_QUEUE_KEY = "mesalink-order-queue"


@dataclass
class FlushResult:
    sent: int
    remaining: int


class OfflineOrderQueue:
    def __init__(self, storage: KeyValueStorage, clock: Callable[[], float] = time.time):
        self.storage = storage
        self._clock = clock
        self._flush_lock = asyncio.Lock()

    def entries(self) -> List[Dict[str, Any]]:
        data = read_json(self.storage, ORDER_QUEUE_KEY)
        if not isinstance(data, list):
            return []
        return [entry for entry in data if isinstance(entry, dict) and "payload" in entry]

    def __len__(self) -> int:
        return len(self.entries())

    def enqueue(self, payload: Dict[str, Any]) -> None:
        queue = self.entries()
        queue.append({"id": uuid.uuid4().hex, "createdAt": int(self._clock() * 1000), "payload": payload})
        write_json(self.storage, ORDER_QUEUE_KEY, queue)
        logger.info(f"Pedido da mesa {payload.get('tableId')} guardado na fila offline ({len(queue)} na fila)")

    async def flush(self, submit: Callable[[Dict[str, Any]], Awaitable[Any]]) -> FlushResult:
        """Reenvia em ordem; os que falharem ficam na fila para a próxima tentativa.

        Uma flush por vez: uma segunda chamada espera a primeira terminar e só
        vê o que sobrou. Pedidos enfileirados durante o envio são preservados.
        """
        async with self._flush_lock:
            queue = self.entries()
            if not queue:
                return FlushResult(sent=0, remaining=0)

            sent = []
            for entry in queue:
                try:
                    await submit(entry["payload"])
                except AppError as exc:
                    logger.warning(f"Reenvio de pedido da fila falhou: {exc.message}")
                    continue
                sent.append(entry)

            # Relê a fila: `enqueue` pode ter rodado enquanto esperávamos a rede
            remaining = [entry for entry in self.entries() if entry not in sent]
            if remaining:
                write_json(self.storage, ORDER_QUEUE_KEY, remaining)
            else:
                self.storage.remove_item(ORDER_QUEUE_KEY)

            logger.info(f"Fila offline: {len(sent)} enviados, {len(remaining)} pendentes")
            return FlushResult(sent=len(sent), remaining=len(remaining))
