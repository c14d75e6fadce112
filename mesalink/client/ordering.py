"""
Fluxo de envio do pedido no tablet da mesa.

Junta carrinho, cache de sessão, API e fila offline: sem conexão (ou com
falha de rede/infra) o pedido vai para a fila e o carrinho é limpo; erros de
validação, autenticação ou mesa inexistente sobem para a tela e o carrinho
fica como estava.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from mesalink.client.api import MesaLinkApi
from mesalink.client.cart import Cart
from mesalink.client.offline_queue import FlushResult, OfflineOrderQueue
from mesalink.client.session_cache import SessionCache
from mesalink.core.exceptions import AppError, TransientInfraError
from mesalink.core.text_sanitizer import sanitize_optional

logger = logging.getLogger(__name__)

MAX_NOTES_LENGTH = 500


class SessionUnavailableError(AppError):
    status_code = 403
    default_message = "A sessão da mesa não pôde ser renovada. Recarregue o cardápio e tente novamente."


class EmptyCartError(AppError):
    status_code = 400
    default_message = "O carrinho está vazio"


class SubmitStatus(str, enum.Enum):
    SENT = "sent"
    QUEUED = "queued"


@dataclass
class SubmitResult:
    status: SubmitStatus
    order_id: Optional[str] = None


class OrderingClient:
    def __init__(
        self,
        api: MesaLinkApi,
        cart: Cart,
        sessions: SessionCache,
        queue: OfflineOrderQueue,
        restaurant_id: str,
        table_id: str,
    ):
        self.api = api
        self.cart = cart
        self.sessions = sessions
        self.queue = queue
        self.restaurant_id = restaurant_id
        self.table_id = table_id

    async def _resolve_session_token(self) -> str:
        token = self.sessions.get_valid(self.table_id)
        if token:
            return token
        refreshed = await self.sessions.ensure(self.restaurant_id, self.table_id, force_refresh=True)
        if refreshed is None:
            logger.warning(f"Sem sessão válida para a mesa {self.table_id}")
            raise SessionUnavailableError()
        return refreshed.session_token

    def build_payload(
        self, session_token: str, allergy_notes: Optional[str] = None, notes: Optional[str] = None
    ) -> Dict[str, Any]:
        total = round(self.cart.total(), 2)
        return {
            "restaurantId": self.restaurant_id,
            "tableId": self.table_id,
            "sessionToken": session_token,
            "items": self.cart.order_items(),
            "allergyNotes": sanitize_optional(
                allergy_notes, field_label="Notas de alergia", max_length=MAX_NOTES_LENGTH
            ),
            "notes": sanitize_optional(
                notes, field_label="Notas", max_length=MAX_NOTES_LENGTH, allow_newlines=True
            ),
            "subtotal": total,
            "tax": 0,
            "total": total,
        }

    def _queue(self, payload: Dict[str, Any]) -> SubmitResult:
        self.queue.enqueue(payload)
        self.cart.clear()
        return SubmitResult(status=SubmitStatus.QUEUED)

    async def submit(
        self,
        *,
        allergy_notes: Optional[str] = None,
        notes: Optional[str] = None,
        is_online: bool = True,
    ) -> SubmitResult:
        """Envia o carrinho como pedido.

        Levanta `SessionUnavailableError` quando não há token, `TextSanitizationError`
        para notas inválidas e as exceções da API para rejeições do servidor.
        """
        if self.cart.is_empty():
            raise EmptyCartError()

        session_token = await self._resolve_session_token()
        payload = self.build_payload(session_token, allergy_notes=allergy_notes, notes=notes)

        if not is_online:
            return self._queue(payload)

        try:
            order_id = await self.api.submit_order(payload)
        except TransientInfraError as exc:
            logger.warning(f"Pedido da mesa {self.table_id} não enviado ({exc.message}), indo para a fila")
            return self._queue(payload)

        self.cart.clear()
        logger.info(f"Pedido {order_id} enviado pela mesa {self.table_id}")
        return SubmitResult(status=SubmitStatus.SENT, order_id=order_id)

    async def on_online(self) -> FlushResult:
        """A conexão voltou: reenvia a fila."""
        return await self.queue.flush(self.api.submit_order)

    async def on_mount(self, is_online: bool) -> Optional[FlushResult]:
        if not is_online:
            return None
        return await self.queue.flush(self.api.submit_order)
