"""
Cache local do token de sessão da mesa.

Cada mesa tem um registro `{sessionToken, expiresAt, expiresAtMs}` guardado
em `mesalink-table-session:<tableId>`. O token em cache é reutilizado
enquanto faltar mais que a margem (`buffer_ms`) para vencer; depois disso o
servidor é consultado, e o `ensure_session` do servidor devolve o mesmo token
se ele ainda estiver válido lá.
"""
import asyncio
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from mesalink.client.api import MesaLinkApi
from mesalink.client.config import client_settings
from mesalink.client.storage import KeyValueStorage, read_json, write_json
from mesalink.core.exceptions import AppError

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "mesalink-table-session"


def _now_ms() -> float:
    return time.time() * 1000


def storage_key(table_id: str) -> str:
    return f"{STORAGE_PREFIX}:{table_id}"


def parse_expires_at(value) -> Optional[float]:
    """ISO-8601 -> milissegundos desde a época; None se não der para interpretar."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000


@dataclass
class CachedSession:
    session_token: str
    expires_at: str
    expires_at_ms: float

    def to_record(self) -> dict:
        return {
            "sessionToken": self.session_token,
            "expiresAt": self.expires_at,
            "expiresAtMs": self.expires_at_ms,
        }


class SessionCache:
    def __init__(
        self,
        api: MesaLinkApi,
        storage: KeyValueStorage,
        *,
        buffer_ms: int = client_settings.SESSION_BUFFER_MS,
        persistent_table_ids: Optional[Iterable[str]] = None,
        clock: Callable[[], float] = _now_ms,
    ):
        self.api = api
        self.storage = storage
        self.buffer_ms = buffer_ms
        if persistent_table_ids is None:
            persistent_table_ids = client_settings.persistent_table_ids
        self.persistent_table_ids = set(persistent_table_ids)
        self._clock = clock

    def read(self, table_id: str) -> Optional[CachedSession]:
        data = read_json(self.storage, storage_key(table_id))
        if not isinstance(data, dict):
            return None
        token = data.get("sessionToken")
        expires_at = data.get("expiresAt")
        if not isinstance(token, str) or not token or not isinstance(expires_at, str) or not expires_at:
            return None

        expires_at_ms = data.get("expiresAtMs")
        if isinstance(expires_at_ms, bool) or not isinstance(expires_at_ms, (int, float)) or not math.isfinite(expires_at_ms):
            expires_at_ms = parse_expires_at(expires_at)
        if not expires_at_ms:
            return None
        return CachedSession(session_token=token, expires_at=expires_at, expires_at_ms=float(expires_at_ms))

    def _persist(self, table_id: str, session_token: str, expires_at: str) -> CachedSession:
        expires_at_ms = parse_expires_at(expires_at)
        if expires_at_ms is None:
            expires_at_ms = self._clock() + self.buffer_ms
        record = CachedSession(session_token=session_token, expires_at=expires_at, expires_at_ms=expires_at_ms)
        write_json(self.storage, storage_key(table_id), record.to_record())
        return record

    def get_valid(self, table_id: str) -> Optional[str]:
        """Token em cache se ainda não venceu (sem margem); não consulta o servidor."""
        cached = self.read(table_id)
        if cached and self._clock() < cached.expires_at_ms:
            return cached.session_token
        return None

    def clear(self, table_id: str) -> None:
        self.storage.remove_item(storage_key(table_id))

    async def ensure(
        self,
        restaurant_id: str,
        table_id: str,
        *,
        force_refresh: bool = False,
        persistent: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Optional[CachedSession]:
        existing = self.read(table_id)
        still_valid = existing is not None and self._clock() + self.buffer_ms < existing.expires_at_ms
        if still_valid and not force_refresh:
            return existing

        persistent = persistent or table_id in self.persistent_table_ids
        request = asyncio.ensure_future(self.api.ensure_session(restaurant_id, table_id, persistent))

        if cancel_event is not None:
            cancelled = asyncio.ensure_future(cancel_event.wait())
            try:
                await asyncio.wait({request, cancelled}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                cancelled.cancel()
            if cancel_event.is_set():
                request.cancel()
                request.add_done_callback(lambda task: task.cancelled() or task.exception())
                logger.info(f"Renovação de sessão da mesa {table_id} cancelada")
                return None

        try:
            payload = await request
        except AppError as exc:
            logger.error(f"Não foi possível gerar sessão para a mesa {table_id}: {exc.message}")
            return existing

        token = payload.get("sessionToken") if isinstance(payload, dict) else None
        if not token:
            logger.error(f"Resposta de sessão sem token para a mesa {table_id}")
            return existing
        return self._persist(table_id, token, payload.get("expiresAt") or "")
