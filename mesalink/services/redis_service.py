# mesalink/services/redis_service.py
import json
import logging
from typing import Any, Dict, Optional

import redis

from mesalink.core.config import settings

logger = logging.getLogger(__name__)


class RedisPublisher:
    """Publica eventos de pedidos no Redis. Best-effort: falhas só geram log."""

    def __init__(self, host: str = settings.REDIS_HOST, port: int = settings.REDIS_PORT, enabled: bool = settings.REDIS_ENABLED):
        self.host = host
        self.port = port
        self.enabled = enabled
        self._client: Optional[redis.Redis] = None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis(
                host=self.host,
                port=self.port,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
        return self._client

    def publish(self, channel: str, message: Dict[str, Any]) -> bool:
        if not self.enabled:
            return False
        try:
            self.client.publish(channel, json.dumps(message, default=str))
        except redis.exceptions.RedisError as e:
            logger.warning("Não foi possível publicar no canal %s: %s", channel, e)
            return False
        logger.debug("Evento %s publicado no canal %s", message.get("event"), channel)
        return True

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def orders_channel(restaurant_id: Any) -> str:
    return f"restaurant_{restaurant_id}_orders"


# Instância global para ser usada na aplicação
redis_publisher = RedisPublisher()
