"""
Cliente HTTP assíncrono da API MesaLink.

Respostas de erro voltam a ser as mesmas exceções de `mesalink.core.exceptions`
que o servidor levantou; falhas de transporte (timeout, DNS, conexão recusada)
viram `ConnectivityError`.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from mesalink.client.config import client_settings
from mesalink.core.exceptions import (
    AppError,
    AuthError,
    ConnectivityError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    TransientInfraError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _error_from_response(response: httpx.Response) -> AppError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = body.get("message") or body.get("detail") or None
    status = response.status_code

    if status == 400 and "currentStatus" in body:
        return InvalidTransitionError(
            body.get("currentStatus"), body.get("allowedStatuses") or [], message=message
        )
    if status in (400, 422):
        return ValidationError(message, errors=body.get("errors") or [])
    if status == 401:
        return AuthError(message)
    if status == 403:
        return ForbiddenError(message)
    if status == 404:
        return NotFoundError(message)
    if status >= 500:
        return TransientInfraError(message)

    error = AppError(message)
    error.status_code = status
    return error


class MesaLinkApi:
    def __init__(
        self,
        base_url: str = client_settings.API_BASE_URL,
        *,
        timeout: float = client_settings.REQUEST_TIMEOUT,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else None
        self._client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, headers=headers, transport=transport
        )

    async def __aenter__(self) -> "MesaLinkApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.warning(f"{method} {url}: falha de rede ({exc.__class__.__name__})")
            raise ConnectivityError() from exc

        if response.is_success:
            if not response.content:
                return None
            return response.json()

        error = _error_from_response(response)
        logger.info(f"{method} {url} rejeitado ({response.status_code}): {error.message}")
        raise error

    async def ensure_session(
        self, restaurant_id: str, table_id: str, persistent: bool = False
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/sessions",
            json={"restaurantId": restaurant_id, "tableId": table_id, "persistent": persistent},
        )

    async def renew_all_sessions(self, restaurant_id: str) -> Dict[str, Any]:
        return await self._request("POST", "/sessions/renew-all", json={"restaurantId": restaurant_id})

    async def submit_order(self, payload: Dict[str, Any]) -> str:
        body = await self._request("POST", "/orders", json=payload)
        return body["orderId"]

    async def list_orders(
        self, restaurant_id: str, statuses: Optional[Sequence[str]] = None, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"restaurantId": restaurant_id}
        if statuses:
            params["status"] = list(statuses)
        if limit:
            params["limit"] = limit
        body = await self._request("GET", "/orders", params=params)
        return body.get("orders", [])

    async def update_order_status(self, restaurant_id: str, order_id: str, next_status: str) -> Dict[str, Any]:
        return await self._request(
            "PATCH",
            "/orders",
            json={"restaurantId": restaurant_id, "orderId": order_id, "nextStatus": next_status},
        )

    async def list_menu_items(self, restaurant_id: str) -> List[Dict[str, Any]]:
        body = await self._request("GET", "/menu-items", params={"restaurantId": restaurant_id})
        return body.get("items", [])
