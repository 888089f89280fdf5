import logging
from typing import Any, Optional

import httpx

from app.core.config import settings
from app.exceptions import CarrierException

logger = logging.getLogger(__name__)


class PorterClient:
    """Thin async client for the Porter delivery API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.porter_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.porter_timeout_seconds,
            headers={
                "X-API-KEY": api_key if api_key is not None else settings.porter_api_key,
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    async def get_quote(self, quote_request: dict[str, Any]) -> dict[str, Any]:
        return await self._request("GET", "/v1/get_quote", "get_quote", json=quote_request)

    async def create_order(self, order_request: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "POST", "/v1/orders/create", "create_order", json=order_request
        )

    async def cancel_order(self, porter_order_id: str) -> dict[str, Any]:
        return await self._request(
            "POST", f"/v1/orders/{porter_order_id}/cancel", "cancel_order"
        )

    async def track_order(self, porter_order_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/orders/{porter_order_id}", "track_order")

    async def _request(
        self, method: str, path: str, operation: str, json: Optional[dict] = None
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.RequestError as e:
            logger.error("Porter %s request failed: %s", operation, e)
            raise CarrierException(
                message=f"Porter API unreachable: {e}", operation=operation
            ) from e

        if response.status_code not in (200, 201):
            logger.error(
                "Porter %s returned %s: %s",
                operation,
                response.status_code,
                response.text[:200],
                extra={"operation": operation, "status_code": response.status_code},
            )
            raise CarrierException(
                message=f"Porter API error (status {response.status_code})",
                operation=operation,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CarrierException(
                message="Porter API returned a non-JSON body", operation=operation
            ) from e

    async def close(self) -> None:
        await self._client.aclose()
