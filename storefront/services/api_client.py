import logging
import time
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from storefront.core.config import settings
from storefront.core.exceptions import ApiError
from storefront.core.monitoring import monitoring
from storefront.schemas.cart import ApiEnvelope

logger = logging.getLogger(__name__)


class ApiClient:
    """Async HTTP access to the storefront backend (bearer token auth)"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        monitor=None,
    ):
        self.base_url = base_url or settings.API_BASE_URL
        self.monitor = monitor or monitoring

        client_kwargs: Dict[str, Any] = {
            "base_url": self.base_url,
            "headers": {"Accept": "application/json"},
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        # Without an explicit value httpx keeps its own default
        timeout = settings.REQUEST_TIMEOUT_SECONDS if timeout is None else timeout
        if timeout is not None:
            client_kwargs["timeout"] = timeout

        self.client = httpx.AsyncClient(**client_kwargs)
        logger.debug(f"API client initialized - base URL: {self.base_url}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def close(self):
        """Cleanup resources"""
        await self.client.aclose()

    @staticmethod
    def auth_headers(token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        json_body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        files: Any = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request; transport failures become ApiError"""
        endpoint = f"{method.upper()} {path}"
        headers = self.auth_headers(token) if token else None

        start_time = time.perf_counter()
        try:
            response = await self.client.request(
                method.upper(),
                path,
                headers=headers,
                json=json_body,
                params=params,
                files=files,
                data=data,
            )
        except httpx.HTTPError as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            self.monitor.record_request(endpoint, success=False, response_time_ms=elapsed_ms)
            self.monitor.record_error(str(e), endpoint)
            raise ApiError(f"Connection error: {e}") from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.monitor.record_request(endpoint, success=response.is_success, response_time_ms=elapsed_ms)
        if not response.is_success:
            self.monitor.record_error(f"HTTP {response.status_code}", endpoint)
        return response

    @staticmethod
    def parse_envelope(response: httpx.Response) -> ApiEnvelope:
        """Decode the {success, message, data} wrapper, never raises"""
        try:
            payload = response.json()
        except ValueError:
            return ApiEnvelope(
                success=False,
                message=response.text or f"HTTP error! status: {response.status_code}",
            )

        if not isinstance(payload, dict):
            return ApiEnvelope(success=False, message="Malformed response from server")

        try:
            return ApiEnvelope.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Malformed envelope from {response.request.url}: {e}")
            return ApiEnvelope(success=False, message="Malformed response from server")

    @staticmethod
    def error_message(response: httpx.Response, fallback: Optional[str] = None) -> str:
        """Server's message when it sent one, otherwise status + body"""
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        if fallback:
            return fallback
        return f"HTTP {response.status_code}: {response.text}"
