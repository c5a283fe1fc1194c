import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from pydantic import ValidationError

from storefront.core.exceptions import ApiError, AuthenticationRequired, AuthorizationException
from storefront.schemas.product import ProductData, ProductFilters
from storefront.services.api_client import ApiClient
from storefront.services.session_service import SessionStore

logger = logging.getLogger(__name__)


def _unwrap(payload: Any) -> Any:
    # Accept both a bare payload and the {data: ...} envelope
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


class ProductClient:
    """Catalog reads for everyone, writes for admins"""

    base_path = "/products"

    def __init__(self, api: ApiClient, session: SessionStore):
        self.api = api
        self.session = session

    def _admin_token(self) -> str:
        token = self.session.get_auth_token()
        if not token:
            raise AuthenticationRequired()
        if not self.session.is_admin():
            raise AuthorizationException("Admin access required")
        return token

    @staticmethod
    def _json(response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ApiError("Malformed response from server", response.status_code) from e

    def _raise_for_status(self, response, action: str) -> None:
        if not response.is_success:
            message = self.api.error_message(response, f"HTTP error! status: {response.status_code}")
            logger.error(f"Error {action}: {message}")
            raise ApiError(message, response.status_code)

    async def get_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        filters: Optional[ProductFilters] = None,
    ) -> List[ProductData]:
        params = filters.to_params() if filters else {}
        if search:
            params["search"] = search
        if category:
            params["category"] = category

        response = await self.api.request("GET", self.base_path, params=params or None)
        self._raise_for_status(response, "fetching products")

        data = _unwrap(self._json(response))
        if not isinstance(data, list):
            raise ApiError("Malformed product list", response.status_code)

        products = []
        for raw in data:
            try:
                products.append(ProductData.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed product: {e}")
        return products

    async def get_product(self, product_id: int) -> ProductData:
        response = await self.api.request("GET", f"{self.base_path}/{product_id}")
        self._raise_for_status(response, "fetching product")
        try:
            return ProductData.model_validate(_unwrap(self._json(response)))
        except ValidationError as e:
            raise ApiError(f"Malformed product {product_id}", response.status_code) from e

    async def get_categories(self) -> List[str]:
        """Distinct categories in catalog order"""
        categories: List[str] = []
        for product in await self.get_products():
            if product.category and product.category not in categories:
                categories.append(product.category)
        return categories

    async def create_product(self, product: ProductData) -> ProductData:
        token = self._admin_token()
        body = product.model_dump(mode="json", exclude_none=True)
        response = await self.api.request("POST", self.base_path, token=token, json_body=body)
        self._raise_for_status(response, "creating product")
        try:
            return ProductData.model_validate(_unwrap(self._json(response)))
        except ValidationError as e:
            raise ApiError("Product created but response was malformed", response.status_code) from e

    async def update_product(self, product_id: int, product: ProductData) -> Optional[ProductData]:
        """Returns None when the backend answers with an empty body"""
        token = self._admin_token()
        body = product.model_dump(mode="json", exclude_none=True)
        response = await self.api.request("PUT", f"{self.base_path}/{product_id}", token=token, json_body=body)
        self._raise_for_status(response, "updating product")

        if not response.content:
            return None
        try:
            return ProductData.model_validate(_unwrap(response.json()))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Product {product_id} updated but response was unreadable: {e}")
            return None

    async def delete_product(self, product_id: int) -> None:
        token = self._admin_token()
        response = await self.api.request("DELETE", f"{self.base_path}/{product_id}", token=token)
        self._raise_for_status(response, "deleting product")
        logger.info(f"Product {product_id} deleted")

    async def upload_images(self, paths: Iterable[Union[str, Path]]) -> List[str]:
        token = self._admin_token()
        files = [("images[]", (Path(p).name, Path(p).read_bytes())) for p in paths]
        response = await self.api.request("POST", "/upload", token=token, files=files)
        self._raise_for_status(response, "uploading images")
        data = self._json(response)
        if not isinstance(data, dict):
            return []
        return data.get("urls") or data.get("images") or []
