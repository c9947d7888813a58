"""Storefront backend API client."""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError as ModelValidationError

from .exceptions import TransportError
from .interfaces import ItemService, PaymentService
from .models import LocalFile, PaymentRequest, PaymentResponse, StockItem

logger = logging.getLogger(__name__)


class StorefrontClient(ItemService, PaymentService):
    """Client for the Item Service and Payment Service endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the storefront client.

        Args:
            base_url: Root URL of the backend, e.g. http://localhost:5000
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, used by tests to stub the backend
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            follow_redirects=True,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "StorefrontClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def _decode(self, response: httpx.Response, what: str) -> Any:
        """Check the status and decode the JSON body of a response."""
        if response.is_error:
            raise TransportError(
                f"{what} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"{what} returned invalid JSON: {e}", status_code=response.status_code
            ) from e

    async def list_items(self) -> list[StockItem]:
        """
        Fetch the catalog.

        Returns:
            Items in the order the service lists them

        Raises:
            TransportError: On connection problems, error statuses or bad payloads
        """
        logger.info("=== LIST ITEMS ===")
        try:
            response = await self.client.get("/api/items")
        except httpx.HTTPError as e:
            logger.error(f"Item service connection error: {e}")
            raise TransportError(f"Item service unavailable: {e}") from e

        data = self._decode(response, "List items")
        if not isinstance(data, list):
            raise TransportError(
                f"Unexpected item list payload: expected a JSON array, got {type(data).__name__}"
            )

        items = []
        for index, record in enumerate(data):
            try:
                items.append(StockItem.model_validate(record))
            except ModelValidationError as e:
                logger.warning(f"Skipping malformed item at index {index}: {e}")

        logger.info(f"Fetched {len(items)} item(s)")
        return items

    async def create_item(
        self, fields: dict[str, str], image: Optional[LocalFile] = None
    ) -> StockItem:
        """
        Create a catalog item with a multipart request.

        Args:
            fields: Text parts of the form (name, description, price, category, stock)
            image: Image to upload in the "image" part, if any

        Returns:
            The item as stored by the service

        Raises:
            TransportError: On connection problems, error statuses or bad payloads
        """
        logger.info(f"=== CREATE ITEM: name={fields.get('name')!r} ===")
        try:
            if image is not None:
                with open(image.path, "rb") as fh:
                    response = await self.client.post(
                        "/api/items",
                        data=fields,
                        files={"image": (image.filename, fh, image.content_type)},
                    )
            else:
                # Force multipart even without a file part
                response = await self.client.post(
                    "/api/items",
                    files=[(name, (None, value)) for name, value in fields.items()],
                )
        except OSError as e:
            # httpx errors are not OSError subclasses, so this is the image file
            logger.error(f"Could not read image {image.path if image else ''}: {e}")
            raise TransportError(f"Could not read image file: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Item service connection error: {e}")
            raise TransportError(f"Item service unavailable: {e}") from e

        data = self._decode(response, "Create item")
        try:
            item = StockItem.model_validate(data)
        except ModelValidationError as e:
            raise TransportError(f"Unexpected item payload: {e}") from e

        logger.info(f"Item created: {item.name}")
        return item

    async def create_payment(
        self, request: PaymentRequest, token: Optional[str] = None
    ) -> PaymentResponse:
        """
        Send a payment request.

        Args:
            request: Payment method, transaction id and optional card details
            token: Bearer token for the Authorization header

        Returns:
            The service's reply; check `success`

        Raises:
            TransportError: On connection problems, error statuses or bad payloads
        """
        logger.info(
            f"=== PAYMENT: method={request.payment_method.value}, "
            f"transaction={request.transaction_id} ==="
        )
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self.client.post(
                "/api/payment", json=request.to_wire(), headers=headers
            )
        except httpx.HTTPError as e:
            logger.error(f"Payment service connection error: {e}")
            raise TransportError(f"Payment service unavailable: {e}") from e

        data = self._decode(response, "Payment")
        try:
            return PaymentResponse.model_validate(data)
        except ModelValidationError as e:
            raise TransportError(f"Unexpected payment payload: {e}") from e
