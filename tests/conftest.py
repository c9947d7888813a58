"""
Shared fixtures: fake collaborators for the controllers.

The fakes record every call so tests can assert on what would have gone
over the network.
"""

import asyncio
import json
from typing import Optional

import pytest

from storefront_server.auth import AuthManager
from storefront_server.exceptions import TransportError
from storefront_server.interfaces import ItemService, PaymentService
from storefront_server.models import LocalFile, PaymentRequest, PaymentResponse, StockItem
from storefront_server.storage import CART_KEY, MemoryStore


class FakeItemService(ItemService):
    def __init__(self) -> None:
        self.items: list[StockItem] = []
        self.list_error: Optional[Exception] = None
        self.create_error: Optional[Exception] = None
        self.list_calls = 0
        self.create_calls: list[tuple[dict[str, str], Optional[LocalFile]]] = []
        # When set, create_item waits on it before answering
        self.gate: Optional[asyncio.Event] = None

    async def list_items(self) -> list[StockItem]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.items)

    async def create_item(self, fields, image=None) -> StockItem:
        self.create_calls.append((dict(fields), image))
        if self.gate is not None:
            await self.gate.wait()
        if self.create_error is not None:
            raise self.create_error
        return StockItem.model_validate(
            {
                "name": fields["name"],
                "description": fields["description"],
                "price": fields["price"],
                "stock": fields["stock"],
                "category": fields["category"],
                "image": image.filename if image else None,
            }
        )


class FakePaymentService(PaymentService):
    def __init__(self) -> None:
        self.response = PaymentResponse(success=True)
        self.error: Optional[Exception] = None
        self.calls: list[tuple[PaymentRequest, Optional[str]]] = []
        self.gate: Optional[asyncio.Event] = None

    async def create_payment(self, request, token=None) -> PaymentResponse:
        self.calls.append((request, token))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def item_service() -> FakeItemService:
    return FakeItemService()


@pytest.fixture
def payment_service() -> FakePaymentService:
    return FakePaymentService()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore({"token": "secret-token"})


@pytest.fixture
def auth_manager(store) -> AuthManager:
    return AuthManager(store)


@pytest.fixture
def widget_cart(store) -> MemoryStore:
    store.set(
        CART_KEY,
        json.dumps([{"label": "Widget", "size": "M", "quantity": 2, "finalPrice": "19.99"}]),
    )
    return store


@pytest.fixture
def transport_error() -> TransportError:
    return TransportError("Item service unavailable: connection refused")
