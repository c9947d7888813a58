from abc import ABC, abstractmethod
from typing import Optional

from .models import LocalFile, PaymentRequest, PaymentResponse, StockItem


class ItemService(ABC):
    @abstractmethod
    async def list_items(self) -> list[StockItem]:
        pass

    @abstractmethod
    async def create_item(
        self, fields: dict[str, str], image: Optional[LocalFile] = None
    ) -> StockItem:
        pass


class PaymentService(ABC):
    @abstractmethod
    async def create_payment(
        self, request: PaymentRequest, token: Optional[str] = None
    ) -> PaymentResponse:
        pass


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass
