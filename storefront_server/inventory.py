"""Inventory catalog controller."""

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Union

from .exceptions import SoftLoadFailure, TransportError, ValidationError
from .interfaces import ItemService
from .models import (
    DRAFT_SCALAR_FIELDS,
    Category,
    ItemDraft,
    LocalFile,
    NoticeLevel,
    StockItem,
    format_amount,
    parse_decimal,
)
from .observable import Observable

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields!"
INVALID_CATEGORY_MESSAGE = "Please choose a valid category!"


def _is_missing(value: Any) -> bool:
    """
    Truthiness check used by the form gate.

    Empty values and numeric zero count as missing, including "0" typed
    into a number input.
    """
    if value is None:
        return True
    if isinstance(value, str):
        if not value.strip():
            return True
        number = parse_decimal(value)
        return number is not None and number == 0
    if isinstance(value, (int, float, Decimal)):
        return value == 0
    return not value


def _is_category(value: Any) -> bool:
    if isinstance(value, Category):
        return True
    try:
        Category(value)
    except ValueError:
        return False
    return True


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if hasattr(value, "value") and isinstance(value.value, str):
        # Enum members are sent by value
        return value.value
    return str(value)


def build_item_form(draft: ItemDraft) -> dict[str, str]:
    """Text parts of the create-item multipart body; quantity goes out as "stock"."""
    return {
        "name": _as_text(draft.name),
        "description": _as_text(draft.description),
        "price": _as_text(draft.price),
        "category": _as_text(draft.category),
        "stock": _as_text(draft.qty),
    }


class InventoryController(Observable):
    """Owns the catalog list and the "new item" draft."""

    def __init__(self, item_service: ItemService) -> None:
        super().__init__()
        self.item_service = item_service
        self.catalog: list[StockItem] = []
        self.draft = ItemDraft()
        self._submitting = False

    @property
    def total_item_count(self) -> int:
        return len(self.catalog)

    @property
    def total_value(self) -> str:
        """Sum of price x quantity over the catalog, two decimals."""
        return format_amount(sum((item.value for item in self.catalog), Decimal("0")))

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    async def load_catalog(self) -> bool:
        """
        Replace the catalog with the service's item list.

        Failures are logged and recorded in ``last_error``; the previous
        catalog stays in place.

        Returns:
            True if the catalog was refreshed
        """
        try:
            items = await self.item_service.list_items()
        except TransportError as e:
            logger.warning(f"Error fetching stock items: {e}")
            self.last_error = SoftLoadFailure(f"Catalog could not be loaded: {e}")
            self._notify()
            return False

        self.catalog = list(items)
        logger.info(f"Catalog loaded with {len(self.catalog)} item(s)")
        self._notify()
        return True

    def update_draft_field(self, field: str, value: Any) -> None:
        """
        Set one scalar field of the draft. No validation happens here.

        Raises:
            KeyError: If the field is not a draft field
        """
        if field == "image":
            self.attach_image(value)
            return
        if field not in DRAFT_SCALAR_FIELDS:
            raise KeyError(f"Unknown item field: {field}")
        setattr(self.draft, field, value)
        self._notify()

    def attach_image(self, image: Union[str, Path, LocalFile]) -> None:
        """Replace the draft image with a local file."""
        if not isinstance(image, LocalFile):
            image = LocalFile.from_path(image)
        self.draft.image = image
        self._notify()

    def reset_draft(self) -> None:
        self.draft = ItemDraft()
        self._notify()

    def validate_draft(self) -> None:
        """
        Raises:
            ValidationError: If name, category, price or qty is missing, or the
                category is not one the catalog offers
        """
        missing = [
            field
            for field in ("name", "category", "price", "qty")
            if _is_missing(getattr(self.draft, field))
        ]
        if missing:
            logger.info(f"Draft rejected, missing: {', '.join(missing)}")
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)

        if not _is_category(self.draft.category):
            logger.info(f"Draft rejected, unknown category: {self.draft.category!r}")
            raise ValidationError(INVALID_CATEGORY_MESSAGE)

    async def submit_draft(self) -> Optional[StockItem]:
        """
        Validate the draft and send it to the Item Service.

        Returns:
            The created item, or None if validation or the request failed
            (see ``notice`` and ``last_error``) or another submit is pending
        """
        if self._submitting:
            logger.warning("Submit ignored: a previous item submit is still pending")
            return None

        try:
            self.validate_draft()
        except ValidationError as e:
            self.last_error = e
            self._show(NoticeLevel.ERROR, str(e))
            self._notify()
            return None

        draft = self.draft
        fields = build_item_form(draft)
        self._submitting = True
        self.last_error = None
        self.notice = None
        self._notify()
        try:
            item = await self.item_service.create_item(fields, draft.image)
        except TransportError as e:
            logger.error(f"Error adding stock item: {e}")
            self.last_error = e
            return None
        finally:
            self._submitting = False
            self._notify()

        self.catalog.append(item)
        logger.info(f"Added {item.name} to catalog ({self.total_item_count} item(s))")
        self.reset_draft()
        return item
