"""Data models for storefront entities."""

import mimetypes
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

TWO_PLACES = Decimal("0.01")


def format_amount(value: Decimal) -> str:
    """Render an amount with exactly two decimal places."""
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return str(value.quantize(TWO_PLACES))


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Parse a user- or server-supplied number, returning None if it is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


class Category(str, Enum):
    """Catalog categories offered by the item form."""

    ELECTRONICS = "Electronics"
    GROCERIES = "Groceries"
    CLOTHING = "Clothing"


class LocalFile(BaseModel):
    """An image picked on this machine, not yet uploaded."""

    kind: Literal["local"] = "local"
    path: Path = Field(description="Path of the file on the local filesystem")
    filename: str = Field(description="File name sent in the multipart part")
    content_type: str = Field(default="application/octet-stream")

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "LocalFile":
        path = Path(path).expanduser()
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            path=path,
            filename=path.name,
            content_type=content_type or "application/octet-stream",
        )


class StoredReference(BaseModel):
    """An image the Item Service already stored, known only by its filename."""

    kind: Literal["stored"] = "stored"
    filename: str

    def url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/uploads/{self.filename}"


ItemImage = Annotated[Union[LocalFile, StoredReference], Field(discriminator="kind")]


class StockItem(BaseModel):
    """A catalog item confirmed by the Item Service."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("id", "_id"),
        description="Server-side identifier, when the service reports one",
    )
    name: str = Field(min_length=1, description="Item name")
    description: str = Field(default="", description="Free-text description")
    price: Decimal = Field(description="Unit price")
    qty: int = Field(
        validation_alias=AliasChoices("qty", "stock"),
        description="Quantity on hand (sent as 'stock' on the wire)",
    )
    category: Category
    image: Optional[ItemImage] = Field(None, description="Stored image reference")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("image", mode="before")
    @classmethod
    def _image_from_filename(cls, value: Any) -> Any:
        # The service reports images as bare filenames
        if value is None or value == "":
            return None
        if isinstance(value, str):
            return StoredReference(filename=value)
        return value

    @property
    def display_price(self) -> str:
        return format_amount(self.price)

    @property
    def value(self) -> Decimal:
        return self.price * self.qty

    def image_url(self, base_url: str) -> Optional[str]:
        if isinstance(self.image, StoredReference):
            return self.image.url(base_url)
        return None


class ItemDraft(BaseModel):
    """
    Uncommitted state of the "new item" form.

    Scalar fields hold whatever the user typed; nothing is coerced or
    validated until the draft is submitted.
    """

    name: Any = ""
    description: Any = ""
    price: Any = 0
    qty: Any = 0
    category: Any = ""
    image: Optional[LocalFile] = None


DRAFT_SCALAR_FIELDS = ("name", "description", "price", "qty", "category")


class CartEntry(BaseModel):
    """A line item written to the cart store by the shopping flow."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str
    size: str = ""
    quantity: int = 1
    final_price: str = Field(alias="finalPrice")

    @field_validator("final_price", mode="before")
    @classmethod
    def _price_as_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return str(value)
        return value


class PaymentMethod(str, Enum):
    """How the customer pays."""

    CARD = "Card"
    CASH_ON_DELIVERY = "COD"

    @classmethod
    def _missing_(cls, value: object) -> Optional["PaymentMethod"]:
        if isinstance(value, str):
            normalized = value.replace(" ", "").replace("_", "").lower()
            for member in cls:
                if normalized in (member.value.lower(), member.name.replace("_", "").lower()):
                    return member
        return None


class CardDetails(BaseModel):
    """The four card fields of the checkout form."""

    model_config = ConfigDict(populate_by_name=True)

    cardholder_name: str = Field(default="", alias="cardholderName")
    card_number: str = Field(default="", alias="cardNumber")
    expiry_date: str = Field(default="", alias="expiryDate")
    cvv: str = Field(default="", alias="cvv")

    def is_complete(self) -> bool:
        return all((self.cardholder_name, self.card_number, self.expiry_date, self.cvv))


class PaymentRequest(BaseModel):
    """Body of POST /api/payment."""

    model_config = ConfigDict(populate_by_name=True)

    payment_method: PaymentMethod = Field(alias="paymentMethod")
    transaction_id: str = Field(alias="transactionId")
    card_details: Optional[CardDetails] = Field(None, alias="cardDetails")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class PaymentResponse(BaseModel):
    """Reply of the Payment Service; extra keys are kept."""

    model_config = ConfigDict(extra="allow")

    success: bool = False
    message: Optional[str] = None


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    FAILED = "failed"


class SubmissionState(BaseModel):
    """Where the checkout form is in its submit cycle."""

    status: SubmissionStatus = SubmissionStatus.IDLE
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> "SubmissionState":
        return cls()

    @classmethod
    def in_flight(cls) -> "SubmissionState":
        return cls(status=SubmissionStatus.IN_FLIGHT)

    @classmethod
    def failed(cls, message: str) -> "SubmissionState":
        return cls(status=SubmissionStatus.FAILED, message=message)


class NoticeLevel(str, Enum):
    INFO = "info"
    ERROR = "error"


class Notice(BaseModel):
    """A message the view shows to the user."""

    level: NoticeLevel
    message: str

