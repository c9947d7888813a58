from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from storefront_server.models import (
    CardDetails,
    CartEntry,
    Category,
    LocalFile,
    PaymentMethod,
    PaymentRequest,
    StockItem,
    StoredReference,
    SubmissionState,
    SubmissionStatus,
    format_amount,
    parse_decimal,
)


class TestStockItem:
    def test_reads_quantity_from_stock_or_qty(self):
        by_stock = StockItem.model_validate(
            {"name": "Phone", "price": 199.5, "stock": 3, "category": "Electronics"}
        )
        by_qty = StockItem.model_validate(
            {"name": "Phone", "price": "199.5", "qty": 3, "category": "Electronics"}
        )
        assert by_stock.qty == by_qty.qty == 3
        assert by_stock.price == Decimal("199.5")
        assert by_stock.category is Category.ELECTRONICS

    def test_numeric_server_id(self):
        item = StockItem.model_validate(
            {"_id": 7, "name": "Phone", "price": 1, "qty": 1, "category": "Electronics", "description": None}
        )
        assert item.id == "7"
        assert item.description == ""

    def test_image_filename_becomes_stored_reference(self):
        item = StockItem.model_validate(
            {"name": "Shirt", "price": 10, "qty": 1, "category": "Clothing", "image": "shirt.png"}
        )
        assert item.image == StoredReference(filename="shirt.png")
        assert item.image_url("http://localhost:5000/") == "http://localhost:5000/uploads/shirt.png"

    @pytest.mark.parametrize("image", [None, ""])
    def test_missing_image(self, image):
        item = StockItem.model_validate(
            {"name": "Rice", "price": 2, "qty": 5, "category": "Groceries", "image": image}
        )
        assert item.image is None
        assert item.image_url("http://localhost:5000") is None

    def test_rejects_unknown_category(self):
        with pytest.raises(ValidationError):
            StockItem.model_validate({"name": "Car", "price": 1, "qty": 1, "category": "Cars"})

    def test_value_and_display_price(self):
        item = StockItem(name="Rice", price=Decimal("2.5"), qty=4, category=Category.GROCERIES)
        assert item.value == Decimal("10.0")
        assert item.display_price == "2.50"


def test_local_file_guesses_content_type(tmp_path):
    image = LocalFile.from_path(tmp_path / "photo.png")
    assert image.kind == "local"
    assert image.filename == "photo.png"
    assert image.content_type == "image/png"
    assert LocalFile.from_path(Path("notes.unknownext")).content_type == "application/octet-stream"


def test_cart_entry_is_read_only():
    entry = CartEntry.model_validate({"label": "Widget", "size": "M", "quantity": 2, "finalPrice": 19.99})
    assert entry.final_price == "19.99"
    with pytest.raises(ValidationError):
        entry.label = "Gadget"


def test_cart_entry_null_price_reads_as_empty():
    entry = CartEntry.model_validate({"label": "Widget", "finalPrice": None})
    assert entry.final_price == ""


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Card", PaymentMethod.CARD),
        ("card", PaymentMethod.CARD),
        ("COD", PaymentMethod.CASH_ON_DELIVERY),
        ("CashOnDelivery", PaymentMethod.CASH_ON_DELIVERY),
        ("Cash on Delivery", PaymentMethod.CASH_ON_DELIVERY),
    ],
)
def test_payment_method_spellings(raw, expected):
    assert PaymentMethod(raw) is expected


def test_payment_method_rejects_unknown():
    with pytest.raises(ValueError):
        PaymentMethod("Cheque")


def test_payment_request_wire_shape():
    card = CardDetails(cardholder_name="Ada", card_number="4111", expiry_date="12/30", cvv="123")
    request = PaymentRequest(payment_method=PaymentMethod.CARD, transaction_id="t-1", card_details=card)
    assert request.to_wire() == {
        "paymentMethod": "Card",
        "transactionId": "t-1",
        "cardDetails": {
            "cardholderName": "Ada",
            "cardNumber": "4111",
            "expiryDate": "12/30",
            "cvv": "123",
        },
    }

    cod = PaymentRequest(payment_method=PaymentMethod.CASH_ON_DELIVERY, transaction_id="t-2")
    assert cod.to_wire() == {"paymentMethod": "COD", "transactionId": "t-2", "cardDetails": None}


def test_card_details_completeness():
    assert not CardDetails().is_complete()
    assert not CardDetails(cardholder_name="Ada", card_number="4111", expiry_date="12/30").is_complete()
    assert CardDetails(cardholder_name="Ada", card_number="4111", expiry_date="12/30", cvv="1").is_complete()


def test_submission_state_constructors():
    assert SubmissionState.idle().status is SubmissionStatus.IDLE
    assert SubmissionState.in_flight().status is SubmissionStatus.IN_FLIGHT
    failed = SubmissionState.failed("boom")
    assert failed.status is SubmissionStatus.FAILED
    assert failed.message == "boom"


@pytest.mark.parametrize(
    "raw, expected",
    [("19.99", Decimal("19.99")), (" 3 ", Decimal("3")), (7, Decimal("7")), ("abc", None), ("NaN", None), (None, None), (True, None)],
)
def test_parse_decimal(raw, expected):
    assert parse_decimal(raw) == expected


def test_format_amount():
    assert format_amount(Decimal("0")) == "0.00"
    assert format_amount(Decimal("19.99")) == "19.99"
    assert format_amount(Decimal("10.5")) == "10.50"


def test_format_amount_beyond_default_precision():
    assert format_amount(Decimal("1e30")) == "1000000000000000000000000000000.00"
    assert format_amount(Decimal("123456789012345678901234567.891")) == "123456789012345678901234567.89"
