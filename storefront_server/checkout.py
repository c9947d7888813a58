"""Cart-to-payment controller."""

import json
import logging
import uuid
from decimal import Decimal
from typing import Union

from pydantic import TypeAdapter, ValidationError as ModelValidationError

from .auth import AuthManager
from .exceptions import SoftLoadFailure, TransportError, ValidationError
from .interfaces import KeyValueStore, PaymentService
from .models import (
    CardDetails,
    CartEntry,
    NoticeLevel,
    PaymentMethod,
    PaymentRequest,
    SubmissionState,
    SubmissionStatus,
    format_amount,
    parse_decimal,
)
from .observable import Observable
from .storage import CART_KEY

logger = logging.getLogger(__name__)

CARD_DETAILS_REQUIRED = "All card details are required for card payments."
PAYMENT_FAILED = "Payment failed. Please try again."
PAYMENT_SUCCEEDED = "Payment successful!"

_CART = TypeAdapter(list[CartEntry])

# Form field names, in the wire spelling and the model spelling
_CARD_FIELDS = {
    "cardholderName": "cardholder_name",
    "cardNumber": "card_number",
    "expiryDate": "expiry_date",
    "cvv": "cvv",
}


def new_transaction_id() -> str:
    return str(uuid.uuid4())


class CheckoutController(Observable):
    """Owns the cart read from local storage and the payment form."""

    def __init__(
        self,
        payment_service: PaymentService,
        cart_store: KeyValueStore,
        auth_manager: AuthManager,
    ) -> None:
        super().__init__()
        self.payment_service = payment_service
        self.cart_store = cart_store
        self.auth_manager = auth_manager
        self.cart: list[CartEntry] = []
        self.payment_method = PaymentMethod.CARD
        self.card_draft = CardDetails()
        self.submission = SubmissionState.idle()

    @property
    def total_amount(self) -> str:
        """
        Sum of the cart's final prices with two decimals.

        Entries whose price does not parse contribute zero.
        """
        total = Decimal("0")
        for entry in self.cart:
            price = parse_decimal(entry.final_price)
            if price is None:
                logger.warning(
                    f"Cart entry {entry.label!r} has unparseable price {entry.final_price!r}, counting as 0"
                )
                continue
            total += price
        return format_amount(total)

    @property
    def card_fields_visible(self) -> bool:
        return self.payment_method == PaymentMethod.CARD

    def load_cart(self) -> None:
        """Read the cart blob; anything missing or malformed yields an empty cart."""
        raw = self.cart_store.get(CART_KEY)
        if not raw:
            self.cart = []
            self._notify()
            return

        try:
            self.cart = _CART.validate_python(json.loads(raw))
        except (json.JSONDecodeError, ModelValidationError) as e:
            logger.warning(f"Ignoring malformed cart in storage: {e}")
            self.last_error = SoftLoadFailure(f"Cart could not be read: {e}")
            self.cart = []
        else:
            logger.info(f"Cart loaded with {len(self.cart)} entr{'y' if len(self.cart) == 1 else 'ies'}")
        self._notify()

    def set_payment_method(self, method: Union[str, PaymentMethod]) -> None:
        """
        Select the payment method. Card fields keep their content.

        Raises:
            ValueError: If the method is unknown
        """
        self.payment_method = PaymentMethod(method)
        self._notify()

    def update_card_field(self, field: str, value: str) -> None:
        """
        Set one card field, by form name (cardNumber) or attribute name (card_number).

        Raises:
            KeyError: If the field is not a card field
        """
        attribute = _CARD_FIELDS.get(field, field)
        if attribute not in _CARD_FIELDS.values():
            raise KeyError(f"Unknown card field: {field}")
        setattr(self.card_draft, attribute, value)
        self._notify()

    def clear_card_fields(self) -> None:
        self.card_draft = CardDetails()

    def _build_request(self) -> PaymentRequest:
        card_details = None
        if self.payment_method == PaymentMethod.CARD:
            card_details = self.card_draft.model_copy()
        return PaymentRequest(
            payment_method=self.payment_method,
            transaction_id=new_transaction_id(),
            card_details=card_details,
        )

    async def submit_payment(self) -> bool:
        """
        Validate the form and send the payment request.

        Card fields are cleared after every attempt, whatever the outcome.

        Returns:
            True if the Payment Service reported success
        """
        if self.submission.status == SubmissionStatus.IN_FLIGHT:
            logger.warning("Payment submit ignored: a payment is already in flight")
            return False

        try:
            if self.payment_method == PaymentMethod.CARD and not self.card_draft.is_complete():
                self.last_error = ValidationError(CARD_DETAILS_REQUIRED)
                self.submission = SubmissionState.failed(CARD_DETAILS_REQUIRED)
                self.notice = None
                logger.info("Payment rejected: incomplete card details")
                return False

            self.submission = SubmissionState.in_flight()
            self.last_error = None
            self.notice = None
            request = self._build_request()
            self._notify()

            token = self.auth_manager.get_token()
            if token is None:
                logger.warning("No bearer token stored; sending payment without Authorization")

            try:
                response = await self.payment_service.create_payment(request, token)
            except TransportError as e:
                logger.error(f"Payment {request.transaction_id} failed: {e}")
                self.last_error = e
                self.submission = SubmissionState.failed(PAYMENT_FAILED)
                return False

            if not response.success:
                logger.error(
                    f"Payment {request.transaction_id} declined: {response.message or 'no message'}"
                )
                self.submission = SubmissionState.failed(PAYMENT_FAILED)
                return False

            logger.info(f"Payment {request.transaction_id} succeeded")
            self.submission = SubmissionState.idle()
            self._show(NoticeLevel.INFO, PAYMENT_SUCCEEDED)
            return True
        finally:
            self.clear_card_fields()
            self._notify()
