"""
Card Payment Processor Abstract Base Class

Defines the interface the mobile payment bridge calls into. The only
implementation is MockPaymentProcessor: a demo stand-in for a real
gateway that never leaves the process.

Design Pattern: Strategy Pattern
    - The channel only depends on this interface
    - A gateway-backed processor can replace the mock without touching
      the channel or its callers
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone


class PaymentErrorCode:
    """Machine-readable error codes returned over the bridge."""
    INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
    INVALID_CARD_DETAILS = "INVALID_CARD_DETAILS"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    PROCESSING_FAILED = "PROCESSING_FAILED"


ERROR_MESSAGES = {
    PaymentErrorCode.INVALID_ARGUMENTS: "Invalid arguments",
    PaymentErrorCode.INVALID_CARD_DETAILS: "Invalid card details. Please check and try again.",
    PaymentErrorCode.CARD_NOT_FOUND: "Saved card not found.",
    PaymentErrorCode.PROCESSING_FAILED: "Payment processing failed. Please try again.",
}


class PaymentError(Exception):
    """
    A card operation failed.

    Attributes:
        code: One of PaymentErrorCode
        message: Human-readable description
    """

    def __init__(self, code: str, message: str = ""):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "Payment error")
        super().__init__(self.message)


@dataclass
class PaymentResult:
    """
    Standardized result of a card charge.

    Attributes:
        transaction_id: Identifier to record with the server payment
        amount: Amount charged
        last4_digits: Last four digits of the card used
        timestamp: When the charge completed (UTC)
        success: Whether the charge succeeded
    """
    transaction_id: str
    amount: float
    last4_digits: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    success: bool = True

    def to_dict(self) -> dict:
        """Convert to the bridge payload (timestamp in epoch milliseconds)."""
        return {
            "success": self.success,
            "transactionId": self.transaction_id,
            "timestamp": int(self.timestamp.timestamp() * 1000),
            "amount": self.amount,
            "last4Digits": self.last4_digits,
        }


@dataclass
class SavedCard:
    """
    A card kept for reuse. card_number is held only in process memory
    and never included in to_dict().
    """
    id: str
    last_four_digits: str
    expiry_date: str
    cardholder_name: str
    card_number: str = field(repr=False, default="")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "lastFourDigits": self.last_four_digits,
            "expiryDate": self.expiry_date,
            "cardholderName": self.cardholder_name,
        }


class BasePaymentProcessor(ABC):
    """
    Abstract base class for card processors behind the payment bridge.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the payment provider (e.g. "mock")."""
        pass

    @abstractmethod
    async def process_payment(
        self,
        card_number: str,
        expiry_date: str,
        cvv: str,
        cardholder_name: str,
        amount: float,
        save_card: bool = False,
    ) -> PaymentResult:
        """
        Charge a new card.

        Args:
            card_number: Full card number (spaces allowed)
            expiry_date: Expiry in MM/YY format
            cvv: 3 or 4 digit security code
            cardholder_name: Name on the card
            amount: Amount to charge
            save_card: Keep the card for later charges

        Raises:
            PaymentError: INVALID_CARD_DETAILS when validation fails
        """
        pass

    @abstractmethod
    async def process_payment_with_saved_card(self, card_id: str, amount: float) -> PaymentResult:
        """
        Charge a previously saved card.

        Raises:
            PaymentError: CARD_NOT_FOUND when the id is unknown
        """
        pass

    @abstractmethod
    def get_saved_cards(self) -> list[SavedCard]:
        pass

    @abstractmethod
    def delete_saved_card(self, card_id: str) -> bool:
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass
