"""
Mock Card Payment Processor

Simulates card processing for the mobile payment bridge without any
network call, encryption or tokenization. Used for demos and tests.

Behavior:
    - Waits a fixed simulated delay (1 second by default)
    - Validates card number length, expiry format, CVV and holder name
    - Always succeeds once the details are valid
    - Generates transaction IDs of the form TR123456
    - Saved cards live in a plain dict and vanish with the process
"""

import asyncio
import logging
import random
import uuid
from typing import Optional

from skycomfort.services.payment.base import (
    BasePaymentProcessor,
    PaymentError,
    PaymentErrorCode,
    PaymentResult,
    SavedCard,
)

logger = logging.getLogger(__name__)

# Two-digit expiry years below this are rejected
MIN_EXPIRY_YEAR = 23


class MockPaymentProcessor(BasePaymentProcessor):
    """
    Mock implementation of the card processor.

    Attributes:
        latency: Simulated processing delay in seconds
        saved_cards: In-memory card store keyed by card id (not thread-safe)

    Example:
        >>> processor = MockPaymentProcessor(latency=0)
        >>> result = await processor.process_payment(
        ...     "4242 4242 4242 4242", "12/30", "123", "Jane Doe", 20.0
        ... )
        >>> result.transaction_id
        'TR482913'
    """

    def __init__(self, latency: float = 1.0):
        self.latency = latency
        self.saved_cards: dict[str, SavedCard] = {}

        logger.info(f"MockPaymentProcessor initialized (latency={latency}s)")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    def _generate_transaction_id(self) -> str:
        return f"TR{random.randint(100000, 999999)}"

    async def _simulate_latency(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    @staticmethod
    def validate_card_details(
        card_number: str,
        expiry_date: str,
        cvv: str,
        cardholder_name: str,
    ) -> bool:
        """Shape checks only; no Luhn check and no issuer lookup."""
        digits = card_number.replace(" ", "")
        if not 13 <= len(digits) <= 19:
            return False

        parts = expiry_date.split("/")
        if len(parts) != 2:
            return False
        try:
            month, year = int(parts[0]), int(parts[1])
        except ValueError:
            return False
        if not 1 <= month <= 12 or year < MIN_EXPIRY_YEAR:
            return False

        if not 3 <= len(cvv) <= 4 or not cvv.isdigit():
            return False

        return bool(cardholder_name.strip())

    def save_card(self, card_number: str, expiry_date: str, cardholder_name: str) -> SavedCard:
        digits = card_number.replace(" ", "")
        card = SavedCard(
            id=str(uuid.uuid4()),
            last_four_digits=digits[-4:],
            expiry_date=expiry_date,
            cardholder_name=cardholder_name,
            card_number=digits,
        )
        self.saved_cards[card.id] = card
        logger.debug(f"Mock: Saved card {card.id} ending {card.last_four_digits}")
        return card

    async def process_payment(
        self,
        card_number: str,
        expiry_date: str,
        cvv: str,
        cardholder_name: str,
        amount: float,
        save_card: bool = False,
    ) -> PaymentResult:
        await self._simulate_latency()

        if not self.validate_card_details(card_number, expiry_date, cvv, cardholder_name):
            logger.debug("Mock: Card details rejected")
            raise PaymentError(PaymentErrorCode.INVALID_CARD_DETAILS)

        if save_card:
            self.save_card(card_number, expiry_date, cardholder_name)

        result = PaymentResult(
            transaction_id=self._generate_transaction_id(),
            amount=amount,
            last4_digits=card_number.replace(" ", "")[-4:],
        )
        logger.info(f"Mock: Payment successful - {result.transaction_id} - {amount:.2f}")
        return result

    async def process_payment_with_saved_card(self, card_id: str, amount: float) -> PaymentResult:
        await self._simulate_latency()

        card: Optional[SavedCard] = self.saved_cards.get(card_id)
        if card is None:
            raise PaymentError(PaymentErrorCode.CARD_NOT_FOUND)

        result = PaymentResult(
            transaction_id=self._generate_transaction_id(),
            amount=amount,
            last4_digits=card.last_four_digits,
        )
        logger.info(f"Mock: Saved card payment successful - {result.transaction_id} - {amount:.2f}")
        return result

    def get_saved_cards(self) -> list[SavedCard]:
        return list(self.saved_cards.values())

    def delete_saved_card(self, card_id: str) -> bool:
        self.saved_cards.pop(card_id, None)
        return True

    async def health_check(self) -> bool:
        """The mock is always available."""
        return True
