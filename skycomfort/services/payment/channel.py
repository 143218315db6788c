"""
Payment Method Channel

Method-call bridge between client code and the card processor. A call
is a method name plus a key-value argument map; the reply is a plain
value (dict, list or bool) or a PaymentChannelError carrying a code.

Methods:
    - processPayment
    - processPaymentWithSavedCard
    - getSavedCards
    - deleteSavedCard
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from skycomfort.services.payment.base import (
    BasePaymentProcessor,
    ERROR_MESSAGES,
    PaymentError,
    PaymentErrorCode,
)

logger = logging.getLogger(__name__)

CHANNEL_NAME = "com.skycomfort.payment"


class PaymentChannelError(Exception):
    """Error reply sent back over the channel."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class MethodNotImplementedError(PaymentChannelError):
    """The channel has no handler for the requested method."""

    def __init__(self, method: str):
        super().__init__("NOT_IMPLEMENTED", f"Method not implemented: {method}")


def _invalid_arguments() -> PaymentChannelError:
    code = PaymentErrorCode.INVALID_ARGUMENTS
    return PaymentChannelError(code, ERROR_MESSAGES[code])


def _require(args: dict[str, Any], key: str, kind: type) -> Any:
    value = args.get(key)
    # bool is an int subclass; never accept it as an amount
    if kind is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, kind) or (kind is not bool and isinstance(value, bool)):
        raise _invalid_arguments()
    return value


class PaymentChannel:
    """
    Dispatches named method calls to a card processor.

    Example:
        >>> channel = PaymentChannel(MockPaymentProcessor(latency=0))
        >>> await channel.invoke("getSavedCards")
        []
    """

    def __init__(self, processor: BasePaymentProcessor, name: str = CHANNEL_NAME):
        self.processor = processor
        self.name = name
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[Any]]] = {
            "processPayment": self._process_payment,
            "processPaymentWithSavedCard": self._process_payment_with_saved_card,
            "getSavedCards": self._get_saved_cards,
            "deleteSavedCard": self._delete_saved_card,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._handlers)

    async def invoke(self, method: str, arguments: Optional[dict[str, Any]] = None) -> Any:
        """
        Handle one method call.

        Raises:
            MethodNotImplementedError: Unknown method name
            PaymentChannelError: Bad arguments or a processor failure
        """
        logger.debug(f"{self.name} received method call: {method}")

        handler = self._handlers.get(method)
        if handler is None:
            raise MethodNotImplementedError(method)

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise _invalid_arguments()

        try:
            return await handler(arguments)
        except PaymentError as e:
            logger.info(f"{method} failed: {e.code}")
            raise PaymentChannelError(e.code, e.message) from e

    async def _process_payment(self, args: dict[str, Any]) -> dict[str, Any]:
        card_number = _require(args, "cardNumber", str)
        logger.info(f"Processing payment with card ending {card_number[-4:]}")

        result = await self.processor.process_payment(
            card_number=card_number,
            expiry_date=_require(args, "expiryDate", str),
            cvv=_require(args, "cvv", str),
            cardholder_name=_require(args, "cardholderName", str),
            amount=_require(args, "amount", float),
            save_card=_require(args, "saveCard", bool),
        )
        return result.to_dict()

    async def _process_payment_with_saved_card(self, args: dict[str, Any]) -> dict[str, Any]:
        card_id = _require(args, "cardId", str)
        amount = _require(args, "amount", float)

        logger.info(f"Processing payment with saved card {card_id}")
        result = await self.processor.process_payment_with_saved_card(card_id, amount)
        return result.to_dict()

    async def _get_saved_cards(self, args: dict[str, Any]) -> list[dict[str, Any]]:
        return [card.to_dict() for card in self.processor.get_saved_cards()]

    async def _delete_saved_card(self, args: dict[str, Any]) -> bool:
        return self.processor.delete_saved_card(_require(args, "cardId", str))
