"""
Payment Bridge Factory

Provides a single entry point for obtaining the card processor and the
method channel wrapping it. Only the mock processor exists; there is no
gateway integration.

Usage:
    from skycomfort.services.payment import get_payment_channel

    channel = get_payment_channel()
    reply = await channel.invoke("processPayment", {...})
"""

import logging
from functools import lru_cache

from skycomfort.core.config import get_settings
from skycomfort.services.payment.base import (
    BasePaymentProcessor,
    PaymentError,
    PaymentErrorCode,
    PaymentResult,
    SavedCard,
)
from skycomfort.services.payment.channel import (
    MethodNotImplementedError,
    PaymentChannel,
    PaymentChannelError,
)
from skycomfort.services.payment.mock import MockPaymentProcessor

logger = logging.getLogger(__name__)


@lru_cache()
def get_payment_processor() -> BasePaymentProcessor:
    """
    Get the configured card processor instance.

    The instance is cached so saved cards persist for the life of the
    process (and no longer).
    """
    settings = get_settings()
    logger.info("Payment Processor: Using MockPaymentProcessor")
    return MockPaymentProcessor(latency=settings.payment_latency_seconds)


@lru_cache()
def get_payment_channel() -> PaymentChannel:
    """Get the method channel bound to the cached processor."""
    return PaymentChannel(get_payment_processor())


def reset_payment_processor() -> None:
    """
    Clear the cached processor and channel.

    Drops every saved card. Useful for testing.
    """
    get_payment_channel.cache_clear()
    get_payment_processor.cache_clear()
    logger.debug("Payment processor cache cleared")


__all__ = [
    "get_payment_processor",
    "get_payment_channel",
    "reset_payment_processor",
    "BasePaymentProcessor",
    "MockPaymentProcessor",
    "PaymentChannel",
    "PaymentChannelError",
    "MethodNotImplementedError",
    "PaymentError",
    "PaymentErrorCode",
    "PaymentResult",
    "SavedCard",
]
