"""
Tests for the mock card processor and the payment method channel.
"""

import re

import pytest

from skycomfort.services.payment import (
    MethodNotImplementedError,
    MockPaymentProcessor,
    PaymentChannel,
    PaymentChannelError,
    PaymentError,
    PaymentErrorCode,
    get_payment_channel,
    get_payment_processor,
    reset_payment_processor,
)

VALID_CARD = {
    "cardNumber": "4242 4242 4242 4242",
    "expiryDate": "12/30",
    "cvv": "123",
    "cardholderName": "Jane Doe",
    "amount": 20.98,
    "saveCard": False,
}


@pytest.fixture
def processor():
    return MockPaymentProcessor(latency=0)


@pytest.fixture
def channel(processor):
    return PaymentChannel(processor)


class TestCardValidation:
    """MockPaymentProcessor.validate_card_details"""

    def test_valid_card(self):
        assert MockPaymentProcessor.validate_card_details("4242 4242 4242 4242", "01/25", "123", "Jane")

    @pytest.mark.parametrize("card_number,expiry,cvv,name", [
        ("4242 4242 42", "12/30", "123", "Jane"),            # too short
        ("4" * 20, "12/30", "123", "Jane"),                  # too long
        ("4242424242424242", "13/30", "123", "Jane"),        # month out of range
        ("4242424242424242", "00/30", "123", "Jane"),
        ("4242424242424242", "12/22", "123", "Jane"),        # year too old
        ("4242424242424242", "1230", "123", "Jane"),         # no slash
        ("4242424242424242", "ab/cd", "123", "Jane"),
        ("4242424242424242", "12/30", "12", "Jane"),         # short cvv
        ("4242424242424242", "12/30", "12345", "Jane"),
        ("4242424242424242", "12/30", "12a", "Jane"),
        ("4242424242424242", "12/30", "123", "   "),         # blank name
    ])
    def test_invalid_details(self, card_number, expiry, cvv, name):
        assert not MockPaymentProcessor.validate_card_details(card_number, expiry, cvv, name)


class TestProcessPayment:
    """processPayment over the channel."""

    async def test_successful_charge(self, channel):
        reply = await channel.invoke("processPayment", VALID_CARD)

        assert reply["success"] is True
        assert re.fullmatch(r"TR\d{6}", reply["transactionId"])
        assert reply["amount"] == 20.98
        assert reply["last4Digits"] == "4242"
        assert isinstance(reply["timestamp"], int)

    async def test_integer_amount_accepted(self, channel):
        reply = await channel.invoke("processPayment", {**VALID_CARD, "amount": 20})

        assert reply["amount"] == 20.0

    async def test_invalid_card_details(self, channel):
        with pytest.raises(PaymentChannelError) as exc:
            await channel.invoke("processPayment", {**VALID_CARD, "cvv": "1"})

        assert exc.value.code == PaymentErrorCode.INVALID_CARD_DETAILS
        assert exc.value.message == "Invalid card details. Please check and try again."

    @pytest.mark.parametrize("missing", ["cardNumber", "expiryDate", "cvv", "cardholderName", "amount", "saveCard"])
    async def test_missing_argument(self, channel, missing):
        arguments = {k: v for k, v in VALID_CARD.items() if k != missing}

        with pytest.raises(PaymentChannelError) as exc:
            await channel.invoke("processPayment", arguments)

        assert exc.value.code == PaymentErrorCode.INVALID_ARGUMENTS

    async def test_wrongly_typed_argument(self, channel):
        with pytest.raises(PaymentChannelError) as exc:
            await channel.invoke("processPayment", {**VALID_CARD, "amount": "20.98"})

        assert exc.value.code == PaymentErrorCode.INVALID_ARGUMENTS

    async def test_arguments_must_be_a_map(self, channel):
        with pytest.raises(PaymentChannelError) as exc:
            await channel.invoke("processPayment", ["4242"])

        assert exc.value.code == PaymentErrorCode.INVALID_ARGUMENTS


class TestSavedCards:
    """Saved card methods over the channel."""

    async def test_save_and_list(self, channel):
        await channel.invoke("processPayment", {**VALID_CARD, "saveCard": True})

        cards = await channel.invoke("getSavedCards")

        assert len(cards) == 1
        card = cards[0]
        assert card["lastFourDigits"] == "4242"
        assert card["expiryDate"] == "12/30"
        assert card["cardholderName"] == "Jane Doe"
        assert card["id"]
        assert "cardNumber" not in card

    async def test_pay_with_saved_card(self, channel):
        await channel.invoke("processPayment", {**VALID_CARD, "cardNumber": "5555555555554444", "saveCard": True})
        card_id = (await channel.invoke("getSavedCards"))[0]["id"]

        reply = await channel.invoke("processPaymentWithSavedCard", {"cardId": card_id, "amount": 9.99})

        assert reply["success"] is True
        assert reply["last4Digits"] == "4444"
        assert reply["amount"] == 9.99

    async def test_unknown_saved_card(self, channel):
        with pytest.raises(PaymentChannelError) as exc:
            await channel.invoke("processPaymentWithSavedCard", {"cardId": "nope", "amount": 9.99})

        assert exc.value.code == PaymentErrorCode.CARD_NOT_FOUND
        assert exc.value.message == "Saved card not found."

    async def test_delete_saved_card(self, channel):
        await channel.invoke("processPayment", {**VALID_CARD, "saveCard": True})
        card_id = (await channel.invoke("getSavedCards"))[0]["id"]

        assert await channel.invoke("deleteSavedCard", {"cardId": card_id}) is True
        assert await channel.invoke("getSavedCards") == []

    async def test_delete_unknown_card_still_true(self, channel):
        assert await channel.invoke("deleteSavedCard", {"cardId": "nope"}) is True

    async def test_delete_requires_card_id(self, channel):
        with pytest.raises(PaymentChannelError) as exc:
            await channel.invoke("deleteSavedCard", {})

        assert exc.value.code == PaymentErrorCode.INVALID_ARGUMENTS


class TestChannel:

    async def test_unknown_method(self, channel):
        with pytest.raises(MethodNotImplementedError):
            await channel.invoke("refund", {})

    def test_methods(self, channel):
        assert set(channel.methods) == {
            "processPayment",
            "processPaymentWithSavedCard",
            "getSavedCards",
            "deleteSavedCard",
        }

    async def test_processor_raises_payment_error_directly(self, processor):
        with pytest.raises(PaymentError) as exc:
            await processor.process_payment_with_saved_card("missing", 1.0)

        assert exc.value.code == PaymentErrorCode.CARD_NOT_FOUND

    def test_factory_is_cached_and_resettable(self):
        processor = get_payment_processor()

        assert get_payment_processor() is processor
        assert get_payment_channel().processor is processor
        assert processor.provider_name == "mock"

        reset_payment_processor()

        assert get_payment_processor() is not processor

    async def test_health_check(self, processor):
        assert await processor.health_check() is True
