"""
Tests for payment recording and the order transitions it triggers.
"""

import pytest


@pytest.fixture
async def order(client, passenger, catalog):
    response = await client.post("/api/orders", headers=passenger["headers"], json={
        "flightId": "SC101",
        "seatNumber": "12A",
        "items": [{"serviceId": catalog[0]["id"], "quantity": 2}],
    })
    return response.json()["data"]["order"]


def payment_body(order, transaction_id="TR123456", **overrides):
    body = {
        "orderId": order["id"],
        "transactionId": transaction_id,
        "amount": order["totalAmount"],
        "paymentMethod": "credit_card",
        "lastFourDigits": "4242",
    }
    body.update(overrides)
    return body


async def order_status(client, user, order_id):
    response = await client.get(f"/api/orders/{order_id}", headers=user["headers"])
    return response.json()["data"]["order"]["status"]


class TestRecordPayment:
    """POST /api/payments"""

    async def test_completed_payment_moves_order_to_processing(self, client, passenger, order):
        response = await client.post("/api/payments", headers=passenger["headers"], json=payment_body(order))

        assert response.status_code == 201
        payment = response.json()["data"]["payment"]
        assert payment["status"] == "completed"
        assert payment["transactionId"] == "TR123456"
        assert payment["lastFourDigits"] == "4242"
        assert await order_status(client, passenger, order["id"]) == "processing"

    async def test_failed_payment_cancels_order(self, client, passenger, order):
        response = await client.post(
            "/api/payments",
            headers=passenger["headers"],
            json=payment_body(order, status="failed"),
        )

        assert response.status_code == 201
        assert await order_status(client, passenger, order["id"]) == "cancelled"

    async def test_pending_payment_leaves_order_alone(self, client, passenger, order):
        await client.post(
            "/api/payments",
            headers=passenger["headers"],
            json=payment_body(order, status="pending"),
        )

        assert await order_status(client, passenger, order["id"]) == "pending"

    async def test_payment_listed_on_order(self, client, passenger, order):
        await client.post(
            "/api/payments",
            headers=passenger["headers"],
            json=payment_body(order, metadata={"channel": "mobile"}),
        )

        response = await client.get(f"/api/orders/{order['id']}", headers=passenger["headers"])

        payments = response.json()["data"]["order"]["payments"]
        assert len(payments) == 1
        assert payments[0]["metadata"] == {"channel": "mobile"}

    async def test_duplicate_transaction_id(self, client, passenger, order):
        await client.post("/api/payments", headers=passenger["headers"], json=payment_body(order))

        response = await client.post("/api/payments", headers=passenger["headers"], json=payment_body(order))

        assert response.status_code == 400
        assert response.json()["message"] == "Transaction ID already exists"

    async def test_unknown_order(self, client, passenger):
        response = await client.post(
            "/api/payments",
            headers=passenger["headers"],
            json=payment_body({"id": 9999, "totalAmount": 10.0}),
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"

    @pytest.mark.parametrize("overrides", [
        {"lastFourDigits": "42a2"},
        {"amount": 0},
        {"paymentMethod": "cash"},
    ])
    async def test_invalid_body(self, client, passenger, order, overrides):
        response = await client.post(
            "/api/payments",
            headers=passenger["headers"],
            json=payment_body(order, **overrides),
        )

        assert response.status_code == 400


class TestReadPayments:
    """Payment lookups."""

    async def test_by_transaction_id(self, client, passenger, order):
        await client.post("/api/payments", headers=passenger["headers"], json=payment_body(order))

        response = await client.get("/api/payments/transaction/TR123456", headers=passenger["headers"])

        assert response.status_code == 200
        assert response.json()["data"]["payment"]["orderId"] == order["id"]

    async def test_unknown_transaction_id(self, client, passenger):
        response = await client.get("/api/payments/transaction/TR000000", headers=passenger["headers"])

        assert response.status_code == 404
        assert response.json()["message"] == "Payment not found"

    async def test_by_order(self, client, passenger, order):
        await client.post("/api/payments", headers=passenger["headers"], json=payment_body(order, "TR111111"))
        await client.post("/api/payments", headers=passenger["headers"], json=payment_body(order, "TR222222"))

        response = await client.get(f"/api/payments/order/{order['id']}", headers=passenger["headers"])

        assert response.json()["results"] == 2

    async def test_list_is_staff_only(self, client, passenger, staff, order):
        await client.post("/api/payments", headers=passenger["headers"], json=payment_body(order))

        forbidden = await client.get("/api/payments", headers=passenger["headers"])
        allowed = await client.get("/api/payments", headers=staff["headers"])

        assert forbidden.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()["results"] == 1


class TestPaymentStatus:
    """PATCH /api/payments/{id}/status"""

    async def test_marking_failed_cancels_order(self, client, passenger, staff, order):
        created = await client.post(
            "/api/payments",
            headers=passenger["headers"],
            json=payment_body(order, status="pending"),
        )
        payment_id = created.json()["data"]["payment"]["id"]

        response = await client.patch(
            f"/api/payments/{payment_id}/status",
            headers=staff["headers"],
            json={"status": "failed", "metadata": {"reason": "declined"}},
        )

        assert response.status_code == 200
        payment = response.json()["data"]["payment"]
        assert payment["status"] == "failed"
        assert payment["metadata"] == {"reason": "declined"}
        assert await order_status(client, passenger, order["id"]) == "cancelled"

    async def test_marking_completed_processes_order(self, client, passenger, staff, order):
        created = await client.post(
            "/api/payments",
            headers=passenger["headers"],
            json=payment_body(order, status="pending"),
        )
        payment_id = created.json()["data"]["payment"]["id"]

        await client.patch(
            f"/api/payments/{payment_id}/status",
            headers=staff["headers"],
            json={"status": "completed"},
        )

        assert await order_status(client, passenger, order["id"]) == "processing"

    async def test_unknown_payment(self, client, staff):
        response = await client.patch(
            "/api/payments/9999/status",
            headers=staff["headers"],
            json={"status": "refunded"},
        )

        assert response.status_code == 404


class TestPaymentOwnership:
    """Passengers only see and record payments for their own orders."""

    async def test_cannot_record_payment_on_another_passengers_order(self, client, passenger, other_passenger, order):
        response = await client.post(
            "/api/payments",
            headers=other_passenger["headers"],
            json=payment_body(order, status="failed"),
        )

        assert response.status_code == 403
        assert await order_status(client, passenger, order["id"]) == "pending"

    async def test_staff_can_record_payment_on_any_order(self, client, passenger, staff, order):
        response = await client.post("/api/payments", headers=staff["headers"], json=payment_body(order))

        assert response.status_code == 201
        assert await order_status(client, passenger, order["id"]) == "processing"

    async def test_cannot_list_another_passengers_payments(self, client, passenger, other_passenger, staff, order):
        await client.post("/api/payments", headers=passenger["headers"], json=payment_body(order))

        forbidden = await client.get(f"/api/payments/order/{order['id']}", headers=other_passenger["headers"])
        allowed = await client.get(f"/api/payments/order/{order['id']}", headers=staff["headers"])

        assert forbidden.status_code == 403
        assert allowed.json()["results"] == 1

    async def test_cannot_read_another_passengers_transaction(self, client, passenger, other_passenger, staff, order):
        await client.post("/api/payments", headers=passenger["headers"], json=payment_body(order))

        forbidden = await client.get("/api/payments/transaction/TR123456", headers=other_passenger["headers"])
        allowed = await client.get("/api/payments/transaction/TR123456", headers=staff["headers"])

        assert forbidden.status_code == 403
        assert allowed.status_code == 200
