"""
Tests for order placement and the order endpoints.
"""

from sqlalchemy import func, select

from skycomfort.models import Order, OrderItem


def order_body(catalog, *quantities, **overrides):
    body = {
        "flightId": "SC101",
        "seatNumber": "12A",
        "items": [
            {"serviceId": service["id"], "quantity": qty}
            for service, qty in zip(catalog, quantities)
        ],
    }
    body.update(overrides)
    return body


async def place_order(client, user, catalog, *quantities, **overrides):
    response = await client.post(
        "/api/orders",
        headers=user["headers"],
        json=order_body(catalog, *quantities, **overrides),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["order"]


class TestCreateOrder:
    """POST /api/orders"""

    async def test_total_is_sum_of_price_snapshots(self, client, passenger, catalog):
        order = await place_order(client, passenger, catalog, 3, 1)

        # 4.99 * 3 + 15.99 * 1
        assert order["totalAmount"] == 30.96
        assert order["status"] == "pending"
        assert order["userId"] == passenger["user"]["id"]
        assert order["flightId"] == "SC101"
        assert len(order["items"]) == 2
        assert order["items"][0]["price"] == catalog[0]["price"]
        assert order["items"][0]["quantity"] == 3
        assert order["items"][0]["service"]["title"] == catalog[0]["title"]
        assert order["payments"] == []

    async def test_quantity_defaults_to_one(self, client, passenger, catalog):
        response = await client.post("/api/orders", headers=passenger["headers"], json={
            "flightId": "SC101",
            "seatNumber": "12A",
            "items": [{"serviceId": catalog[2]["id"]}],
        })

        order = response.json()["data"]["order"]
        assert order["items"][0]["quantity"] == 1
        assert order["totalAmount"] == catalog[2]["price"]

    async def test_total_unchanged_by_later_price_change(self, client, passenger, staff, catalog):
        order = await place_order(client, passenger, catalog, 2)

        await client.put(
            f"/api/services/{catalog[0]['id']}",
            headers=staff["headers"],
            json={"price": 99.0},
        )

        response = await client.get(f"/api/orders/{order['id']}", headers=passenger["headers"])
        reread = response.json()["data"]["order"]
        assert reread["totalAmount"] == 9.98
        assert reread["items"][0]["price"] == catalog[0]["price"]

    async def test_missing_service_persists_nothing(self, client, passenger, catalog, session_maker):
        body = order_body(catalog, 1)
        body["items"].append({"serviceId": 9999, "quantity": 1})

        response = await client.post("/api/orders", headers=passenger["headers"], json=body)

        assert response.status_code == 404
        assert response.json() == {"status": "error", "message": "Service with ID 9999 not found"}

        async with session_maker() as session:
            orders = (await session.execute(select(func.count(Order.id)))).scalar()
            items = (await session.execute(select(func.count(OrderItem.id)))).scalar()
        assert orders == 0
        assert items == 0

    async def test_empty_items_rejected(self, client, passenger):
        response = await client.post("/api/orders", headers=passenger["headers"], json={
            "flightId": "SC101", "seatNumber": "12A", "items": [],
        })

        assert response.status_code == 400

    async def test_requires_authentication(self, client, catalog):
        response = await client.post("/api/orders", json=order_body(catalog, 1))

        assert response.status_code == 401

    async def test_passenger_cannot_order_for_someone_else(self, client, passenger, other_passenger, catalog):
        order = await place_order(client, passenger, catalog, 1, userId=other_passenger["user"]["id"])

        assert order["userId"] == passenger["user"]["id"]

    async def test_staff_can_order_for_a_passenger(self, client, staff, passenger, catalog):
        order = await place_order(client, staff, catalog, 1, userId=passenger["user"]["id"])

        assert order["userId"] == passenger["user"]["id"]

    async def test_unknown_user_id(self, client, staff, catalog):
        response = await client.post(
            "/api/orders",
            headers=staff["headers"],
            json=order_body(catalog, 1, userId=9999),
        )

        assert response.status_code == 404
        assert response.json() == {"status": "error", "message": "User with ID 9999 not found"}


class TestReadOrders:
    """GET /api/orders/user and /api/orders/{id}"""

    async def test_my_orders_only_lists_own(self, client, passenger, other_passenger, catalog):
        mine = await place_order(client, passenger, catalog, 1)
        await place_order(client, other_passenger, catalog, 1)

        response = await client.get("/api/orders/user", headers=passenger["headers"])

        body = response.json()
        assert body["results"] == 1
        assert body["data"]["orders"][0]["id"] == mine["id"]

    async def test_other_passenger_cannot_read_order(self, client, passenger, other_passenger, catalog):
        order = await place_order(client, passenger, catalog, 1)

        response = await client.get(f"/api/orders/{order['id']}", headers=other_passenger["headers"])

        assert response.status_code == 403

    async def test_staff_can_read_any_order(self, client, passenger, staff, catalog):
        order = await place_order(client, passenger, catalog, 1)

        response = await client.get(f"/api/orders/{order['id']}", headers=staff["headers"])

        assert response.status_code == 200
        assert response.json()["data"]["order"]["id"] == order["id"]

    async def test_missing_order(self, client, passenger):
        response = await client.get("/api/orders/9999", headers=passenger["headers"])

        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"


class TestStaffOrders:
    """Staff order listing and status changes."""

    async def test_list_with_status_filter(self, client, passenger, staff, catalog):
        first = await place_order(client, passenger, catalog, 1)
        await place_order(client, passenger, catalog, 2)

        await client.patch(
            f"/api/orders/{first['id']}/status",
            headers=staff["headers"],
            json={"status": "completed"},
        )

        everything = await client.get("/api/orders", headers=staff["headers"])
        completed = await client.get("/api/orders", headers=staff["headers"], params={"status": "completed"})

        assert everything.json()["results"] == 2
        assert completed.json()["results"] == 1
        assert completed.json()["data"]["orders"][0]["id"] == first["id"]

    async def test_pagination(self, client, passenger, staff, catalog):
        for _ in range(3):
            await place_order(client, passenger, catalog, 1)

        page = await client.get("/api/orders", headers=staff["headers"], params={"page": 2, "limit": 2})

        assert page.json()["results"] == 1

    async def test_orders_by_flight(self, client, passenger, staff, catalog):
        await place_order(client, passenger, catalog, 1)
        await place_order(client, passenger, catalog, 1, flightId="SC202")

        response = await client.get("/api/orders/flight/SC202", headers=staff["headers"])

        orders = response.json()["data"]["orders"]
        assert len(orders) == 1
        assert orders[0]["flightId"] == "SC202"

    async def test_update_status(self, client, passenger, staff, catalog):
        order = await place_order(client, passenger, catalog, 1)

        response = await client.patch(
            f"/api/orders/{order['id']}/status",
            headers=staff["headers"],
            json={"status": "processing"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["order"]["status"] == "processing"

    async def test_invalid_status_rejected(self, client, passenger, staff, catalog):
        order = await place_order(client, passenger, catalog, 1)

        response = await client.patch(
            f"/api/orders/{order['id']}/status",
            headers=staff["headers"],
            json={"status": "shipped"},
        )

        assert response.status_code == 400

    async def test_passenger_cannot_update_status(self, client, passenger, catalog):
        order = await place_order(client, passenger, catalog, 1)

        response = await client.patch(
            f"/api/orders/{order['id']}/status",
            headers=passenger["headers"],
            json={"status": "completed"},
        )

        assert response.status_code == 403
