"""
Cabin Simulation Script

Simulates a cabin full of passengers using the API at the same time:
register, browse the catalog, order, pay through the mock card bridge,
record the payment and replay an offline sync batch.

Run the server first (and seed it), then from project root:
    python scripts/simulate.py --passengers 20
"""

import argparse
import asyncio
import os
import random
import sys
import time
import uuid
from datetime import datetime
from typing import Any

import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from skycomfort.services.payment import MockPaymentProcessor, PaymentChannel, PaymentChannelError

# Configuration
API_BASE_URL = "http://localhost:3000"
TOTAL_PASSENGERS = 20
FLIGHT_ID = "SC101"

FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Wilson", "Taylor"]
TEST_CARDS = ["4242 4242 4242 4242", "5555 5555 5555 4444", "3782 822463 10005"]


def generate_passenger(num: int) -> dict[str, Any]:
    """Generate random passenger account data."""
    first = random.choice(FIRST_NAMES)
    last = random.choice(LAST_NAMES)
    tag = uuid.uuid4().hex[:8]
    return {
        "name": f"{first} {last}",
        "email": f"{first.lower()}.{last.lower()}.{tag}@example.com",
        "username": f"{first.lower()}{tag}",
        "password": "password123",
        "flightId": FLIGHT_ID,
        "seatNumber": f"{random.randint(1, 40)}{random.choice('ABCDEF')}",
    }


def pick_items(services: list[dict[str, Any]]) -> list[dict[str, Any]]:
    chosen = random.sample(services, k=min(len(services), random.randint(1, 3)))
    return [{"serviceId": s["id"], "quantity": random.randint(1, 2)} for s in chosen]


async def run_passenger(
    client: httpx.AsyncClient,
    channel: PaymentChannel,
    num: int,
) -> dict[str, Any]:
    """Walk one passenger through the full ordering flow."""
    start_time = time.time()
    result: dict[str, Any] = {"passenger": num, "success": False}

    try:
        passenger = generate_passenger(num)
        response = await client.post("/api/auth/register", json=passenger)
        response.raise_for_status()
        headers = {"Authorization": f"Bearer {response.json()['data']['token']}"}

        response = await client.get("/api/services", params={"available": "true"})
        response.raise_for_status()
        services = response.json()["data"]["services"]
        if not services:
            raise RuntimeError("Catalog is empty; run scripts/seed.py first")

        response = await client.post(
            "/api/orders",
            headers=headers,
            json={
                "flightId": passenger["flightId"],
                "seatNumber": passenger["seatNumber"],
                "items": pick_items(services),
            },
        )
        response.raise_for_status()
        order = response.json()["data"]["order"]

        card = random.choice(TEST_CARDS)
        charge = await channel.invoke("processPayment", {
            "cardNumber": card,
            "expiryDate": "12/30",
            "cvv": "123",
            "cardholderName": passenger["name"],
            "amount": order["totalAmount"],
            "saveCard": False,
        })

        response = await client.post(
            "/api/payments",
            headers=headers,
            json={
                "orderId": order["id"],
                "transactionId": charge["transactionId"],
                "amount": charge["amount"],
                "paymentMethod": "credit_card",
                "lastFourDigits": charge["last4Digits"],
            },
        )
        response.raise_for_status()

        response = await client.post(
            "/api/sync",
            headers=headers,
            json={
                "items": [
                    {
                        "entityType": "orders",
                        "entityId": order["id"],
                        "operation": "update",
                        "data": {"notes": "Please serve after takeoff"},
                    },
                    {
                        "entityType": "user_selections",
                        "entityId": f"sel-{num}",
                        "operation": "insert",
                        "data": {"favorite": services[0]["id"]},
                    },
                ],
            },
        )
        response.raise_for_status()
        sync_results = response.json()["data"]["syncResults"]

        result.update({
            "success": all(r["success"] for r in sync_results),
            "order_id": order["id"],
            "total": order["totalAmount"],
            "transaction_id": charge["transactionId"],
        })
    except PaymentChannelError as e:
        result["error"] = f"card declined: {e.code}"
    except httpx.HTTPStatusError as e:
        result["error"] = e.response.text[:100]
    except Exception as e:
        result["error"] = str(e)[:100]

    result["time"] = round(time.time() - start_time, 3)
    return result


async def run_simulation(base_url: str, passengers: int, latency: float) -> dict[str, Any]:
    print("=" * 70)
    print("CABIN SIMULATION")
    print("=" * 70)
    print(f"Passengers: {passengers}")
    print(f"Target: {base_url}")
    print(f"Card latency: {latency}s")
    print(f"Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    channel = PaymentChannel(MockPaymentProcessor(latency=latency))
    start_time = time.time()

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        response = await client.get("/health")
        if response.status_code != 200:
            print(f"Health check failed: {response.text}")
            return {"total": passengers, "successful": 0, "failed": passengers, "results": []}

        tasks = [run_passenger(client, channel, i + 1) for i in range(passengers)]
        results = await asyncio.gather(*tasks)

    total_time = round(time.time() - start_time, 2)
    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print(f"\nSuccessful passengers: {len(successful)}/{passengers}")
    print(f"Failed passengers: {len(failed)}/{passengers}")
    print(f"Total time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        revenue = sum(r["total"] for r in successful)
        print(f"Average flow time: {avg_time}s")
        print(f"Revenue: ${revenue:.2f}")

    if failed:
        print("\nFailures (first 5):")
        for f in failed[:5]:
            print(f"   Passenger #{f['passenger']}: {f.get('error', 'sync item failed')}")

    print("=" * 70)

    return {
        "total": passengers,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Cabin Simulation Script")
    parser.add_argument("--base-url", default=API_BASE_URL, help="API base URL")
    parser.add_argument("--passengers", type=int, default=TOTAL_PASSENGERS, help="Number of passengers")
    parser.add_argument("--latency", type=float, default=1.0, help="Simulated card processing delay")
    args = parser.parse_args()

    summary = asyncio.run(run_simulation(args.base_url, args.passengers, args.latency))
    sys.exit(0 if summary["failed"] == 0 else 1)
