"""
Database Seed Script

Creates the tables, an admin staff account and the demo catalog.
Safe to run repeatedly: existing data is left alone.
Run from project root: python scripts/seed.py
"""

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from skycomfort.core.config import setup_logging
from skycomfort.database import async_session_maker, engine, init_db
from skycomfort.repositories import ServiceRepository, UserRepository

ADMIN = {
    "name": "Admin User",
    "email": "admin@skycomfort.com",
    "username": "admin",
    "password": "password123",
    "is_staff": True,
    "is_active": True,
}

SERVICES = [
    # Meals
    {
        "title": "Premium Chicken Meal",
        "description": "Grilled chicken with seasonal vegetables and mashed potatoes",
        "price": 15.99,
        "type": "meal",
        "category": "main",
        "image_url": "/assets/images/services/meals/chicken_meal.jpg",
    },
    {
        "title": "Vegetarian Pasta",
        "description": "Penne pasta with roasted vegetables and tomato sauce",
        "price": 12.99,
        "type": "meal",
        "category": "main",
        "image_url": "/assets/images/services/meals/vegetarian_pasta.jpg",
    },
    # Beverages
    {
        "title": "Craft Beer Selection",
        "description": "Selection of premium craft beers",
        "price": 8.99,
        "type": "beverage",
        "category": "alcoholic",
        "image_url": "/assets/images/services/beverages/craft_beer.jpg",
    },
    {
        "title": "Premium Coffee",
        "description": "Freshly brewed premium coffee",
        "price": 4.99,
        "type": "beverage",
        "category": "hot",
        "image_url": "/assets/images/services/beverages/premium_coffee.jpg",
    },
    # Entertainment
    {
        "title": "Movie Streaming Pass",
        "description": "Access to premium movie streaming service",
        "price": 9.99,
        "type": "entertainment",
        "category": "movies",
        "image_url": "/assets/images/services/entertainment/movie_streaming.jpg",
    },
    {
        "title": "Gaming Premium",
        "description": "Access to premium in-flight gaming",
        "price": 7.99,
        "type": "entertainment",
        "category": "games",
        "image_url": "/assets/images/services/entertainment/gaming.jpg",
    },
    # Comfort
    {
        "title": "Comfort Kit",
        "description": "Premium comfort kit with eye mask, ear plugs, and socks",
        "price": 14.99,
        "type": "comfort",
        "category": "kits",
        "image_url": "/assets/images/services/comfort/comfort_kit.jpg",
    },
    {
        "title": "Premium Pillow",
        "description": "Memory foam travel pillow for maximum comfort",
        "price": 11.99,
        "type": "comfort",
        "category": "pillow",
        "image_url": "/assets/images/services/comfort/premium_pillow.jpg",
    },
]


async def seed_admin(users: UserRepository) -> None:
    if await users.find_by_email(ADMIN["email"]) is not None:
        print("Admin user already exists, skipping...")
        return

    await users.create_user(ADMIN)
    print(f"Admin user created: {ADMIN['email']}")


async def seed_services(services: ServiceRepository) -> None:
    if await services.count() > 0:
        print("Services already exist, skipping...")
        return

    for data in SERVICES:
        await services.create(data)
    print(f"{len(SERVICES)} services created")


async def main() -> None:
    setup_logging()
    print("=" * 60)
    print("Seeding database...")
    print("=" * 60)

    await init_db()

    async with async_session_maker() as session:
        await seed_admin(UserRepository(session))
        await seed_services(ServiceRepository(session))

    await engine.dispose()
    print("Seeding complete")


if __name__ == "__main__":
    asyncio.run(main())
