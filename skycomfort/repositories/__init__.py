"""
Repository Layer

One repository per entity, each bound to a request-scoped AsyncSession:
    - UserRepository: accounts and password verification
    - ServiceRepository: catalog items
    - OrderRepository: orders with price-snapshot items
    - PaymentRepository: payments and the order transitions they trigger
"""

from skycomfort.repositories.base import BaseRepository
from skycomfort.repositories.catalog import ServiceRepository
from skycomfort.repositories.orders import OrderRepository
from skycomfort.repositories.payments import PaymentRepository
from skycomfort.repositories.users import UserRepository

__all__ = [
    "BaseRepository",
    "ServiceRepository",
    "OrderRepository",
    "PaymentRepository",
    "UserRepository",
]
