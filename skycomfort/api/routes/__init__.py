"""
API Routers

Each module exposes a ``router`` mounted by ``skycomfort.main``.
"""

from skycomfort.api.routes import auth, orders, payments, services, sync

__all__ = ["auth", "orders", "payments", "services", "sync"]
