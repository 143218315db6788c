"""
                        Services Module

Business logic above the repositories:
    - auth: registration, login and token handling
    - sync: offline mutation batches from the mobile client
    - payment: mock card processor behind a method-call bridge
"""

from skycomfort.services.auth import AuthService
from skycomfort.services.sync import SyncService

__all__ = ["AuthService", "SyncService"]
