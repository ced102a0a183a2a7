# campaign_app/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db
from .organization import Organization
from .role import UserOrganization
from .user import User

__all__ = [
    "db",
    "BaseModel",
    "Organization",
    "User",
    "UserOrganization",
]
