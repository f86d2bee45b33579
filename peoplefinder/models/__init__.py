# peoplefinder/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db
from .group import Group, Membership
from .person import Person
from .profile_photo import ProfilePhoto

__all__ = [
    "db",
    "BaseModel",
    "Person",
    "ProfilePhoto",
    "Group",
    "Membership",
]
