"""
Models module - SQLAlchemy ORM tables of the primary store.
"""

from internhub.models.models import (
    Base, new_id, User, Profile, Company, Internship, Application,
    Notification, Resource, Bookmark, FavoriteCompany
)

__all__ = [
    "Base", "new_id", "User", "Profile", "Company", "Internship", "Application",
    "Notification", "Resource", "Bookmark", "FavoriteCompany"
]
