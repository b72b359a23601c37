"""
SQLModel database models.

Importing this package registers every table with SQLModel.metadata.
"""

from app.models.admin import Admins
from app.models.comment import Comments
from app.models.post import Posts
from app.models.site_setting import SiteSettings

__all__ = [
    "Admins",
    "Comments",
    "Posts",
    "SiteSettings",
]
