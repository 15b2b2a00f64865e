"""
Inkpost Backend: ORM Models
=============================

Importing this package registers every model with Base.metadata, which is
what Alembic autogenerate and the test suite's create_all() rely on.
"""

from app.models.post import Post
from app.models.user import User

__all__ = ["Post", "User"]
