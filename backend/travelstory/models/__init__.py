"""
TravelStory Backend - ORM Models
==================================

Importing this package registers every table with Base.metadata, which is
what Alembic autogenerate and the test suite's create_all() rely on.
"""

from travelstory.models.user import User
from travelstory.models.story import Story

__all__ = ["User", "Story"]
