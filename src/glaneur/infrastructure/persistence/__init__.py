"""
Persistence layer - SQLAlchemy models, database and repositories.
"""

from glaneur.infrastructure.persistence.database import Database
from glaneur.infrastructure.persistence.models import Base

__all__ = ["Base", "Database"]
