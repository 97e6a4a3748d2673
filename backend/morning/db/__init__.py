"""Database utilities and models."""

from morning.db.base import Base
from morning.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
