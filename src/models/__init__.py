"""ORM models."""

from models.base import Base
from models.battle import Battle
from models.squad import Squad

__all__ = [
    "Base",
    "Battle",
    "Squad",
]
