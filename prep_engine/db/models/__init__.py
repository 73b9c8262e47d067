# SQLAlchemy models
from .base import Base
from .mastery import EnergyLogRow, TopicMasteryRow

__all__ = ["Base", "EnergyLogRow", "TopicMasteryRow"]
