from marketdash.models.base import Base
from marketdash.models.preference import Preference

__all__ = [
    "Base",
    "Preference",
]
