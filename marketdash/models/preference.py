"""String-keyed user preferences (watchlist and similar)."""

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from marketdash.models.base import Base


class Preference(Base):
    __tablename__ = "preferences"

    key: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
    )

    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
