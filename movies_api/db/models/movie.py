from __future__ import annotations

import uuid

from sqlalchemy import Index, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from movies_api.db.base_class import Base


class MovieModel(Base):
    """A catalog entry. `slug` is derived from title + year and unique."""

    __tablename__ = "movies"
    __table_args__ = (Index("movies_slug_idx", "slug", unique=True),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    slug: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    yearofrelease: Mapped[int] = mapped_column(Integer, nullable=False)


movies_table = MovieModel.__table__
