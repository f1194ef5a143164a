from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from movies_api.db.base_class import Base


class RatingModel(Base):
    """One user's rating of one movie; (userid, movieid) is the key."""

    __tablename__ = "ratings"

    userid: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    movieid: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("movies.id"), primary_key=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)


ratings_table = RatingModel.__table__
