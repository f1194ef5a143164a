# movies_api/db/base.py
"""
Model registry: importing this module registers every table on
`Base.metadata` so `create_all` sees the full schema.
"""

from movies_api.db.base_class import Base  # noqa: F401
from movies_api.db.models import MovieModel, RatingModel, genres_table  # noqa: F401

__all__ = ["Base", "MovieModel", "RatingModel", "genres_table"]
