from movies_api.db.models.movie import MovieModel
from movies_api.db.models.genre import genres_table
from movies_api.db.models.rating import RatingModel

__all__ = ["MovieModel", "genres_table", "RatingModel"]
