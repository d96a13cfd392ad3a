"""
Read-only lookups over the genre and age-rating reference tables.
"""

from typing import List

from films.exceptions import GenreNotFoundError, RatingNotFoundError
from films.models import Genre, Rating


class GenreCatalog:
    def get_by_id(self, genre_id: int) -> Genre:
        try:
            return Genre.objects.get(pk=genre_id)
        except Genre.DoesNotExist:
            raise GenreNotFoundError(genre_id)

    def get_all(self) -> List[Genre]:
        return list(Genre.objects.order_by("id"))


class RatingCatalog:
    def get_by_id(self, rating_id: int) -> Rating:
        try:
            return Rating.objects.get(pk=rating_id)
        except Rating.DoesNotExist:
            raise RatingNotFoundError(rating_id)

    def get_all(self) -> List[Rating]:
        return list(Rating.objects.order_by("id"))
