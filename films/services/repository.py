"""
Film repository: stores films with their genre associations and rebuilds
complete film aggregates from the film row, the genre and rating catalogs
and the like ledger.
"""

import logging
from typing import Iterable, List, Optional

from django.db import transaction

from films.domain import FilmAggregate
from films.exceptions import ConsistencyFault, FilmNotFoundError, NotFoundError
from films.models import Film, FilmGenre, Genre
from films.services.catalogs import GenreCatalog, RatingCatalog
from films.services.popularity import PopularFilmsQuery
from likes.services import LikeLedger

logger = logging.getLogger(__name__)


class FilmRepository:
    """High-level CRUD and ranking helpers for films."""

    def __init__(
        self,
        genres: Optional[GenreCatalog] = None,
        ratings: Optional[RatingCatalog] = None,
        likes: Optional[LikeLedger] = None,
    ):
        self.genres = genres or GenreCatalog()
        self.ratings = ratings or RatingCatalog()
        self.likes = likes or LikeLedger()

    # ───────────────────────────── writers ──────────────────────────
    def create(self, film: FilmAggregate) -> FilmAggregate:
        """
        Insert a new film with its genres and return it as read back from
        the database.

        Raises:
            ValueError: the film already carries an id
            RatingNotFoundError / GenreNotFoundError: unknown rating or genre
        """
        if film.id is not None:
            raise ValueError("A new film must not have an id.")

        with transaction.atomic():
            rating = self.ratings.get_by_id(film.rating.id)
            genres = self._resolve_input_genres(film.genres or [])

            row = Film.objects.create(
                name=film.name,
                release_date=film.release_date,
                description=film.description,
                duration=film.duration,
                rate=film.rate,
                rating=rating,
            )
            self._insert_genres(row.id, genres)

            created = self.get_by_id(row.id)

        logger.info("Created film %s %s", created.id, created.name)
        return created

    def update(self, film: FilmAggregate) -> FilmAggregate:
        """
        Overwrite every scalar field of an existing film.

        Genres are replaced only when ``film.genres`` is not None; an empty
        list removes them all.
        """
        if film.id is None:
            raise ValueError("Film id is required for an update.")

        with transaction.atomic():
            try:
                row = Film.objects.select_for_update().get(pk=film.id)
            except Film.DoesNotExist:
                logger.info("Film with id %s not found.", film.id)
                raise FilmNotFoundError(film.id)

            row.name = film.name
            row.release_date = film.release_date
            row.description = film.description
            row.duration = film.duration
            row.rate = film.rate
            row.rating = self.ratings.get_by_id(film.rating.id)
            row.save()

            if film.genres is not None:
                genres = self._resolve_input_genres(film.genres)
                FilmGenre.objects.filter(film_id=row.id).delete()
                self._insert_genres(row.id, genres)

            updated = self.get_by_id(row.id)

        logger.info("Updated film %s %s", updated.id, updated.name)
        return updated

    # ───────────────────────────── readers ──────────────────────────
    def get_by_id(self, film_id: int) -> FilmAggregate:
        try:
            row = Film.objects.get(pk=film_id)
        except Film.DoesNotExist:
            logger.info("Film with id %s not found.", film_id)
            raise FilmNotFoundError(film_id)

        genre_ids = (
            FilmGenre.objects.filter(film_id=film_id)
            .order_by("genre_id")
            .values_list("genre_id", flat=True)
        )
        genres = [self._resolve(film_id, self.genres, genre_id) for genre_id in genre_ids]
        rating = self._resolve(film_id, self.ratings, row.rating_id)
        likes = self.likes.users_for(film_id)

        logger.info("Found film %s %s", row.id, row.name)
        return FilmAggregate(
            id=row.id,
            name=row.name,
            release_date=row.release_date,
            description=row.description,
            duration=row.duration,
            rate=row.rate,
            rating=rating,
            genres=genres,
            likes=likes,
            popularity=len(likes),
        )

    def get_all(self) -> List[FilmAggregate]:
        """
        Every film that can be assembled, by id. Films that fail to resolve
        are logged and left out instead of failing the whole listing.
        """
        films = []
        for film_id in Film.objects.order_by("id").values_list("id", flat=True):
            try:
                films.append(self.get_by_id(film_id))
            except NotFoundError as exc:
                logger.warning("Skipping film %s in listing: %s", film_id, exc)
        return films

    def get_ranked(
        self,
        genre_id: Optional[int] = None,
        year: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[FilmAggregate]:
        """
        Films ordered by number of likes, most liked first.

        Args:
            genre_id: keep only films tagged with this genre
            year: keep only films released in this year
            limit: return at most this many films

        Returns:
            Summary aggregates carrying rating and popularity; genres and
            likes are not loaded. An empty list when nothing matches.
        """
        query = PopularFilmsQuery(genre_id=genre_id, year=year, limit=limit)
        return [
            FilmAggregate(
                id=row.id,
                name=row.name,
                release_date=row.release_date,
                description=row.description,
                duration=row.duration,
                rate=row.rate,
                rating=row.rating,
                genres=[],
                likes=set(),
                popularity=row.popularity,
            )
            for row in query.queryset()
        ]

    # ───────────────────────────── helpers ──────────────────────────
    def _resolve_input_genres(self, genres: Iterable[Genre]) -> List[Genre]:
        # one row per distinct genre, unknown ids are rejected
        distinct_ids = sorted({genre.id for genre in genres})
        return [self.genres.get_by_id(genre_id) for genre_id in distinct_ids]

    @staticmethod
    def _insert_genres(film_id: int, genres: List[Genre]) -> None:
        if genres:
            FilmGenre.objects.bulk_create(
                [FilmGenre(film_id=film_id, genre_id=genre.id) for genre in genres]
            )

    @staticmethod
    def _resolve(film_id: int, catalog, object_id: int):
        try:
            return catalog.get_by_id(object_id)
        except NotFoundError as exc:
            logger.error(
                "Referential corruption: film %s points at a missing record (%s)",
                film_id,
                exc,
            )
            raise ConsistencyFault(film_id, exc)
