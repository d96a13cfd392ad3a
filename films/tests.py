from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from likes.services import LikeLedger
from .domain import FilmAggregate
from .exceptions import (
    ConsistencyFault,
    FilmNotFoundError,
    GenreNotFoundError,
    NotFoundError,
    RatingNotFoundError,
)
from .models import Film, FilmGenre, Genre, Rating
from .services.catalogs import GenreCatalog, RatingCatalog
from .services.popularity import PopularFilmsQuery
from .services.repository import FilmRepository

User = get_user_model()

# ids seeded by films/migrations/0002_reference_data.py
COMEDY, DRAMA, THRILLER = 1, 2, 4
G, PG_13, R = 1, 3, 4


def build_film(name, release_date, genres=None, rating_id=G, **extra):
    return FilmAggregate(
        name=name,
        release_date=release_date,
        description=extra.pop("description", f"About {name}"),
        duration=extra.pop("duration", 100),
        rating=Rating(id=rating_id),
        genres=None if genres is None else [Genre(id=g) for g in genres],
        **extra,
    )


class MissingGenreCatalog(GenreCatalog):
    """Genre catalog that pretends some genres were never stored."""

    def __init__(self, missing_ids):
        self.missing_ids = set(missing_ids)

    def get_by_id(self, genre_id):
        if genre_id in self.missing_ids:
            raise GenreNotFoundError(genre_id)
        return super().get_by_id(genre_id)


class MissingRatingCatalog(RatingCatalog):
    def __init__(self, missing_ids):
        self.missing_ids = set(missing_ids)

    def get_by_id(self, rating_id):
        if rating_id in self.missing_ids:
            raise RatingNotFoundError(rating_id)
        return super().get_by_id(rating_id)


class CatalogTests(TestCase):
    def test_reference_data_is_seeded(self):
        self.assertEqual(
            [g.name for g in GenreCatalog().get_all()],
            ["Comedy", "Drama", "Animation", "Thriller", "Documentary", "Action"],
        )
        self.assertEqual(
            [r.name for r in RatingCatalog().get_all()],
            ["G", "PG", "PG-13", "R", "NC-17"],
        )

    def test_get_by_id_returns_entry(self):
        self.assertEqual(GenreCatalog().get_by_id(DRAMA).name, "Drama")
        self.assertEqual(RatingCatalog().get_by_id(PG_13).name, "PG-13")

    def test_unknown_ids_raise_not_found(self):
        with self.assertRaises(GenreNotFoundError):
            GenreCatalog().get_by_id(999)
        with self.assertRaises(RatingNotFoundError) as ctx:
            RatingCatalog().get_by_id(999)
        self.assertEqual(str(ctx.exception), "Rating with id 999 not found")


class FilmRepositoryTests(TestCase):
    def setUp(self):
        self.repo = FilmRepository()

    def test_create_round_trips_scalar_fields_and_rating(self):
        film = self.repo.create(
            build_film(
                "Arrival",
                date(2016, 9, 1),
                genres=[DRAMA],
                rating_id=PG_13,
                description="Linguist meets heptapods",
                duration=116,
                rate=4,
            )
        )

        self.assertIsNotNone(film.id)
        loaded = self.repo.get_by_id(film.id)
        self.assertEqual(loaded.name, "Arrival")
        self.assertEqual(loaded.release_date, date(2016, 9, 1))
        self.assertEqual(loaded.description, "Linguist meets heptapods")
        self.assertEqual(loaded.duration, 116)
        self.assertEqual(loaded.rate, 4)
        self.assertEqual(loaded.rating.id, PG_13)
        self.assertEqual(loaded.rating.name, "PG-13")
        self.assertEqual([g.name for g in loaded.genres], ["Drama"])
        self.assertEqual(loaded.likes, set())
        self.assertEqual(loaded.popularity, 0)

    def test_create_collapses_duplicate_genres(self):
        film = self.repo.create(
            build_film("Heat", date(1995, 12, 15), genres=[THRILLER, DRAMA, THRILLER])
        )

        self.assertEqual(FilmGenre.objects.filter(film_id=film.id).count(), 2)
        self.assertEqual([g.id for g in film.genres], [DRAMA, THRILLER])

    def test_create_without_genres_reads_back_empty_list(self):
        film = self.repo.create(build_film("Koyaanisqatsi", date(1982, 4, 27)))
        self.assertEqual(film.genres, [])

    def test_create_rejects_unknown_rating(self):
        with self.assertRaises(RatingNotFoundError):
            self.repo.create(build_film("Nope", date(2000, 1, 1), rating_id=99))
        self.assertEqual(Film.objects.count(), 0)

    def test_create_rejects_unknown_genre_without_writing(self):
        with self.assertRaises(GenreNotFoundError):
            self.repo.create(build_film("Nope", date(2000, 1, 1), genres=[COMEDY, 99]))
        self.assertEqual(Film.objects.count(), 0)
        self.assertEqual(FilmGenre.objects.count(), 0)

    def test_create_rejects_film_with_id(self):
        with self.assertRaises(ValueError):
            self.repo.create(build_film("Nope", date(2000, 1, 1), id=5))

    def test_update_replaces_scalar_fields(self):
        film = self.repo.create(build_film("Alien", date(1979, 5, 25), genres=[THRILLER]))

        updated = self.repo.update(
            build_film(
                "Alien: Director's Cut",
                date(2003, 10, 31),
                rating_id=R,
                description="In space no one can hear you scream",
                duration=116,
                rate=9,
                id=film.id,
            )
        )

        loaded = self.repo.get_by_id(film.id)
        for result in (updated, loaded):
            self.assertEqual(result.name, "Alien: Director's Cut")
            self.assertEqual(result.release_date, date(2003, 10, 31))
            self.assertEqual(result.description, "In space no one can hear you scream")
            self.assertEqual(result.duration, 116)
            self.assertEqual(result.rate, 9)
            self.assertEqual(result.rating.name, "R")

    def test_update_without_genres_keeps_existing_genres(self):
        film = self.repo.create(
            build_film("Fargo", date(1996, 3, 8), genres=[COMEDY, DRAMA])
        )

        updated = self.repo.update(build_film("Fargo", date(1996, 3, 8), id=film.id))

        self.assertEqual([g.id for g in updated.genres], [COMEDY, DRAMA])

    def test_update_with_genres_replaces_them(self):
        film = self.repo.create(
            build_film("Fargo", date(1996, 3, 8), genres=[COMEDY, DRAMA])
        )

        updated = self.repo.update(
            build_film("Fargo", date(1996, 3, 8), genres=[THRILLER], id=film.id)
        )

        self.assertEqual([g.id for g in updated.genres], [THRILLER])
        self.assertEqual(
            list(FilmGenre.objects.filter(film_id=film.id).values_list("genre_id", flat=True)),
            [THRILLER],
        )

    def test_update_with_empty_genres_clears_them(self):
        film = self.repo.create(
            build_film("Fargo", date(1996, 3, 8), genres=[COMEDY, DRAMA])
        )

        updated = self.repo.update(
            build_film("Fargo", date(1996, 3, 8), genres=[], id=film.id)
        )

        self.assertEqual(updated.genres, [])
        self.assertEqual(self.repo.get_by_id(film.id).genres, [])

    def test_update_with_unknown_genre_leaves_film_unchanged(self):
        film = self.repo.create(build_film("Orig", date(2005, 6, 1), genres=[COMEDY]))

        with self.assertRaises(GenreNotFoundError):
            self.repo.update(
                build_film("Changed", date(2006, 6, 1), genres=[999], id=film.id)
            )

        loaded = self.repo.get_by_id(film.id)
        self.assertEqual(loaded.name, "Orig")
        self.assertEqual(loaded.release_date, date(2005, 6, 1))
        self.assertEqual([g.id for g in loaded.genres], [COMEDY])

    def test_update_unknown_film_raises_not_found(self):
        with self.assertRaises(FilmNotFoundError):
            self.repo.update(build_film("Ghost", date(2000, 1, 1), id=12345))

    def test_update_requires_id(self):
        with self.assertRaises(ValueError):
            self.repo.update(build_film("Ghost", date(2000, 1, 1)))

    def test_get_by_id_unknown_raises_not_found(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.repo.get_by_id(404)
        self.assertIsInstance(ctx.exception, FilmNotFoundError)
        self.assertEqual(str(ctx.exception), "Film with id 404 not found")

    def test_get_by_id_loads_every_liking_user(self):
        film = self.repo.create(build_film("Amélie", date(2001, 4, 25)))
        users = [
            User.objects.create_user(username=f"fan{i}", password="testpass123")
            for i in range(3)
        ]
        for user in users:
            LikeLedger().add(film.id, user.id)

        loaded = self.repo.get_by_id(film.id)

        self.assertEqual(loaded.likes, {user.id for user in users})
        self.assertEqual(loaded.popularity, 3)

    def test_get_by_id_with_unresolvable_genre_raises_consistency_fault(self):
        film = self.repo.create(build_film("Broken", date(2010, 1, 1), genres=[COMEDY]))
        repo = FilmRepository(genres=MissingGenreCatalog({COMEDY}))

        with self.assertLogs("films", level="ERROR"):
            with self.assertRaises(ConsistencyFault) as ctx:
                repo.get_by_id(film.id)

        self.assertIsInstance(ctx.exception, NotFoundError)
        self.assertEqual(ctx.exception.film_id, film.id)
        self.assertEqual(ctx.exception.object_id, COMEDY)

    def test_get_all_lists_films_by_id(self):
        first = self.repo.create(build_film("One", date(2001, 1, 1)))
        second = self.repo.create(build_film("Two", date(2002, 1, 1)))

        self.assertEqual([f.id for f in self.repo.get_all()], [first.id, second.id])

    def test_get_all_skips_films_that_fail_to_resolve(self):
        broken = self.repo.create(build_film("Broken", date(2010, 1, 1), genres=[COMEDY]))
        healthy = self.repo.create(build_film("Healthy", date(2011, 1, 1), genres=[DRAMA]))
        repo = FilmRepository(genres=MissingGenreCatalog({COMEDY}))

        with self.assertLogs("films", level="WARNING") as logs:
            films = repo.get_all()

        self.assertEqual([f.id for f in films], [healthy.id])
        self.assertTrue(any(f"Skipping film {broken.id}" in line for line in logs.output))

    def test_get_by_id_with_unresolvable_rating_raises_consistency_fault(self):
        film = self.repo.create(build_film("Unrated", date(2012, 1, 1), rating_id=PG_13))
        repo = FilmRepository(ratings=MissingRatingCatalog({PG_13}))

        with self.assertLogs("films", level="ERROR"):
            with self.assertRaises(ConsistencyFault) as ctx:
                repo.get_by_id(film.id)

        self.assertIsInstance(ctx.exception.cause, RatingNotFoundError)
        self.assertEqual(ctx.exception.film_id, film.id)
        self.assertEqual(ctx.exception.object_id, PG_13)

    def test_get_all_skips_films_with_unresolvable_rating(self):
        unrated = self.repo.create(build_film("Unrated", date(2012, 1, 1), rating_id=PG_13))
        rated = self.repo.create(build_film("Rated", date(2013, 1, 1), rating_id=G))
        repo = FilmRepository(ratings=MissingRatingCatalog({PG_13}))

        with self.assertLogs("films", level="WARNING") as logs:
            films = repo.get_all()

        self.assertEqual([f.id for f in films], [rated.id])
        self.assertTrue(any(f"Skipping film {unrated.id}" in line for line in logs.output))

    def test_get_all_on_empty_database(self):
        self.assertEqual(self.repo.get_all(), [])


class RankedFilmsTests(TestCase):
    """
    Films A (2020, Comedy), B (2020, Drama) and C (2019, Comedy) with
    2, 1 and 3 likes respectively.
    """

    def setUp(self):
        self.repo = FilmRepository()
        self.ledger = LikeLedger()
        self.users = [
            User.objects.create_user(username=f"viewer{i}", password="testpass123")
            for i in range(3)
        ]

        self.a = self.repo.create(build_film("A", date(2020, 2, 1), genres=[COMEDY]))
        self.b = self.repo.create(
            build_film("B", date(2020, 7, 1), genres=[DRAMA], rating_id=PG_13)
        )
        self.c = self.repo.create(build_film("C", date(2019, 3, 1), genres=[COMEDY]))

        self.like(self.a, 2)
        self.like(self.b, 1)
        self.like(self.c, 3)

    def like(self, film, count):
        for user in self.users[:count]:
            self.ledger.add(film.id, user.id)

    def names(self, films):
        return [f.name for f in films]

    def test_genre_and_year_require_both(self):
        self.assertEqual(
            self.names(self.repo.get_ranked(genre_id=COMEDY, year=2020)), ["A"]
        )

    def test_genre_only(self):
        self.assertEqual(self.names(self.repo.get_ranked(genre_id=COMEDY)), ["C", "A"])

    def test_year_only(self):
        self.assertEqual(self.names(self.repo.get_ranked(year=2020)), ["A", "B"])

    def test_no_filters_returns_every_film_by_popularity(self):
        films = self.repo.get_ranked()

        self.assertEqual(self.names(films), ["C", "A", "B"])
        self.assertEqual([f.popularity for f in films], [3, 2, 1])

    def test_limit_keeps_most_popular(self):
        self.assertEqual(self.names(self.repo.get_ranked(limit=2)), ["C", "A"])
        self.assertEqual(self.names(self.repo.get_ranked(year=2020, limit=1)), ["A"])

    def test_limit_zero_returns_nothing(self):
        self.assertEqual(self.repo.get_ranked(limit=0), [])

    def test_negative_limit_is_rejected(self):
        with self.assertRaises(ValueError):
            self.repo.get_ranked(limit=-1)

    def test_films_without_likes_rank_last_with_zero(self):
        d = self.repo.create(build_film("D", date(2020, 9, 1)))

        films = self.repo.get_ranked(year=2020)

        self.assertEqual(self.names(films), ["A", "B", "D"])
        self.assertEqual(films[-1].id, d.id)
        self.assertEqual(films[-1].popularity, 0)

    def test_ties_are_broken_by_id(self):
        first = self.repo.create(build_film("E", date(1999, 1, 1)))
        second = self.repo.create(build_film("F", date(1999, 1, 1)))

        films = self.repo.get_ranked(year=1999)

        self.assertEqual([f.id for f in films], [first.id, second.id])

    def test_ties_between_liked_films_are_broken_by_id(self):
        first = self.repo.create(build_film("E", date(1999, 1, 1)))
        second = self.repo.create(build_film("F", date(1999, 1, 1)))
        # second film receives its likes first
        self.like(second, 2)
        self.like(first, 2)

        films = self.repo.get_ranked(year=1999)

        self.assertEqual([f.id for f in films], [first.id, second.id])
        self.assertEqual([f.popularity for f in films], [2, 2])

    def test_no_match_returns_empty_list(self):
        self.assertEqual(self.repo.get_ranked(genre_id=THRILLER), [])
        self.assertEqual(self.repo.get_ranked(year=1950), [])

    def test_ranked_items_are_summary_projections(self):
        b = self.repo.get_ranked(genre_id=DRAMA)[0]

        self.assertEqual(b.id, self.b.id)
        self.assertEqual(b.rating.name, "PG-13")
        self.assertEqual(b.genres, [])
        self.assertEqual(b.likes, set())
        self.assertEqual(b.popularity, 1)

    def test_popularity_follows_the_ledger(self):
        self.ledger.remove(self.c.id, self.users[0].id)
        self.ledger.remove(self.c.id, self.users[1].id)

        self.assertEqual(self.names(self.repo.get_ranked()), ["A", "B", "C"])

    def test_query_builder_composes_predicates(self):
        self.assertEqual(PopularFilmsQuery().predicates(), [])
        self.assertEqual(len(PopularFilmsQuery(genre_id=COMEDY).predicates()), 1)
        self.assertEqual(len(PopularFilmsQuery(genre_id=COMEDY, year=2020).predicates()), 2)


class FilmAPITests(APITestCase):
    def setUp(self):
        self.repo = FilmRepository()
        self.user = User.objects.create_user(
            username="testuser",
            email="test@example.com",
            password="testpass123",
        )
        self.film = self.repo.create(
            build_film("Test Film", date(2020, 5, 1), genres=[COMEDY, DRAMA])
        )
        self.list_url = reverse("film-list")

    def payload(self, **overrides):
        data = {
            "name": "Arrival",
            "description": "Linguist meets heptapods",
            "release_date": "2016-09-01",
            "duration": 116,
            "rating": {"id": PG_13},
            "genres": [{"id": DRAMA}],
        }
        data.update(overrides)
        return data

    def test_list_films_returns_200_and_includes_film(self):
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["name"] for item in response.data], ["Test Film"])

    def test_create_film(self):
        response = self.client.post(self.list_url, self.payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["name"], "Arrival")
        self.assertEqual(response.data["rating"], {"id": PG_13, "name": "PG-13"})
        self.assertEqual(response.data["genres"], [{"id": DRAMA, "name": "Drama"}])
        self.assertEqual(response.data["likes"], [])
        self.assertEqual(response.data["popularity"], 0)
        self.assertEqual(Film.objects.count(), 2)

    def test_create_rejects_release_before_first_screening(self):
        response = self.client.post(
            self.list_url, self.payload(release_date="1890-01-01"), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_rejects_blank_name_and_bad_duration(self):
        response = self.client.post(
            self.list_url, self.payload(name=" ", duration=0), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("name", response.data)
        self.assertIn("duration", response.data)

    def test_create_with_unknown_rating_returns_404(self):
        response = self.client.post(
            self.list_url, self.payload(rating={"id": 99}), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["detail"], "Rating with id 99 not found")

    def test_update_without_genres_keeps_them(self):
        payload = self.payload(id=self.film.id, name="Renamed")
        del payload["genres"]

        response = self.client.put(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["name"], "Renamed")
        self.assertEqual([g["id"] for g in response.data["genres"]], [COMEDY, DRAMA])

    def test_update_with_empty_genres_clears_them(self):
        response = self.client.put(
            self.list_url, self.payload(id=self.film.id, genres=[]), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["genres"], [])

    def test_update_requires_id(self):
        response = self.client.put(self.list_url, self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Film id is required for an update.")

    def test_update_unknown_film_returns_404(self):
        response = self.client.put(
            self.list_url, self.payload(id=9999), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_retrieve_single_film(self):
        url = reverse("film-detail", args=[self.film.id])
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["name"], "Test Film")
        self.assertEqual(response.data["rating"]["name"], "G")

    def test_retrieve_missing_film_returns_404(self):
        response = self.client.get(reverse("film-detail", args=[9999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["detail"], "Film with id 9999 not found")

    def test_like_and_unlike(self):
        url = reverse("film-like", args=[self.film.id, self.user.id])

        response = self.client.put(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        detail = self.client.get(reverse("film-detail", args=[self.film.id]))
        self.assertEqual(detail.data["likes"], [self.user.id])

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        detail = self.client.get(reverse("film-detail", args=[self.film.id]))
        self.assertEqual(detail.data["likes"], [])

    def test_like_unknown_film_or_user_returns_404(self):
        response = self.client.put(reverse("film-like", args=[9999, self.user.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.put(reverse("film-like", args=[self.film.id, 9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_popular_films(self):
        other = self.repo.create(build_film("Other Film", date(2019, 1, 1)))
        LikeLedger().add(other.id, self.user.id)
        url = reverse("film-popular")

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [item["name"] for item in response.data], ["Other Film", "Test Film"]
        )
        self.assertEqual(response.data[0]["popularity"], 1)

        response = self.client.get(url, {"genre_id": COMEDY, "year": 2020})
        self.assertEqual([item["name"] for item in response.data], ["Test Film"])

        response = self.client.get(url, {"count": 1})
        self.assertEqual([item["name"] for item in response.data], ["Other Film"])

    def test_popular_films_rejects_non_positive_count(self):
        response = self.client.get(reverse("film-popular"), {"count": 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_genre_and_rating_catalog_endpoints(self):
        response = self.client.get(reverse("genre-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 6)

        response = self.client.get(reverse("genre-detail", args=[COMEDY]))
        self.assertEqual(response.data, {"id": COMEDY, "name": "Comedy"})

        response = self.client.get(reverse("rating-list"))
        self.assertEqual([r["name"] for r in response.data], ["G", "PG", "PG-13", "R", "NC-17"])

        response = self.client.get(reverse("rating-detail", args=[99]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
