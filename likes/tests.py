# likes/tests.py

from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase

from films.exceptions import FilmNotFoundError, UserNotFoundError
from films.models import Film, Rating
from .models import Like
from .services import LikeLedger

User = get_user_model()


class LikeLedgerTests(TestCase):
    def setUp(self):
        self.ledger = LikeLedger()

        self.user = User.objects.create_user(
            username="likeuser",
            email="like@example.com",
            password="testpass123",
        )
        self.other = User.objects.create_user(
            username="otheruser",
            email="other@example.com",
            password="otherpass123",
        )

        self.film = Film.objects.create(
            name="Liked Film",
            release_date=date(2024, 1, 1),
            description="",
            duration=90,
            rating=Rating.objects.get(pk=1),
        )

    def test_add_records_like(self):
        self.ledger.add(self.film.id, self.user.id)

        self.assertEqual(self.ledger.count_for(self.film.id), 1)
        self.assertEqual(self.ledger.users_for(self.film.id), {self.user.id})

    def test_add_is_idempotent(self):
        self.ledger.add(self.film.id, self.user.id)
        self.ledger.add(self.film.id, self.user.id)

        self.assertEqual(self.ledger.count_for(self.film.id), 1)
        self.assertEqual(Like.objects.count(), 1)

    def test_count_for_counts_distinct_users(self):
        self.ledger.add(self.film.id, self.user.id)
        self.ledger.add(self.film.id, self.other.id)

        self.assertEqual(self.ledger.count_for(self.film.id), 2)

    def test_count_for_film_without_likes_is_zero(self):
        self.assertEqual(self.ledger.count_for(self.film.id), 0)
        self.assertEqual(self.ledger.users_for(self.film.id), set())

    def test_remove_deletes_like(self):
        self.ledger.add(self.film.id, self.user.id)
        self.ledger.add(self.film.id, self.other.id)

        self.ledger.remove(self.film.id, self.user.id)

        self.assertEqual(self.ledger.users_for(self.film.id), {self.other.id})

    def test_remove_absent_like_is_noop(self):
        self.ledger.remove(self.film.id, self.user.id)
        self.ledger.remove(self.film.id, self.user.id)

        self.assertEqual(self.ledger.count_for(self.film.id), 0)

    def test_unknown_film_raises_not_found(self):
        with self.assertRaises(FilmNotFoundError):
            self.ledger.add(9999, self.user.id)
        with self.assertRaises(FilmNotFoundError):
            self.ledger.remove(9999, self.user.id)
        self.assertEqual(Like.objects.count(), 0)

    def test_unknown_user_raises_not_found(self):
        with self.assertRaises(UserNotFoundError):
            self.ledger.add(self.film.id, 9999)
        self.assertEqual(Like.objects.count(), 0)
