"""
The like ledger: the set of (film, user) endorsement pairs that film
popularity is derived from.
"""

import logging
from typing import Set

from django.contrib.auth import get_user_model
from django.db import transaction

from films.exceptions import FilmNotFoundError, UserNotFoundError
from films.models import Film
from .models import Like

User = get_user_model()

logger = logging.getLogger(__name__)


class LikeLedger:
    def add(self, film_id: int, user_id: int) -> None:
        """Record that the user likes the film. Liking twice changes nothing."""
        with transaction.atomic():
            self._ensure_film(film_id)
            if not User.objects.filter(pk=user_id).exists():
                raise UserNotFoundError(user_id)

            _, created = Like.objects.get_or_create(film_id=film_id, user_id=user_id)

        if created:
            logger.info("User %s liked film %s", user_id, film_id)

    def remove(self, film_id: int, user_id: int) -> None:
        """Withdraw a like. Removing a like that does not exist is a no-op."""
        with transaction.atomic():
            self._ensure_film(film_id)
            deleted, _ = Like.objects.filter(film_id=film_id, user_id=user_id).delete()

        if deleted:
            logger.info("User %s removed like from film %s", user_id, film_id)

    def count_for(self, film_id: int) -> int:
        return Like.objects.filter(film_id=film_id).values("user_id").distinct().count()

    def users_for(self, film_id: int) -> Set[int]:
        return set(
            Like.objects.filter(film_id=film_id).values_list("user_id", flat=True)
        )

    @staticmethod
    def _ensure_film(film_id: int) -> None:
        if not Film.objects.filter(pk=film_id).exists():
            raise FilmNotFoundError(film_id)
