"""
Popularity ranking for films.

Popularity is the number of distinct users currently liking a film. It is
never stored; every query aggregates it from the like table. The listing can
be narrowed by genre membership and by release year, and bounded by a limit.
Each narrowing is an independent predicate, so any combination of them is
one queryset with the predicates ANDed together.
"""

from typing import List, Optional

from django.db.models import Count, Q, QuerySet

from films.models import Film


class PopularFilmsQuery:
    """
    Builds the ranked film queryset.

    Films with no likes rank with popularity 0 and are still listed. Films
    with equal popularity are ordered by id ascending.
    """

    def __init__(
        self,
        genre_id: Optional[int] = None,
        year: Optional[int] = None,
        limit: Optional[int] = None,
    ):
        if limit is not None and limit < 0:
            raise ValueError("limit must not be negative.")
        self.genre_id = genre_id
        self.year = year
        self.limit = limit

    def predicates(self) -> List[Q]:
        predicates = []
        if self.genre_id is not None:
            predicates.append(Q(film_genres__genre_id=self.genre_id))
        if self.year is not None:
            predicates.append(Q(release_date__year=self.year))
        return predicates

    def queryset(self) -> QuerySet:
        qs = Film.objects.select_related("rating")

        for predicate in self.predicates():
            qs = qs.filter(predicate)

        qs = qs.annotate(popularity=Count("likes__user", distinct=True)).order_by(
            "-popularity", "id"
        )

        if self.limit is not None:
            qs = qs[: self.limit]
        return qs
