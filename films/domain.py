from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Set

from .models import Genre, Rating


@dataclass
class FilmAggregate:
    """
    A film as callers see it: scalar attributes plus its resolved rating,
    genres and liking users.

    On input, ``genres=None`` means "leave the stored genres alone" while an
    empty list means "no genres". Aggregates read back from storage always
    carry a list.
    """

    name: str
    release_date: date
    description: str
    duration: int
    rating: Rating
    id: Optional[int] = None
    rate: int = 0
    genres: Optional[List[Genre]] = None
    likes: Set[int] = field(default_factory=set)
    popularity: int = 0
