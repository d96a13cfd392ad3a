"""
Lookup errors raised by the film repository, the catalogs and the like
ledger, plus the DRF exception handler that maps them onto HTTP responses.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler


class NotFoundError(Exception):
    """An identifier did not resolve to a stored record."""

    entity = "Object"

    def __init__(self, object_id):
        self.object_id = object_id
        super().__init__(f"{self.entity} with id {object_id} not found")


class FilmNotFoundError(NotFoundError):
    entity = "Film"


class GenreNotFoundError(NotFoundError):
    entity = "Genre"


class RatingNotFoundError(NotFoundError):
    entity = "Rating"


class UserNotFoundError(NotFoundError):
    entity = "User"


class ConsistencyFault(NotFoundError):
    """
    A stored film references a genre or rating that its catalog cannot
    resolve. Callers see it as a NotFoundError.
    """

    def __init__(self, film_id, cause: NotFoundError):
        self.film_id = film_id
        self.cause = cause
        Exception.__init__(
            self, f"Film with id {film_id} references a missing record: {cause}"
        )
        self.object_id = cause.object_id


def api_exception_handler(exc, context):
    if isinstance(exc, NotFoundError):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, ValueError):
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    return exception_handler(exc, context)
