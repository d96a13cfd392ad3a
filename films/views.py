from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response

from likes.services import LikeLedger
from .serializers import (
    FilmSerializer,
    GenreSerializer,
    RatingSerializer,
    PopularFilmsQuerySerializer,
)
from .services.catalogs import GenreCatalog, RatingCatalog
from .services.repository import FilmRepository


class FilmListView(APIView):
    """
    GET  /api/films/  -> every film
    POST /api/films/  -> create a film
    PUT  /api/films/  -> replace a film (body must carry its id)
    """

    def get(self, request):
        films = FilmRepository().get_all()
        return Response(FilmSerializer(films, many=True).data)

    def post(self, request):
        serializer = FilmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        film = FilmRepository().create(serializer.to_aggregate())
        return Response(FilmSerializer(film).data, status=status.HTTP_201_CREATED)

    def put(self, request):
        serializer = FilmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        film = FilmRepository().update(serializer.to_aggregate())
        return Response(FilmSerializer(film).data)


class FilmDetailView(APIView):
    def get(self, request, film_id):
        film = FilmRepository().get_by_id(film_id)
        return Response(FilmSerializer(film).data)


class FilmLikeView(APIView):
    """
    PUT    /api/films/<id>/like/<user_id>/  -> like
    DELETE /api/films/<id>/like/<user_id>/  -> unlike
    """

    def put(self, request, film_id, user_id):
        LikeLedger().add(film_id, user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def delete(self, request, film_id, user_id):
        LikeLedger().remove(film_id, user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PopularFilmsView(APIView):
    """
    GET /api/films/popular/?count=10&genre_id=1&year=2020

    Most liked films first, optionally narrowed by genre and release year.
    """

    def get(self, request):
        params = PopularFilmsQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        films = FilmRepository().get_ranked(
            genre_id=params.validated_data.get("genre_id"),
            year=params.validated_data.get("year"),
            limit=params.validated_data["count"],
        )
        return Response(FilmSerializer(films, many=True).data)


class GenreListView(APIView):
    def get(self, request):
        return Response(GenreSerializer(GenreCatalog().get_all(), many=True).data)


class GenreDetailView(APIView):
    def get(self, request, genre_id):
        return Response(GenreSerializer(GenreCatalog().get_by_id(genre_id)).data)


class RatingListView(APIView):
    def get(self, request):
        return Response(RatingSerializer(RatingCatalog().get_all(), many=True).data)


class RatingDetailView(APIView):
    def get(self, request, rating_id):
        return Response(RatingSerializer(RatingCatalog().get_by_id(rating_id)).data)
