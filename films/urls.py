from django.urls import path

from .views import (
    FilmListView,
    FilmDetailView,
    FilmLikeView,
    PopularFilmsView,
    GenreListView,
    GenreDetailView,
    RatingListView,
    RatingDetailView,
)

urlpatterns = [
    path("films/", FilmListView.as_view(), name="film-list"),
    path("films/popular/", PopularFilmsView.as_view(), name="film-popular"),
    path("films/<int:film_id>/", FilmDetailView.as_view(), name="film-detail"),
    path(
        "films/<int:film_id>/like/<int:user_id>/",
        FilmLikeView.as_view(),
        name="film-like",
    ),
    path("genres/", GenreListView.as_view(), name="genre-list"),
    path("genres/<int:genre_id>/", GenreDetailView.as_view(), name="genre-detail"),
    path("ratings/", RatingListView.as_view(), name="rating-list"),
    path("ratings/<int:rating_id>/", RatingDetailView.as_view(), name="rating-detail"),
]
