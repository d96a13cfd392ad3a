from django.core.validators import MinValueValidator
from django.db import models


class Rating(models.Model):
    # age classification: G, PG, PG-13, R, NC-17
    id = models.IntegerField(primary_key=True)
    name = models.CharField(max_length=20, unique=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return self.name


class Genre(models.Model):
    id = models.IntegerField(primary_key=True)
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return self.name


class Film(models.Model):
    name = models.CharField(max_length=255)
    release_date = models.DateField()
    description = models.TextField(blank=True, default="")
    duration = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    # legacy counter, ranking uses like counts instead
    rate = models.IntegerField(default=0)
    rating = models.ForeignKey(
        Rating,
        on_delete=models.PROTECT,
        related_name="films",
    )

    genres = models.ManyToManyField(
        Genre,
        through="FilmGenre",
        related_name="films",
        blank=True,
    )

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["release_date"], name="film_release_date_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.release_date.year})"


class FilmGenre(models.Model):
    film = models.ForeignKey(
        Film, on_delete=models.CASCADE, related_name="film_genres"
    )
    genre = models.ForeignKey(
        Genre, on_delete=models.CASCADE, related_name="film_genres"
    )

    class Meta:
        unique_together = ("film", "genre")
        indexes = [
            models.Index(fields=["genre"], name="filmgenre_genre_idx"),
        ]

    def __str__(self):
        return f"{self.film} – {self.genre}"
