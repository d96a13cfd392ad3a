from django.contrib import admin
from .models import Film, Genre, Rating, FilmGenre


@admin.register(Film)
class FilmAdmin(admin.ModelAdmin):
    list_display = ("name", "release_date", "duration", "rating")
    search_fields = ("name",)
    list_filter = ("rating", "genres")


admin.site.register(Genre)
admin.site.register(Rating)
admin.site.register(FilmGenre)
