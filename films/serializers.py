from datetime import date

from rest_framework import serializers

from .domain import FilmAggregate
from .models import Genre, Rating

# first public film screening
EARLIEST_RELEASE_DATE = date(1895, 12, 28)


class GenreSerializer(serializers.ModelSerializer):
    class Meta:
        model = Genre
        fields = ["id", "name"]


class RatingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Rating
        fields = ["id", "name"]


class ReferenceSerializer(serializers.Serializer):
    """Nested ``{"id": ...}`` reference; the name is only ever output."""
    id = serializers.IntegerField()
    name = serializers.CharField(read_only=True)


class FilmSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(
        max_length=200, allow_blank=True, required=False, default=""
    )
    release_date = serializers.DateField()
    duration = serializers.IntegerField(min_value=1)
    rate = serializers.IntegerField(required=False, default=0)
    rating = ReferenceSerializer()
    genres = ReferenceSerializer(many=True, required=False)
    likes = serializers.SerializerMethodField()
    popularity = serializers.IntegerField(read_only=True)

    def validate_release_date(self, value):
        if value < EARLIEST_RELEASE_DATE:
            raise serializers.ValidationError(
                f"release_date must not be earlier than {EARLIEST_RELEASE_DATE}."
            )
        return value

    def get_likes(self, obj):
        return sorted(obj.likes)

    def to_aggregate(self) -> FilmAggregate:
        data = self.validated_data
        genres = data.get("genres")
        return FilmAggregate(
            id=data.get("id"),
            name=data["name"],
            release_date=data["release_date"],
            description=data["description"],
            duration=data["duration"],
            rate=data["rate"],
            rating=Rating(id=data["rating"]["id"]),
            # a missing "genres" key leaves stored genres untouched on update
            genres=None if genres is None else [Genre(id=g["id"]) for g in genres],
        )


class PopularFilmsQuerySerializer(serializers.Serializer):
    """Validates query params for /films/popular/."""
    count = serializers.IntegerField(required=False, default=10, min_value=1)
    genre_id = serializers.IntegerField(required=False)
    year = serializers.IntegerField(required=False)
