from django.db import migrations

RATINGS = [
    (1, "G"),
    (2, "PG"),
    (3, "PG-13"),
    (4, "R"),
    (5, "NC-17"),
]

GENRES = [
    (1, "Comedy"),
    (2, "Drama"),
    (3, "Animation"),
    (4, "Thriller"),
    (5, "Documentary"),
    (6, "Action"),
]


def load_reference_data(apps, schema_editor):
    Rating = apps.get_model("films", "Rating")
    Genre = apps.get_model("films", "Genre")

    for rating_id, name in RATINGS:
        Rating.objects.update_or_create(id=rating_id, defaults={"name": name})
    for genre_id, name in GENRES:
        Genre.objects.update_or_create(id=genre_id, defaults={"name": name})


def remove_reference_data(apps, schema_editor):
    Rating = apps.get_model("films", "Rating")
    Genre = apps.get_model("films", "Genre")

    Genre.objects.filter(id__in=[genre_id for genre_id, _ in GENRES]).delete()
    Rating.objects.filter(id__in=[rating_id for rating_id, _ in RATINGS]).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("films", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(load_reference_data, remove_reference_data),
    ]
