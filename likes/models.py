from django.db import models
from django.contrib.auth import get_user_model
from films.models import Film

User = get_user_model()


class Like(models.Model):
    film = models.ForeignKey(
        Film, on_delete=models.CASCADE, related_name="likes"
    )
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="film_likes"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["film", "user"],
                name="unique_like_per_film_and_user",
            )
        ]

    def __str__(self):
        return f"{self.user} → {self.film}"
