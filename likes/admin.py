from django.contrib import admin
from .models import Like


@admin.register(Like)
class LikeAdmin(admin.ModelAdmin):
    list_display = ("user", "film", "created_at")
    search_fields = ("user__username", "film__name")
    list_filter = ("film",)
