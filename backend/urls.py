"""
URL configuration for the academy backend.

- /admin/: Django admin (Jazzmin)
- /api/academy/: Quiz sessions, notifications and token endpoints
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/academy/", include("academy.urls")),
]
