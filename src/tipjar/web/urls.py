"""
URL configuration for the tipjar JSON API.
"""

from django.urls import path

from . import views

urlpatterns = [
    path("api/health", views.health, name="health"),
    path("api/extract", views.extract_upload, name="extract"),
    path("api/parse", views.parse_text, name="parse"),
    path("api/distribute", views.distribute_tips, name="distribute"),
]
