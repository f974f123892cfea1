"""URL configuration for the vitrine project."""
from django.urls import include, path
from django.views.generic import RedirectView

urlpatterns = [
    path("", RedirectView.as_view(url="/p/catalog/", permanent=False)),
    path("", include("apps.htmlclient.urls")),
]
