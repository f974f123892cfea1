# apps/htmlclient/urls.py
from django.urls import path

from .views import BasketAddView, ClientPageView

app_name = "htmlclient"

urlpatterns = [
    path("basket/add/", BasketAddView.as_view(), name="basket-add"),
    path("p/<slug:page>/", ClientPageView.as_view(), name="page"),
]
