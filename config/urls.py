"""
URL configuration for the donation server.
"""
from django.urls import include, path

urlpatterns = [
    path("api/", include("donations.urls")),
]
