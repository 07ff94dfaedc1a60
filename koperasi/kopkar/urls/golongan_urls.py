from django.urls import path
from kopkar.views.golongan_view import (
    GolonganDetailView,
    GolonganLimitView,
    GolonganListCreateView,
)

urlpatterns = [
    # /api/golongan/
    path("", GolonganListCreateView.as_view(), name="golongan-list-create"),
    # /api/golongan/<pk>/
    path("<int:pk>/", GolonganDetailView.as_view(), name="golongan-detail"),
    path("<int:pk>/limits/", GolonganLimitView.as_view(), name="golongan-limits"),
]
