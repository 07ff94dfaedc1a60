from django.urls import path
from kopkar.views.email_view import (
    EmailConfigActivateView,
    EmailConfigDetailView,
    EmailConfigListCreateView,
    EmailConfigTestView,
)

urlpatterns = [
    # /api/email-configs/
    path("", EmailConfigListCreateView.as_view(), name="email-config-list-create"),
    # /api/email-configs/<pk>/
    path("<int:pk>/", EmailConfigDetailView.as_view(), name="email-config-detail"),
    path("<int:pk>/activate/", EmailConfigActivateView.as_view(), name="email-config-activate"),
    path("<int:pk>/test/", EmailConfigTestView.as_view(), name="email-config-test"),
]
