from django.urls import path
from kopkar.views.email_view import EmailLogDetailView, EmailLogListView

urlpatterns = [
    # /api/email-logs/
    path("", EmailLogListView.as_view(), name="email-log-list"),
    path("<int:pk>/", EmailLogDetailView.as_view(), name="email-log-detail"),
]
