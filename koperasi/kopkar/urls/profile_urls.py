from django.urls import path
from kopkar.views.auth_view import ChangePasswordView, ProfileView

urlpatterns = [
    # /api/profile/
    path("", ProfileView.as_view(), name="profile"),
    path("change-password/", ChangePasswordView.as_view(), name="profile-change-password"),
]
