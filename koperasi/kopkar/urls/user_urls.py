from django.urls import path
from kopkar.views.user_view import (
    UserDetailView,
    UserListCreateView,
    UserRolesView,
)

urlpatterns = [
    # /api/users/
    path("", UserListCreateView.as_view(), name="user-list-create"),
    # /api/users/<pk>/
    path("<int:pk>/", UserDetailView.as_view(), name="user-detail"),
    path("<int:pk>/roles/", UserRolesView.as_view(), name="user-roles"),
]
