from django.urls import path
from kopkar.views.level_view import (
    LevelDetailView,
    LevelListCreateView,
    LevelUserRemoveView,
    LevelUsersView,
)

urlpatterns = [
    # /api/levels/
    path("", LevelListCreateView.as_view(), name="level-list-create"),
    # /api/levels/<pk>/
    path("<int:pk>/", LevelDetailView.as_view(), name="level-detail"),
    path("<int:pk>/users/", LevelUsersView.as_view(), name="level-users"),
    path("<int:pk>/users/<int:user_id>/", LevelUserRemoveView.as_view(), name="level-user-remove"),
]
