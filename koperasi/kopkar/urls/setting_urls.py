from django.urls import path
from kopkar.views.setting_view import (
    ApprovalFlowDetailView,
    ApprovalFlowListView,
    SettingDetailView,
    SettingListView,
)

urlpatterns = [
    # /api/settings/
    path("", SettingListView.as_view(), name="setting-list"),
    path("approval-flows/", ApprovalFlowListView.as_view(), name="approval-flow-list"),
    path("approval-flows/<str:object_type>/", ApprovalFlowDetailView.as_view(), name="approval-flow-detail"),
    # /api/settings/<key>/
    path("<str:key>/", SettingDetailView.as_view(), name="setting-detail"),
]
