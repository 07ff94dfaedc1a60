from django.urls import path
from kopkar.views.dashboard_view import DashboardSummaryView

urlpatterns = [
    # /api/dashboard/
    path("summary/", DashboardSummaryView.as_view(), name="dashboard-summary"),
]
