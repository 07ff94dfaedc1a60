from django.urls import path
from kopkar.views.employee_view import (
    EmployeeDetailView,
    EmployeeExportView,
    EmployeeImportView,
    EmployeeListCreateView,
    EmployeeToggleActiveView,
)

urlpatterns = [
    # /api/employees/
    path("", EmployeeListCreateView.as_view(), name="employee-list-create"),
    path("import/", EmployeeImportView.as_view(), name="employee-import"),
    path("export/", EmployeeExportView.as_view(), name="employee-export"),
    # /api/employees/<pk>/
    path("<int:pk>/", EmployeeDetailView.as_view(), name="employee-detail"),
    path("<int:pk>/toggle-active/", EmployeeToggleActiveView.as_view(), name="employee-toggle-active"),
]
