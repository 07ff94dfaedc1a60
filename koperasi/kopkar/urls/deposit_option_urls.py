from django.urls import path
from kopkar.views.deposit_view import (
    DepositConfigView,
    DepositOptionDetailView,
    DepositOptionListCreateView,
)

urlpatterns = [
    # /api/deposit-options/  (opsi aktif + suku bunga)
    path("", DepositConfigView.as_view(), name="deposit-option-config"),
    # /api/deposit-options/<amount|tenor>/
    path("<str:kind>/", DepositOptionListCreateView.as_view(), name="deposit-option-list-create"),
    path("<str:kind>/<int:pk>/", DepositOptionDetailView.as_view(), name="deposit-option-detail"),
]
