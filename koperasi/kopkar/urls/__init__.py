# kopkar/urls/__init__.py
from django.urls import path, include

urlpatterns = [
    path("auth/", include("kopkar.urls.auth_urls")),
    path("profile/", include("kopkar.urls.profile_urls")),
    path("users/", include("kopkar.urls.user_urls")),
    path("employees/", include("kopkar.urls.employee_urls")),
    path("departments/", include("kopkar.urls.department_urls")),
    path("golongan/", include("kopkar.urls.golongan_urls")),
    path("levels/", include("kopkar.urls.level_urls")),
    path("deposit-options/", include("kopkar.urls.deposit_option_urls")),
    path("settings/", include("kopkar.urls.setting_urls")),
    path("email-configs/", include("kopkar.urls.email_config_urls")),
    path("email-logs/", include("kopkar.urls.email_log_urls")),
    path("dashboard/", include("kopkar.urls.dashboard_urls")),
    # loans, deposits, deposit-withdrawals, deposit-changes, savings-withdrawals, member-applications, loan-repayments, payroll, buku-tabungan
    path("", include("kopkar.urls.router_urls")),
]
