# -*- coding: utf-8 -*-
from __future__ import annotations
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from kopkar.views.buku_tabungan_view import BukuTabunganViewSet
from kopkar.views.deposit_change_view import DepositChangeViewSet
from kopkar.views.deposit_view import DepositViewSet
from kopkar.views.deposit_withdrawal_view import DepositWithdrawalViewSet
from kopkar.views.loan_view import LoanViewSet
from kopkar.views.member_application_view import MemberApplicationViewSet
from kopkar.views.payroll_view import PayrollViewSet
from kopkar.views.repayment_view import LoanRepaymentViewSet
from kopkar.views.savings_withdrawal_view import SavingsWithdrawalViewSet

router = DefaultRouter()
router.register(r"loans", LoanViewSet, basename="loan")
router.register(r"loan-repayments", LoanRepaymentViewSet, basename="loan-repayment")
router.register(r"deposits", DepositViewSet, basename="deposit")
router.register(r"deposit-withdrawals", DepositWithdrawalViewSet, basename="deposit-withdrawal")
router.register(r"deposit-changes", DepositChangeViewSet, basename="deposit-change")
router.register(r"savings-withdrawals", SavingsWithdrawalViewSet, basename="savings-withdrawal")
router.register(r"member-applications", MemberApplicationViewSet, basename="member-application")
router.register(r"payroll", PayrollViewSet, basename="payroll")
router.register(r"buku-tabungan", BukuTabunganViewSet, basename="buku-tabungan")

urlpatterns = [
    path("", include(router.urls)),
]
