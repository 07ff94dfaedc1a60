# -*- coding: utf-8 -*-
from __future__ import annotations

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from kopkar.models import SavingsAccount
from kopkar.selectors import admin_selector
from kopkar.serializers.savings_serializer import (
    SavingsAccountSerializer, SavingsSummarySerializer, SavingsTransactionSerializer,
)
from kopkar.services import buku_tabungan_service
from kopkar.utils.auth import CookieJWTAuthentication
from kopkar.utils.pagination import DefaultPagination
from kopkar.utils.permissions import HasRole, IsVerifiedMember
from kopkar.utils.roles import STAFF_ROLES
from .utils import (
    OpenApiTypes, PAGE_PARAMS, csv_response, extend_schema, extend_schema_view, paginate, path_int, q_date, q_int, q_str, std_errors,
)

LEDGER_PARAMS = PAGE_PARAMS + [
    q_date("startDate", "Dari tanggal (YYYY-MM-DD)"),
    q_date("endDate", "Sampai tanggal (YYYY-MM-DD)"),
    q_int("periodId", "Periode payroll"),
]
LEDGER_SORT = ("transaction_date", "created_at")
MEMBER_ACTIONS = ("me", "my_transactions", "my_export")


@extend_schema_view(
    list=extend_schema(
        tags=["Buku Tabungan"],
        summary="Semua buku tabungan (pengurus)",
        parameters=PAGE_PARAMS + [q_str("search", "Nama / email / NIK"), q_int("departmentId", "Departemen")],
        responses={200: SavingsAccountSerializer(many=True), **std_errors()},
    ),
    retrieve=extend_schema(
        tags=["Buku Tabungan"],
        summary="Buku tabungan milik user",
        parameters=[path_int("id", "ID user")],
        responses={200: SavingsSummarySerializer, **std_errors()},
    ),
)
class BukuTabunganViewSet(viewsets.GenericViewSet):
    """`{id}` pada endpoint ini adalah user ID pemilik buku tabungan."""
    queryset = SavingsAccount.objects.all()
    authentication_classes = [CookieJWTAuthentication]
    pagination_class = DefaultPagination

    def get_permissions(self):
        if self.action in MEMBER_ACTIONS:
            return [IsVerifiedMember()]
        return [HasRole(*STAFF_ROLES)()]

    def _ledger(self, qs):
        return paginate(self, qs, SavingsTransactionSerializer, LEDGER_SORT, {"date": "transaction_date"})

    def list(self, request):
        return paginate(
            self, admin_selector.filter_accounts(request.query_params), SavingsAccountSerializer,
            ("created_at", "updated_at", "saldo_pokok", "saldo_wajib", "saldo_sukarela", "bunga_deposito"),
        )

    def retrieve(self, request, pk=None):
        return Response(SavingsSummarySerializer(buku_tabungan_service.account_of_user(int(pk))).data)

    @extend_schema(
        tags=["Buku Tabungan"],
        summary="Transaksi buku tabungan milik user",
        parameters=[path_int("id", "ID user")] + LEDGER_PARAMS,
        responses={200: SavingsTransactionSerializer(many=True), **std_errors()},
    )
    @action(detail=True, methods=["get"])
    def transactions(self, request, pk=None):
        filters = admin_selector.ledger_filters(request.query_params)
        return self._ledger(buku_tabungan_service.transactions_of_user(int(pk), filters))

    @extend_schema(
        tags=["Buku Tabungan"],
        summary="Ekspor CSV transaksi milik user",
        parameters=[path_int("id", "ID user")] + LEDGER_PARAMS[4:],
        responses={(200, "text/csv"): OpenApiTypes.STR, **std_errors()},
    )
    @action(detail=True, methods=["get"])
    def export(self, request, pk=None):
        filters = admin_selector.ledger_filters(request.query_params)
        qs = buku_tabungan_service.transactions_of_user(int(pk), filters).order_by("transaction_date", "id")
        return csv_response(buku_tabungan_service.csv_rows(qs), f"buku_tabungan_{pk}.csv")

    # ---- member
    @extend_schema(
        tags=["Buku Tabungan"],
        summary="Buku tabungan saya (saldo + ringkasan transaksi)",
        responses={200: SavingsSummarySerializer, **std_errors()},
    )
    @action(detail=False, methods=["get"])
    def me(self, request):
        return Response(SavingsSummarySerializer(buku_tabungan_service.my_account(request.user)).data)

    @extend_schema(
        tags=["Buku Tabungan"],
        summary="Transaksi buku tabungan saya",
        parameters=LEDGER_PARAMS,
        responses={200: SavingsTransactionSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="me/transactions")
    def my_transactions(self, request):
        filters = admin_selector.ledger_filters(request.query_params)
        return self._ledger(buku_tabungan_service.my_transactions(request.user, filters))

    @extend_schema(
        tags=["Buku Tabungan"],
        summary="Ekspor CSV transaksi saya",
        parameters=LEDGER_PARAMS[4:],
        responses={(200, "text/csv"): OpenApiTypes.STR, **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="me/export")
    def my_export(self, request):
        filters = admin_selector.ledger_filters(request.query_params)
        qs = buku_tabungan_service.my_transactions(request.user, filters).order_by("transaction_date", "id")
        return csv_response(buku_tabungan_service.csv_rows(qs), "buku_tabungan.csv")
