# -*- coding: utf-8 -*-
from __future__ import annotations

from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from kopkar.models import PayrollPeriod
from kopkar.selectors.common import as_int
from kopkar.serializers.payroll_serializer import (
    PayrollPeriodSerializer, PayrollProcessSerializer, PayrollStatusSerializer,
)
from kopkar.serializers.savings_serializer import SavingsTransactionSerializer
from kopkar.services import payroll_service
from kopkar.utils.auth import CookieJWTAuthentication
from kopkar.utils.pagination import DefaultPagination
from kopkar.utils.permissions import HasRole
from kopkar.utils.roles import PAYROLL_ROLES
from .utils import CONFLICT, PAGE_PARAMS, extend_schema, extend_schema_view, paginate, path_int, q_int, std_errors


@extend_schema_view(
    list=extend_schema(
        tags=["Payroll"],
        summary="Daftar periode payroll",
        parameters=PAGE_PARAMS,
        responses={200: PayrollPeriodSerializer(many=True), **std_errors()},
    ),
    retrieve=extend_schema(
        tags=["Payroll"],
        summary="Detail periode payroll",
        parameters=[path_int("id", "ID periode")],
        responses={200: PayrollPeriodSerializer, **std_errors()},
    ),
)
class PayrollViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = PayrollPeriod.objects.all()
    serializer_class = PayrollPeriodSerializer
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [HasRole(*PAYROLL_ROLES)]
    pagination_class = DefaultPagination

    def list(self, request):
        return paginate(
            self, payroll_service.list_periods(), PayrollPeriodSerializer,
            ("created_at", "year", "month", "processed_at", "total_amount"),
        )

    def retrieve(self, request, pk=None):
        return Response(PayrollPeriodSerializer(payroll_service.get_period(int(pk))).data)

    @extend_schema(
        tags=["Payroll"],
        summary="Status periode (jendela cutoff, sudah diproses?)",
        parameters=[q_int("month", "Bulan (default bulan ini)"), q_int("year", "Tahun (default tahun ini)")],
        responses={200: PayrollStatusSerializer, **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="status")
    def period_status(self, request):
        today = timezone.localdate()
        month = as_int(request.query_params.get("month")) or today.month
        year = as_int(request.query_params.get("year")) or today.year
        return Response(PayrollStatusSerializer(payroll_service.status(month, year)).data)

    @extend_schema(
        tags=["Payroll"],
        summary="Proses payroll bulanan",
        description=(
            "Iuran pendaftaran, iuran bulanan, setoran deposito, angsuran pinjaman dan bunga "
            "diproses dalam satu transaksi. Periode yang sudah diproses → 409."
        ),
        request=PayrollProcessSerializer,
        responses={201: PayrollPeriodSerializer, **std_errors(CONFLICT)},
    )
    @action(detail=False, methods=["post"])
    def process(self, request):
        ser = PayrollProcessSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        period = payroll_service.process_payroll(actor=request.user, **ser.validated_data)
        return Response(PayrollPeriodSerializer(period).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Payroll"],
        summary="Transaksi buku tabungan pada periode",
        parameters=[path_int("id", "ID periode")] + PAGE_PARAMS,
        responses={200: SavingsTransactionSerializer(many=True), **std_errors()},
    )
    @action(detail=True, methods=["get"])
    def transactions(self, request, pk=None):
        period = payroll_service.get_period(int(pk))
        return paginate(
            self, payroll_service.period_transactions(period.id), SavingsTransactionSerializer,
            ("created_at", "transaction_date"),
        )
