# -*- coding: utf-8 -*-
from __future__ import annotations

from rest_framework.response import Response
from rest_framework.views import APIView

from kopkar.serializers.dashboard_serializer import DashboardSummarySerializer
from kopkar.services import dashboard_service
from kopkar.utils.auth import CookieJWTAuthentication
from kopkar.utils.permissions import IsAuthenticatedUser
from .utils import extend_schema, std_errors


class DashboardSummaryView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticatedUser]

    @extend_schema(
        tags=["Dashboard"],
        summary="Ringkasan dashboard",
        description="Saldo, deposito aktif, sisa pinjaman, tagihan berikutnya, aktivitas, grafik 6 bulan, dan transaksi terakhir.",
        responses={200: DashboardSummarySerializer, **std_errors()},
    )
    def get(self, request):
        return Response(DashboardSummarySerializer(dashboard_service.summary(request.user)).data)
