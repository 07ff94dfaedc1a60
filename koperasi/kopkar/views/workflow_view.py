# -*- coding: utf-8 -*-
"""
Base ViewSet for approvable resources (loan, deposit, deposit withdrawal,
deposit change, savings withdrawal, member application, loan repayment).

Subclasses provide `flow`, the read/detail serializers and the three hooks
below; the approval endpoints are shared:
    GET  <prefix>/pending-approval/
    POST <prefix>/{id}/approve/
    POST <prefix>/bulk-approve/
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from kopkar.serializers.common import BulkDecisionSerializer, BulkResultSerializer, DecisionSerializer
from kopkar.utils.auth import CookieJWTAuthentication
from kopkar.utils.pagination import DefaultPagination
from kopkar.utils.permissions import HasRole, IsAuthenticatedUser
from kopkar.utils.roles import APPROVER_ROLES
from .utils import WORKFLOW_FILTERS, extend_schema, path_int, paginate, std_errors, trail_context

APPROVAL_ACTIONS = ("pending_approval", "approve", "bulk_approve")


class WorkflowViewSet(viewsets.GenericViewSet):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticatedUser]
    pagination_class = DefaultPagination

    flow = None
    read_serializer_class = None
    detail_serializer_class = None
    sort_fields = ("created_at", "submitted_at", "status")
    sort_aliases: Dict[str, str] = {}
    # action name -> permission classes; approval actions default to approver roles
    action_permissions: Dict[str, List[Any]] = {}

    def get_permissions(self):
        if self.action in self.action_permissions:
            classes = self.action_permissions[self.action]
        elif self.action in APPROVAL_ACTIONS:
            classes = [HasRole(*APPROVER_ROLES)]
        else:
            classes = self.permission_classes
        return [cls() for cls in classes]

    # ---- hooks
    def pending_queryset(self, user, params):
        raise NotImplementedError

    def decide(self, obj_id: int, user, decision: str, notes: str):
        raise NotImplementedError

    def bulk_decide(self, ids: Iterable[int], user, decision: str, notes: str) -> Dict[str, List]:
        raise NotImplementedError

    # ---- helpers
    def page(self, qs):
        return paginate(self, qs, self.read_serializer_class, self.sort_fields, self.sort_aliases)

    def detail_response(self, obj, status_code=status.HTTP_200_OK):
        data = self.detail_serializer_class(obj, context=trail_context(self.flow, obj)).data
        return Response(data, status=status_code)

    def bulk_response(self, message: str, results: Dict[str, List]):
        return Response({
            "message": f"{message}: {len(results['success'])} berhasil, {len(results['failed'])} gagal",
            "results": results,
        })

    # ---- shared approval endpoints
    @extend_schema(
        summary="Daftar pengajuan yang menunggu persetujuan pada tahap saya",
        parameters=WORKFLOW_FILTERS,
        responses={200: None, **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="pending-approval")
    def pending_approval(self, request):
        return self.page(self.pending_queryset(request.user, request.query_params))

    @extend_schema(
        summary="Setujui / tolak pada tahap saat ini",
        description="`decision`: APPROVED | REJECTED. `notes` wajib saat menolak.",
        parameters=[path_int("id", "ID pengajuan")],
        request=DecisionSerializer,
        responses={200: None, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        ser = DecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        obj = self.decide(int(pk), request.user, ser.validated_data["decision"], ser.validated_data["notes"])
        return self.detail_response(obj)

    @extend_schema(
        summary="Setujui / tolak banyak pengajuan sekaligus",
        description="Setiap ID diproses dalam transaksi sendiri; hasil per item dikembalikan.",
        request=BulkDecisionSerializer,
        responses={200: BulkResultSerializer, **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="bulk-approve")
    def bulk_approve(self, request):
        ser = BulkDecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data
        results = self.bulk_decide(v["ids"], request.user, v["decision"], v["notes"])
        return self.bulk_response("Proses persetujuan selesai", results)
